"""Background event loop hosting the Atlas services.

The roster, the converter and the HTTP clients live on one asyncio loop run
by a daemon thread. Front ends that render synchronously (Streamlit) submit
coroutines to it and read state back.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import threading
from concurrent.futures import Future
from typing import Any, Coroutine, Optional, TypeVar

from atlas.dashboard.state import Store
from atlas.shared.core.configuration import SystemConfig
from atlas.shared.core.event_bus import EventBus
from atlas.shared.infrastructure.http.countries import CountryLookupClient
from atlas.shared.infrastructure.http.rates import RateConversionClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceRuntime:
    """Owns the service loop thread and the Store built on it."""

    def __init__(self, config: SystemConfig) -> None:
        self.config = config
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="AtlasServiceLoop",
        )
        self.store: Optional[Store] = None
        self._lookup_client: Optional[CountryLookupClient] = None
        self._rate_client: Optional[RateConversionClient] = None
        self._stopped = False

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

        # Loop stopped: cancel whatever is left and close
        try:
            pending = asyncio.all_tasks(self.loop)
            for task in pending:
                task.cancel()
            if pending:
                self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        finally:
            self.loop.close()

    def start(self, timeout: float = 60.0) -> Store:
        """Start the loop thread, build the Store and mount it.

        Blocks until the roster is loaded and the first conversion is triggered.
        """
        self._thread.start()
        self.store = self.submit(self._init_services(), timeout=timeout)
        atexit.register(self.stop)
        logger.info("Service runtime started")
        return self.store

    async def _init_services(self) -> Store:
        services = self.config.services
        self._lookup_client = CountryLookupClient(
            services.countries_base_url,
            timeout=services.timeout,
            user_agent=services.user_agent,
        )
        self._rate_client = RateConversionClient(
            services.rates_base_url,
            timeout=services.timeout,
            user_agent=services.user_agent,
        )

        Store.reset()
        store = Store.initialize(EventBus(), self.config, self._lookup_client, self._rate_client)
        await store.mount()
        logger.info("Store mounted")
        return store

    def submit(self, coro: Coroutine[Any, Any, T], timeout: Optional[float] = None) -> T:
        """Run a coroutine on the service loop and wait for its result."""
        future: Future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return future.result(timeout=timeout)

    async def _shutdown(self) -> None:
        if self.store is not None:
            await self.store.converter.aclose()
            await self.store.bus.wait_until_idle(timeout=2.0)
        for client in (self._lookup_client, self._rate_client):
            if client is not None:
                await client.aclose()

    def stop(self, timeout: float = 5.0) -> None:
        """Close clients and stop the loop thread."""
        if self._stopped or not self._thread.is_alive():
            return
        self._stopped = True
        try:
            self.submit(self._shutdown(), timeout=timeout)
        except Exception as e:
            logger.warning(f"Error during runtime shutdown: {e}")
        finally:
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(timeout=timeout)
            Store.reset()
            logger.info("Service runtime stopped")
