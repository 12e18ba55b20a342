"""Global State Store - Service Locator Pattern.

Provides centralized access to the shell state, the roster and the converter
from any UI component.
"""

from __future__ import annotations

from typing import Optional

from .app_state import AppState
from atlas.shared.core.configuration import SystemConfig
from atlas.shared.core.event_bus import EventBus
from atlas.shared.domain.converter.service import CurrencyConverter, RateConversion
from atlas.shared.domain.roster.service import CountryLookup, CountryRoster


class Store:
    """Global state store for the dashboard.

    Usage:
        # During app initialization
        Store.initialize(event_bus, config, lookup_client, rate_client)

        # In any UI component
        store = Store.get()
        await store.roster.remove("BRA")
    """

    _instance: Optional['Store'] = None

    def __init__(
        self,
        event_bus: EventBus,
        config: SystemConfig,
        lookup_client: CountryLookup,
        rate_client: RateConversion,
    ) -> None:
        """Build state objects from configuration.

        Note: Do not call directly. Use Store.initialize() instead.
        """
        self.bus = event_bus
        self.config = config
        self.app = AppState(
            event_bus,
            dark_mode=config.ui.dark_mode,
            log_feed_size=config.ui.log_feed_size,
        )
        self.roster = CountryRoster(
            event_bus,
            lookup_client,
            initial_names=config.roster.initial_countries,
        )
        self.converter = CurrencyConverter(
            event_bus,
            rate_client,
            currencies=config.converter.currencies,
            amount=config.converter.default_amount,
            source=config.converter.default_source,
            target=config.converter.default_target,
            error_message=config.converter.error_message,
        )

    @classmethod
    def initialize(
        cls,
        event_bus: EventBus,
        config: SystemConfig,
        lookup_client: CountryLookup,
        rate_client: RateConversion,
    ) -> 'Store':
        """Initialize the global store instance.

        Raises:
            RuntimeError: If store is already initialized
        """
        if cls._instance is not None:
            raise RuntimeError("Store already initialized!")

        cls._instance = cls(event_bus, config, lookup_client, rate_client)
        return cls._instance

    @classmethod
    def get(cls) -> 'Store':
        """Get the global store instance.

        Raises:
            RuntimeError: If store has not been initialized
        """
        if cls._instance is None:
            raise RuntimeError("Store not initialized! Call Store.initialize() first.")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the store instance (tests and runtime shutdown)."""
        cls._instance = None

    async def mount(self) -> None:
        """Wire subscriptions, load the roster and run the first conversion."""
        await self.app.initialize()
        await self.roster.load()
        await self.converter.start()
