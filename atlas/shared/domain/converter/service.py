"""Currency Converter Service for Atlas.

Recomputes the converted amount whenever amount, source or target changes.
Only the most recently triggered computation may commit: each trigger bumps a
generation counter and cancels the previous in-flight request, and a
completion carrying an older generation is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Protocol

from atlas.shared.core import events
from atlas.shared.core.event_bus import EventBus
from atlas.shared.domain.models import ConverterState, ConverterStatus
from atlas.shared.infrastructure.http.base import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_CURRENCIES = ("BRL", "USD", "EUR", "GBP", "CAD")
DEFAULT_ERROR_MESSAGE = "Conversion unavailable for this currency."


class RateConversion(Protocol):
    async def convert(self, amount: float, source: str, target: str) -> float: ...


def format_result(value: float) -> str:
    """Two decimals, as shown next to the target currency."""
    return f"{value:.2f}"


def format_rate(value: float) -> str:
    """Four decimals, as shown in the exchange rate line."""
    return f"{value:.4f}"


class CurrencyConverter:
    """Idle/Loading/Error/Settled state machine over a remote rate service."""

    def __init__(
        self,
        event_bus: EventBus,
        client: RateConversion,
        currencies: Iterable[str] = DEFAULT_CURRENCIES,
        amount: float = 1.0,
        source: str = "BRL",
        target: str = "USD",
        error_message: str = DEFAULT_ERROR_MESSAGE,
        strict_currencies: bool = True,
    ):
        """Initialize the converter.

        Args:
            event_bus: Event bus used to announce committed transitions
            client: Rate conversion adapter
            currencies: Codes accepted as source/target
            amount: Initial amount
            source: Initial source currency
            target: Initial target currency
            error_message: Fixed user-facing message for failed conversions
            strict_currencies: Reject codes outside ``currencies``
        """
        self.event_bus = event_bus
        self.client = client
        self.currencies = tuple(code.upper() for code in currencies)
        self.error_message = error_message
        self.strict_currencies = strict_currencies

        self._state = ConverterState(
            amount=amount,
            source=self._check_code(source),
            target=self._check_code(target),
        )
        # Inputs last acted upon; None until the first recompute
        self._last_inputs: Optional[tuple] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    # --- Queries ---

    @property
    def state(self) -> ConverterState:
        """Snapshot of the current state."""
        return self._state.snapshot()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- Inputs ---

    async def start(self) -> None:
        """Run the initial computation for the default inputs."""
        await self._recompute()

    async def set_amount(self, amount: float) -> None:
        await self.update(amount=amount)

    async def set_source(self, source: str) -> None:
        await self.update(source=source)

    async def set_target(self, target: str) -> None:
        await self.update(target=target)

    async def swap(self) -> None:
        """Exchange source and target."""
        await self.update(source=self._state.target, target=self._state.source)

    async def update(
        self,
        amount: Optional[float] = None,
        source: Optional[str] = None,
        target: Optional[str] = None,
    ) -> None:
        """Apply input changes and recompute if any tracked input differs.

        Raises:
            ValueError: A currency code outside the configured set (strict mode)
        """
        changes = {}
        if amount is not None:
            changes["amount"] = float(amount)
        if source is not None:
            changes["source"] = self._check_code(source)
        if target is not None:
            changes["target"] = self._check_code(target)

        self._state = self._state.model_copy(update=changes)
        if self._state.inputs == self._last_inputs:
            return
        await self._recompute()

    def _check_code(self, code: str) -> str:
        code = code.strip().upper()
        if self.strict_currencies and code not in self.currencies:
            raise ValueError(f"Unsupported currency {code!r}; expected one of {self.currencies}")
        return code

    # --- State machine ---

    async def _recompute(self) -> None:
        """Transition for the current inputs, superseding any earlier trigger."""
        self._last_inputs = self._state.inputs
        self._generation += 1
        generation = self._generation
        self._cancel_in_flight()

        amount, source, target = self._state.inputs

        if amount <= 0:
            await self._commit(
                generation,
                result=0.0,
                rate=0.0,
                status=ConverterStatus.IDLE,
                error=None,
            )
            return

        if source == target:
            await self._commit(
                generation,
                result=amount,
                rate=1.0,
                status=ConverterStatus.SETTLED,
                error=None,
            )
            return

        await self._commit(generation, status=ConverterStatus.LOADING, error=None)
        self._task = asyncio.create_task(self._convert(generation, amount, source, target))

    async def _convert(self, generation: int, amount: float, source: str, target: str) -> None:
        try:
            result = await self.client.convert(amount, source, target)
        except ServiceError as e:
            logger.warning(f"Conversion {amount} {source}->{target} failed: {e}")
            await self._commit(generation, status=ConverterStatus.ERROR, error=self.error_message)
            return
        except Exception:
            logger.exception(f"Unexpected error converting {amount} {source}->{target}")
            await self._commit(generation, status=ConverterStatus.ERROR, error=self.error_message)
            return

        await self._commit(
            generation,
            result=result,
            rate=result / amount,
            status=ConverterStatus.SETTLED,
            error=None,
        )

    async def _commit(self, generation: int, **changes) -> bool:
        """Apply changes if ``generation`` is still the latest trigger."""
        if generation != self._generation:
            logger.debug(f"Discarding stale converter result (generation {generation} < {self._generation})")
            return False

        self._state = self._state.model_copy(update=changes)
        await self.event_bus.publish(
            events.TOPIC_CONVERTER_CHANGED,
            events.create_converter_changed_event(self._state.to_payload(), generation),
        )
        return True

    def _cancel_in_flight(self) -> None:
        if self.in_flight:
            self._task.cancel()
        self._task = None

    async def wait_until_settled(self) -> ConverterState:
        """Wait for the in-flight request (if any) and return the state."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # Superseded while waiting; follow the newer task, unless we
                # ourselves are being cancelled
                if not task.cancelled():
                    raise
        return self.state

    async def aclose(self) -> None:
        """Cancel any in-flight request."""
        task = self._task
        self._cancel_in_flight()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
