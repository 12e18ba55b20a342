"""Shared fixtures and in-memory fakes for the Atlas tests."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple, Union

import pytest

from atlas.dashboard.state import Store
from atlas.shared.core.event_bus import EventBus
from atlas.shared.domain.models import Country
from atlas.shared.infrastructure.http.base import ConversionUnsupported, LookupFailure


def candidate(
    cca3: str,
    name: str,
    capital: Optional[List[str]] = None,
    region: str = "Americas",
    population: int = 1000,
    currencies: Optional[Dict[str, dict]] = None,
    latlng: Optional[List[float]] = None,
) -> dict:
    """A lookup candidate in the restcountries v3.1 shape."""
    payload = {
        "cca3": cca3,
        "name": {"common": name, "official": name},
        "region": region,
        "population": population,
        "flags": {"svg": f"https://flagcdn.com/{cca3.lower()}.svg", "png": f"https://flagcdn.com/{cca3.lower()}.png"},
    }
    if capital is not None:
        payload["capital"] = capital
    if currencies is not None:
        payload["currencies"] = currencies
    if latlng is not None:
        payload["latlng"] = latlng
    return payload


CANDIDATES = {
    "Brazil": candidate(
        "BRA", "Brazil", ["Brasília"], "Americas", 212559409,
        {"BRL": {"name": "Brazilian real", "symbol": "R$"}}, [-10.0, -55.0],
    ),
    "Canada": candidate(
        "CAN", "Canada", ["Ottawa"], "Americas", 38005238,
        {"CAD": {"name": "Canadian dollar", "symbol": "$"}}, [60.0, -95.0],
    ),
    "United Kingdom": candidate(
        "GBR", "United Kingdom", ["London"], "Europe", 67215293,
        {"GBP": {"name": "British pound", "symbol": "£"}}, [54.0, -2.0],
    ),
    "Portugal": candidate(
        "PRT", "Portugal", ["Lisbon"], "Europe", 10305564,
        {"EUR": {"name": "Euro", "symbol": "€"}}, [39.5, -8.0],
    ),
}


def make_country(name: str) -> Country:
    return Country.from_api(CANDIDATES[name])


class FakeLookupClient:
    """Lookup client answering from a name -> Country/exception table."""

    def __init__(self, table: Optional[Dict[str, Union[Country, BaseException]]] = None, delays=None):
        self.table = table if table is not None else {name: make_country(name) for name in CANDIDATES}
        self.delays: Dict[str, float] = delays or {}
        self.calls: List[str] = []

    async def lookup(self, name: str) -> Country:
        self.calls.append(name)
        if name in self.delays:
            await asyncio.sleep(self.delays[name])
        outcome = self.table.get(name)
        if outcome is None:
            raise LookupFailure(f"No country named {name!r}", service="countries", status_code=404)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeRateClient:
    """Rate client backed by a (source, target) -> rate table.

    With ``gated=True`` every call blocks until released by index, so tests
    control the order in which responses arrive. With ``ignore_cancel=True``
    a cancelled call still returns its value, which exercises the
    generation check on its own.
    """

    def __init__(
        self,
        rates: Optional[Dict[Tuple[str, str], float]] = None,
        gated: bool = False,
        ignore_cancel: bool = False,
    ):
        self.rates = rates if rates is not None else {
            ("BRL", "USD"): 0.2,
            ("USD", "BRL"): 5.0,
            ("BRL", "EUR"): 0.18,
            ("USD", "EUR"): 0.9,
            ("EUR", "GBP"): 0.85,
        }
        self.gated = gated
        self.ignore_cancel = ignore_cancel
        self.calls: List[Tuple[float, str, str]] = []
        self.gates: List[asyncio.Event] = []
        self.returned: List[Tuple[float, str, str]] = []

    async def convert(self, amount: float, source: str, target: str) -> float:
        self.calls.append((amount, source, target))
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            try:
                await gate.wait()
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise
                await gate.wait()
        rate = self.rates.get((source, target))
        if rate is None:
            raise ConversionUnsupported(f"No rate for {source}->{target}", service="rates", status_code=404)
        self.returned.append((amount, source, target))
        return amount * rate

    def release(self, index: int) -> None:
        self.gates[index].set()


async def wait_for_gates(client: FakeRateClient, count: int) -> None:
    """Yield until ``count`` gated calls have reached the client."""
    for _ in range(100):
        if len(client.gates) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} gated calls, saw {len(client.gates)}")


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def lookup_client() -> FakeLookupClient:
    return FakeLookupClient()


@pytest.fixture
def rate_client() -> FakeRateClient:
    return FakeRateClient()


@pytest.fixture
def recorder(event_bus):
    """Collects every payload published on the given topics."""

    class Recorder:
        def __init__(self):
            self.payloads: Dict[str, List[dict]] = {}

        async def watch(self, topic: str) -> List[dict]:
            bucket = self.payloads.setdefault(topic, [])

            async def handler(payload):
                bucket.append(payload)

            handler.__name__ = f"record_{topic}"
            await event_bus.subscribe(topic, handler)
            return bucket

    return Recorder()


@pytest.fixture(autouse=True)
def reset_store():
    Store.reset()
    yield
    Store.reset()
