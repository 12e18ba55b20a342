import asyncio

import pytest

from atlas.shared.core import events
from atlas.shared.domain.converter.service import (
    DEFAULT_ERROR_MESSAGE,
    CurrencyConverter,
    format_rate,
    format_result,
)
from atlas.shared.domain.models import ConverterStatus
from atlas.shared.infrastructure.http.base import TransportFailure
from tests.conftest import FakeRateClient, wait_for_gates


@pytest.fixture
def converter(event_bus, rate_client):
    return CurrencyConverter(event_bus, rate_client)


@pytest.fixture
async def statuses(event_bus, recorder):
    """Converter payloads, in commit order."""
    return await recorder.watch(events.TOPIC_CONVERTER_CHANGED)


def status_trail(payloads):
    return [p["status"] for p in payloads]


async def test_initial_state_is_idle(converter):
    state = converter.state
    assert state.status == ConverterStatus.IDLE
    assert (state.amount, state.source, state.target) == (1.0, "BRL", "USD")
    assert state.result == 0 and state.rate == 0
    assert state.error is None


async def test_start_runs_first_conversion(converter, rate_client):
    await converter.start()
    state = await converter.wait_until_settled()

    assert rate_client.calls == [(1.0, "BRL", "USD")]
    assert state.status == ConverterStatus.SETTLED
    assert state.result == pytest.approx(0.2)


async def test_identity_conversion_skips_network(converter, rate_client, event_bus, statuses):
    await converter.update(amount=100, source="USD", target="USD")
    state = await converter.wait_until_settled()

    assert state.status == ConverterStatus.SETTLED
    assert format_result(state.result) == "100.00"
    assert format_rate(state.rate) == "1.0000"
    assert rate_client.calls == []

    await event_bus.wait_until_idle()
    assert "loading" not in status_trail(statuses)
    assert status_trail(statuses) == ["settled"]


@pytest.mark.parametrize("amount", [0, -5])
async def test_non_positive_amount_forces_zero(converter, rate_client, amount):
    await converter.update(amount=10)
    await converter.wait_until_settled()
    assert converter.state.result > 0

    calls_before = len(rate_client.calls)
    await converter.update(amount=amount, source="EUR", target="GBP")
    state = converter.state

    assert state.status == ConverterStatus.IDLE
    assert state.result == 0
    assert state.rate == 0
    assert state.error is None
    assert len(rate_client.calls) == calls_before


async def test_successful_conversion(converter, rate_client, event_bus, statuses):
    await converter.update(amount=10, source="BRL", target="USD")
    assert converter.state.status == ConverterStatus.LOADING

    state = await converter.wait_until_settled()

    assert rate_client.calls == [(10.0, "BRL", "USD")]
    assert state.status == ConverterStatus.SETTLED
    assert state.result == pytest.approx(2.0)
    assert state.rate == pytest.approx(0.2)
    assert state.is_trusted

    await event_bus.wait_until_idle()
    assert status_trail(statuses) == ["loading", "settled"]


async def test_unsupported_currency_goes_to_error(event_bus, rate_client, statuses):
    converter = CurrencyConverter(event_bus, rate_client, strict_currencies=False)

    await converter.update(amount=50, source="BRL", target="ZZZ")
    state = await converter.wait_until_settled()

    assert state.status == ConverterStatus.ERROR
    assert state.error == DEFAULT_ERROR_MESSAGE
    assert state.result == 0
    assert not state.is_trusted

    await event_bus.wait_until_idle()
    assert status_trail(statuses) == ["loading", "error"]


async def test_error_keeps_previous_result_and_rate(event_bus, rate_client):
    converter = CurrencyConverter(event_bus, rate_client, strict_currencies=False)
    await converter.update(amount=50, source="BRL", target="USD")
    await converter.wait_until_settled()

    await converter.set_target("ZZZ")
    state = await converter.wait_until_settled()

    assert state.status == ConverterStatus.ERROR
    assert state.result == pytest.approx(10.0)
    assert state.rate == pytest.approx(0.2)


async def test_transport_failure_is_treated_like_unsupported(event_bus, caplog):
    class BrokenRateClient(FakeRateClient):
        async def convert(self, amount, source, target):
            raise TransportFailure("connect timeout", service="rates")

    converter = CurrencyConverter(event_bus, BrokenRateClient(), error_message="unavailable")
    await converter.update(amount=3)
    state = await converter.wait_until_settled()

    assert state.status == ConverterStatus.ERROR
    assert state.error == "unavailable"
    assert "connect timeout" in caplog.text


async def test_strict_mode_rejects_unknown_codes(converter):
    with pytest.raises(ValueError):
        await converter.set_source("ZZZ")
    assert converter.state.source == "BRL"


async def test_codes_are_normalized(converter):
    await converter.update(source=" usd ", target="usd")
    assert converter.state.source == "USD"
    assert converter.state.status == ConverterStatus.SETTLED


async def test_unchanged_inputs_do_not_recompute(converter, rate_client):
    await converter.update(amount=10)
    await converter.wait_until_settled()
    generation = converter.generation

    await converter.update(amount=10, source="BRL", target="USD")

    assert converter.generation == generation
    assert len(rate_client.calls) == 1


async def test_error_is_terminal_until_input_changes(event_bus, rate_client):
    converter = CurrencyConverter(event_bus, rate_client, strict_currencies=False)
    await converter.update(amount=5, target="ZZZ")
    await converter.wait_until_settled()

    await converter.update(amount=5, target="ZZZ")
    assert len(rate_client.calls) == 1
    assert converter.state.status == ConverterStatus.ERROR

    await converter.set_target("USD")
    state = await converter.wait_until_settled()
    assert len(rate_client.calls) == 2
    assert state.status == ConverterStatus.SETTLED
    assert state.error is None


async def test_newer_request_wins_over_slower_older_one(event_bus, statuses):
    client = FakeRateClient(gated=True)
    converter = CurrencyConverter(event_bus, client)

    await converter.update(amount=10)            # A
    await wait_for_gates(client, 1)
    await converter.update(amount=20)            # B
    await wait_for_gates(client, 2)

    client.release(1)
    state = await converter.wait_until_settled()
    client.release(0)
    await asyncio.sleep(0)

    assert state.result == pytest.approx(4.0)
    assert converter.state.result == pytest.approx(4.0)
    assert converter.state.amount == 20

    await event_bus.wait_until_idle()
    assert status_trail(statuses) == ["loading", "loading", "settled"]
    assert all(p["result"] != pytest.approx(2.0) for p in statuses)


async def test_stale_completion_is_discarded_even_if_not_cancelled(event_bus, statuses):
    client = FakeRateClient(gated=True, ignore_cancel=True)
    converter = CurrencyConverter(event_bus, client)

    await converter.update(amount=10)            # A
    await wait_for_gates(client, 1)
    await converter.update(amount=20)            # B
    await wait_for_gates(client, 2)

    client.release(1)
    await converter.wait_until_settled()

    client.release(0)
    for _ in range(20):
        if len(client.returned) == 2:
            break
        await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert len(client.returned) == 2
    assert converter.state.result == pytest.approx(4.0)
    assert converter.state.status == ConverterStatus.SETTLED

    await event_bus.wait_until_idle()
    assert [p["result"] for p in statuses if p["status"] == "settled"] == [pytest.approx(4.0)]


async def test_non_positive_amount_supersedes_in_flight_request(event_bus):
    client = FakeRateClient(gated=True, ignore_cancel=True)
    converter = CurrencyConverter(event_bus, client)

    await converter.update(amount=10)
    await wait_for_gates(client, 1)
    await converter.update(amount=0)

    client.release(0)
    for _ in range(20):
        if client.returned:
            break
        await asyncio.sleep(0)
    await asyncio.sleep(0)

    state = converter.state
    assert state.status == ConverterStatus.IDLE
    assert state.result == 0


async def test_identity_supersedes_in_flight_request(event_bus):
    client = FakeRateClient(gated=True)
    converter = CurrencyConverter(event_bus, client)

    await converter.update(amount=10)
    await wait_for_gates(client, 1)
    await converter.set_target("BRL")

    assert not converter.in_flight
    assert converter.state.status == ConverterStatus.SETTLED
    assert converter.state.result == 10


async def test_swap(converter, rate_client):
    await converter.update(amount=2)
    await converter.swap()
    state = await converter.wait_until_settled()

    assert (state.source, state.target) == ("USD", "BRL")
    assert state.result == pytest.approx(10.0)


async def test_aclose_cancels_in_flight(event_bus):
    client = FakeRateClient(gated=True)
    converter = CurrencyConverter(event_bus, client)

    await converter.update(amount=10)
    await wait_for_gates(client, 1)
    await converter.aclose()

    assert not converter.in_flight
    assert converter.state.status == ConverterStatus.LOADING


def test_format_helpers():
    assert format_result(2) == "2.00"
    assert format_result(1234.5678) == "1234.57"
    assert format_rate(0.18) == "0.1800"
