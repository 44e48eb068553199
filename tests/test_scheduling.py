import asyncio

import pytest

from src.booking.services.lookup import CancellationToken, Debouncer, FifoCache


def test_fifo_cache_evicts_by_insertion_order():
    cache = FifoCache(2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)  # overwrite keeps the original slot
    cache.set("c", 3)

    assert cache.keys() == ["b", "c"]
    assert cache.get("a") is None
    assert cache.get("c") == 3


def test_fifo_cache_rejects_zero_size():
    with pytest.raises(ValueError):
        FifoCache(0)


def test_cancellation_token():
    token = CancellationToken()
    assert token.cancelled is False
    token.cancel()
    assert token.cancelled is True


def test_debouncer_runs_only_latest_action():
    fired = []

    async def scenario():
        debouncer = Debouncer(0.01)
        for value in (1, 2, 3):
            debouncer.schedule(lambda value=value: _record(fired, value))
        assert debouncer.pending
        await debouncer.wait()
        assert not debouncer.pending

    asyncio.run(scenario())

    assert fired == [3]


def test_debouncer_cancel_leaves_in_flight_action_running():
    fired = []

    async def slow(value):
        await asyncio.sleep(0.05)
        fired.append(value)

    async def scenario():
        debouncer = Debouncer(0.01)
        debouncer.schedule(lambda: slow("first"))
        await asyncio.sleep(0.03)
        assert debouncer.inflight == 1
        assert debouncer.cancel() is False
        await debouncer.wait()

    asyncio.run(scenario())

    assert fired == ["first"]


def test_debouncer_abort_cancels_in_flight_action():
    fired = []

    async def slow():
        await asyncio.sleep(0.05)
        fired.append("done")

    async def scenario():
        debouncer = Debouncer(0.01)
        debouncer.schedule(slow)
        await asyncio.sleep(0.03)
        debouncer.abort()
        await asyncio.sleep(0.06)

    asyncio.run(scenario())

    assert fired == []


async def _record(sink, value):
    sink.append(value)
