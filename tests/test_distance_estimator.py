import asyncio

import pytest

from src.booking.errors import ResolutionError
from src.booking.models.domain import Coordinates
from src.booking.services.lookup import DistanceEstimator, distance_cache_key, meters_to_km
from src.booking.services.notices import DISTANCE_FAILED, NoticeLog

KIGALI = Coordinates(lat=-1.944072, lng=30.061885)
REMERA = Coordinates(lat=-1.959030, lng=30.110580)
HUYE = Coordinates(lat=-2.596670, lng=29.739440)
MUSANZE = Coordinates(lat=-1.499840, lng=29.634990)


class FakeDistance:
    def __init__(self, meters=12340.0, delays=None, fail=False):
        self.calls = []
        self.meters = meters
        self.delays = delays or {}
        self.fail = fail

    async def distance_meters(self, origin, destination):
        self.calls.append((origin, destination))
        await asyncio.sleep(self.delays.get(destination, 0))
        if self.fail:
            raise ResolutionError("osrm unavailable")
        return self.meters


def _estimator(provider, **kwargs):
    kwargs.setdefault("debounce_seconds", 0.01)
    return DistanceEstimator(provider, notices=NoticeLog(), min_distance_km=1.0, **kwargs)


def test_meters_to_km_rounds_to_two_decimals():
    assert meters_to_km(12340) == 12.34
    assert meters_to_km(999) == 1.0


def test_cache_key_rounds_coordinates_to_four_decimals():
    near = Coordinates(lat=-1.9440721, lng=30.0618849)
    assert distance_cache_key(KIGALI, REMERA) == "-1.9441,30.0619|-1.9590,30.1106"
    assert distance_cache_key(near, REMERA) == distance_cache_key(KIGALI, REMERA)


def test_rapid_requests_collapse_to_last_pair():
    provider = FakeDistance()

    async def scenario():
        estimator = _estimator(provider)
        estimator.estimate(KIGALI, REMERA)
        estimator.estimate(KIGALI, HUYE)
        estimator.estimate(KIGALI, MUSANZE)
        return await estimator.wait()

    state = asyncio.run(scenario())

    assert provider.calls == [(KIGALI, MUSANZE)]
    assert state.distance_km == 12.34
    assert state.loading is False


def test_cached_pair_returns_synchronously():
    provider = FakeDistance()

    async def scenario():
        estimator = _estimator(provider)
        assert estimator.estimate(KIGALI, REMERA) is None
        await estimator.wait()
        return estimator.estimate(KIGALI, REMERA)

    assert asyncio.run(scenario()) == 12.34
    assert len(provider.calls) == 1


def test_in_flight_result_for_superseded_pair_is_not_published():
    provider = FakeDistance(delays={REMERA: 0.1})

    async def scenario():
        estimator = _estimator(provider)
        estimator.estimate(KIGALI, REMERA)
        await asyncio.sleep(0.04)  # REMERA lookup is in flight
        provider.meters = 120500.0
        estimator.estimate(KIGALI, HUYE)
        await estimator.wait()
        return estimator

    estimator = asyncio.run(scenario())

    assert len(provider.calls) == 2
    assert estimator.distance_km == 120.5
    # The late answer is still cached for its own pair.
    assert distance_cache_key(KIGALI, REMERA) in estimator.cache


def test_failure_leaves_distance_unresolved():
    provider = FakeDistance(fail=True)

    async def scenario():
        estimator = _estimator(provider)
        estimator.estimate(KIGALI, HUYE)
        await estimator.wait()
        return estimator

    estimator = asyncio.run(scenario())

    assert estimator.distance_km is None
    assert estimator.billable_km is None
    assert estimator.notices.errors == [DISTANCE_FAILED]


def test_failure_after_success_does_not_keep_previous_distance():
    provider = FakeDistance()

    async def scenario():
        estimator = _estimator(provider)
        estimator.estimate(KIGALI, REMERA)
        await estimator.wait()
        assert estimator.distance_km == 12.34
        provider.fail = True
        estimator.estimate(KIGALI, HUYE)
        await estimator.wait()
        return estimator

    estimator = asyncio.run(scenario())

    assert estimator.distance_km is None
    assert estimator.notices.errors == [DISTANCE_FAILED]


def test_billable_distance_has_one_km_floor():
    provider = FakeDistance(meters=300)

    async def scenario():
        estimator = _estimator(provider)
        estimator.estimate(KIGALI, REMERA)
        await estimator.wait()
        return estimator

    estimator = asyncio.run(scenario())

    assert estimator.distance_km == pytest.approx(0.3)
    assert estimator.billable_km == 1.0
    assert estimator.notices.notices[-1].message == "Distance calculated: 1.00 km"


def test_distance_cache_is_bounded_fifo():
    provider = FakeDistance()
    destinations = [Coordinates(lat=-1.9 - i / 100, lng=30.0) for i in range(4)]

    async def scenario():
        estimator = _estimator(provider, cache_size=3)
        for destination in destinations:
            estimator.estimate(KIGALI, destination)
            await estimator.wait()
        return estimator

    estimator = asyncio.run(scenario())

    assert len(estimator.cache) == 3
    assert distance_cache_key(KIGALI, destinations[0]) not in estimator.cache
    assert distance_cache_key(KIGALI, destinations[3]) in estimator.cache


def test_close_cancels_pending_lookup():
    provider = FakeDistance()

    async def scenario():
        estimator = _estimator(provider, debounce_seconds=0.02)
        estimator.estimate(KIGALI, REMERA)
        estimator.close()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert provider.calls == []
