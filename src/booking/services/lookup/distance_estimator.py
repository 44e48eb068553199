"""Debounced and cached road-distance lookup between two coordinates."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ...config import settings
from ...models.domain import Coordinates
from ..notices import DISTANCE_FAILED, NoticeLog, NoticeSink
from .providers import DistanceProvider, meters_to_km
from .scheduling import Debouncer, FifoCache

logger = logging.getLogger(__name__)


def distance_cache_key(origin: Coordinates, destination: Coordinates) -> str:
    """Key by coordinates rounded to 4 decimals (about 11 m)."""
    return (
        f"{origin.lat:.4f},{origin.lng:.4f}"
        f"|{destination.lat:.4f},{destination.lng:.4f}"
    )


@dataclass(slots=True)
class DistanceState:
    key: Optional[str] = None
    distance_km: Optional[float] = None
    loading: bool = False


class DistanceEstimator:
    """Latest-wins distance lookup.

    Rapid calls collapse onto the last requested pair while the debounce timer
    is pending. A request that already reached the provider is not cancelled,
    but its result is only published if no newer request was made since.
    """

    def __init__(
        self,
        provider: DistanceProvider,
        *,
        notices: Optional[NoticeSink] = None,
        debounce_seconds: float | None = None,
        cache_size: int | None = None,
        min_distance_km: float | None = None,
        converter: Callable[[float], float] = meters_to_km,
    ) -> None:
        self._provider = provider
        self.notices = notices if notices is not None else NoticeLog()
        self.min_distance_km = min_distance_km if min_distance_km is not None else settings.min_distance_km
        self._converter = converter
        self._cache: FifoCache[str, float] = FifoCache(
            cache_size if cache_size is not None else settings.distance_cache_size
        )
        self._debouncer = Debouncer(
            debounce_seconds if debounce_seconds is not None else settings.distance_debounce_seconds,
            name="distance",
        )
        self._generation = 0
        self.state = DistanceState()

    @property
    def cache(self) -> FifoCache[str, float]:
        return self._cache

    @property
    def distance_km(self) -> Optional[float]:
        return self.state.distance_km

    @property
    def billable_km(self) -> Optional[float]:
        """Resolved distance floored at the minimum billable distance."""
        if self.state.distance_km is None:
            return None
        return max(self.state.distance_km, self.min_distance_km)

    def estimate(self, origin: Coordinates, destination: Coordinates) -> Optional[float]:
        """Request the distance in km; returns it immediately on a cache hit, else None."""
        key = distance_cache_key(origin, destination)
        self._generation += 1
        generation = self._generation
        self.state.key = key

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Using cached distance for {key}: {cached} km")
            self._debouncer.cancel()
            self.state.distance_km = cached
            self.state.loading = False
            return cached

        self._debouncer.schedule(lambda: self._lookup(key, origin, destination, generation))
        return None

    async def wait(self) -> DistanceState:
        await self._debouncer.wait()
        return self.state

    def close(self) -> None:
        self._generation += 1
        self._debouncer.abort()
        self.state.loading = False

    async def _lookup(self, key: str, origin: Coordinates, destination: Coordinates, generation: int) -> None:
        self.state.loading = True
        logger.info(f"Calculating distance for {key}")
        try:
            meters = await self._provider.distance_meters(origin, destination)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if generation != self._generation:
                logger.debug(f"Discarding failed distance lookup for superseded pair {key}")
                return
            logger.warning(f"Error calculating distance for {key}: {exc}")
            self.state.loading = False
            self.state.distance_km = None
            self.notices.error(DISTANCE_FAILED)
            return

        distance_km = self._converter(meters)
        self._cache.set(key, distance_km)
        if generation != self._generation:
            logger.debug(f"Discarding distance for superseded pair {key}")
            return

        self.state.loading = False
        self.state.distance_km = distance_km
        self.notices.success(f"Distance calculated: {self.billable_km:.2f} km")
