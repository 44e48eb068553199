"""Per-booking session owning the lookup caches, timers and collaborators."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import settings
from .backend_client import BookingBackendClient, FleetInventoryProvider, PricingProvider, SubmissionProvider
from .lookup.distance_estimator import DistanceEstimator
from .lookup.location_resolver import LocationResolver
from .lookup.providers import (
    DistanceProvider,
    GooglePlacesClient,
    OSRMDistanceClient,
    PlaceDetailsProvider,
    SearchProvider,
)
from .notices import NoticeLog
from .pricing.estimator import CostEstimator

logger = logging.getLogger(__name__)


class BookingSession:
    """Bundles the components one booking flow uses.

    Nothing here is module-level state: two sessions never share a cache or a
    timer. ``close`` cancels every pending timer and in-flight lookup.
    """

    def __init__(
        self,
        *,
        search_provider: SearchProvider,
        details_provider: Optional[PlaceDetailsProvider],
        distance_provider: DistanceProvider,
        pricing_provider: Optional[PricingProvider] = None,
        inventory: Optional[FleetInventoryProvider] = None,
        submissions: Optional[SubmissionProvider] = None,
        notices: Optional[NoticeLog] = None,
    ) -> None:
        self.notices = notices if notices is not None else NoticeLog()
        self.resolver = LocationResolver(search_provider, details_provider, notices=self.notices)
        self.distance = DistanceEstimator(distance_provider, notices=self.notices)
        self.pricing = CostEstimator(pricing_provider)
        self.inventory = inventory
        self.submissions = submissions
        self.closed = False

    @classmethod
    def from_settings(cls) -> "BookingSession":
        """Build a session wired to the configured HTTP providers."""
        places = GooglePlacesClient()
        backend = BookingBackendClient() if settings.backend_base_url else None
        return cls(
            search_provider=places,
            details_provider=places,
            distance_provider=OSRMDistanceClient(),
            pricing_provider=backend,
            inventory=backend,
            submissions=backend,
        )

    def close(self) -> None:
        if self.closed:
            return
        self.resolver.close()
        self.distance.close()
        self.closed = True
        logger.debug("Booking session closed")

    async def __aenter__(self) -> "BookingSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
