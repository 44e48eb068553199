"""Location search and distance lookup helpers."""

from .distance_estimator import DistanceEstimator, DistanceState, distance_cache_key
from .location_resolver import DESTINATION, PICKUP, ChannelState, LocationResolver
from .providers import GooglePlacesClient, OSRMDistanceClient, check_osrm_health, meters_to_km
from .scheduling import CancellationToken, Debouncer, FifoCache

__all__ = [
    "LocationResolver",
    "ChannelState",
    "PICKUP",
    "DESTINATION",
    "DistanceEstimator",
    "DistanceState",
    "distance_cache_key",
    "GooglePlacesClient",
    "OSRMDistanceClient",
    "check_osrm_health",
    "meters_to_km",
    "CancellationToken",
    "Debouncer",
    "FifoCache",
]
