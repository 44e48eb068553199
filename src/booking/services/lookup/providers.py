"""HTTP clients for the geocoding and distance providers."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from ...config import settings
from ...errors import ResolutionError
from ...models.domain import CandidateLocation, Coordinates

logger = logging.getLogger(__name__)

# Statuses the Places API returns for a well-formed request.
_PLACES_OK_STATUSES = {"OK", "ZERO_RESULTS"}


class SearchProvider(Protocol):
    async def search(self, query: str, country: str) -> list[CandidateLocation]:
        ...


class PlaceDetailsProvider(Protocol):
    async def place_details(self, place_id: str) -> Optional[Coordinates]:
        ...


class DistanceProvider(Protocol):
    async def distance_meters(self, origin: Coordinates, destination: Coordinates) -> float:
        ...


def meters_to_km(meters: float) -> float:
    """Convert meters to kilometers rounded to 2 decimal places."""
    return round(meters / 1000, 2)


class GooglePlacesClient:
    """Places Autocomplete and Place Details over the Google Maps web API.

    Pass ``client`` to reuse one ``httpx.AsyncClient``; otherwise a client is
    opened for each request.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = (base_url or settings.google_maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._client = client

    async def _get_json(self, path: str, params: dict) -> dict:
        url = f"{self.base_url}/{path}"
        params = {**params, "key": self.api_key}
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise ResolutionError(f"Places request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise ResolutionError(f"Places response from {path} is not valid JSON") from exc

        status = data.get("status")
        if status not in _PLACES_OK_STATUSES:
            message = data.get("error_message") or status or "unknown status"
            raise ResolutionError(f"Places request to {path} returned {message}")
        return data

    async def search(self, query: str, country: str) -> list[CandidateLocation]:
        params = {"input": query}
        if country:
            params["components"] = f"country:{country.lower()}"
        logger.info(f"Searching places for '{query}' (country={country})")
        data = await self._get_json("place/autocomplete/json", params)

        candidates = []
        for prediction in data.get("predictions", []):
            formatting = prediction.get("structured_formatting") or {}
            candidates.append(
                CandidateLocation(
                    place_id=prediction["place_id"],
                    description=prediction.get("description", ""),
                    main_text=formatting.get("main_text"),
                    secondary_text=formatting.get("secondary_text"),
                )
            )
        return candidates

    async def place_details(self, place_id: str) -> Optional[Coordinates]:
        params = {"place_id": place_id, "fields": "geometry,formatted_address"}
        data = await self._get_json("place/details/json", params)
        result = data.get("result") or {}
        location = (result.get("geometry") or {}).get("location")
        if not location:
            return None
        return Coordinates(
            lat=float(location["lat"]),
            lng=float(location["lng"]),
            address=result.get("formatted_address") or None,
        )


class OSRMDistanceClient:
    """Road distance between two points from the OSRM ``route`` endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._client = client

    async def distance_meters(self, origin: Coordinates, destination: Coordinates) -> float:
        # OSRM expects "lon,lat;lon,lat"
        coordinate_str = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        params = {"overview": "false", "steps": "false"}
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise ResolutionError(f"OSRM route request failed: {exc}") from exc
        except ValueError as exc:
            raise ResolutionError("OSRM route response is not valid JSON") from exc

        if data.get("code") != "Ok" or not data.get("routes"):
            error_msg = data.get("message", "Unknown OSRM route error")
            raise ResolutionError(f"OSRM route request failed: {error_msg}")
        return float(data["routes"][0]["distance"])


async def check_osrm_health(base_url: str | None = None) -> bool:
    """Check OSRM reachability with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        # Kigali city centre to Kigali airport
        client = OSRMDistanceClient(base_url=base, timeout=5.0)
        meters = await client.distance_meters(
            Coordinates(lat=-1.9441, lng=30.0619),
            Coordinates(lat=-1.9686, lng=30.1395),
        )
        return meters >= 0
    except ResolutionError:
        return False
