"""HTTP client for the booking backend: pricing, fleet inventory and assignments."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Protocol

import httpx

from ..config import settings
from ..errors import ResolutionError, SubmissionError
from ..models.domain import Driver, Vehicle

logger = logging.getLogger(__name__)


class PricingProvider(Protocol):
    async def estimate_cost(self, weight_kg: float, distance_km: float, category_id: Optional[str]) -> dict:
        ...


class FleetInventoryProvider(Protocol):
    async def available_vehicles(self, on_date: date, capacity_min: Optional[float] = None) -> list[Vehicle]:
        ...

    async def available_drivers(self, on_date: date) -> list[Driver]:
        ...


class SubmissionProvider(Protocol):
    async def create_assignment(self, payload: dict) -> dict:
        ...

    async def create_split_assignment(self, payload: dict) -> Any:
        ...


def extract_error_message(response: httpx.Response) -> Optional[str]:
    """Pull the backend's own error message out of an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    for key in ("message", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _unwrap(body: Any) -> Any:
    # The backend wraps payloads as {"success": ..., "data": ...}
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _vehicle_from_payload(item: dict) -> Vehicle:
    capacity = item.get("capacity_kg") or item.get("capacity") or 0
    return Vehicle(
        vehicle_id=str(item["id"]),
        capacity_kg=float(capacity),
        capacity_volume=float(item["capacity_volume"]) if item.get("capacity_volume") else None,
        status=item.get("status") or "available",
        plate_number=item.get("plate_number"),
        make=item.get("make"),
        model=item.get("model"),
    )


def _driver_from_payload(item: dict) -> Driver:
    name = item.get("full_name") or item.get("name") or ""
    if not name and isinstance(item.get("user"), dict):
        name = item["user"].get("full_name") or ""
    return Driver(driver_id=str(item["id"]), name=name, status=item.get("status") or "available")


class BookingBackendClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url or settings.backend_base_url
        if not self.base_url:
            raise ValueError("Booking backend base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.token = token if token is not None else settings.backend_token
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return await self._client.request(method, url, headers=self._headers(), **kwargs)
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
            return await client.request(method, url, headers=self._headers(), **kwargs)

    async def _fetch(self, method: str, path: str, **kwargs: Any) -> Any:
        """Request for lookups; any failure becomes ``ResolutionError``."""
        try:
            response = await self._request(method, path, **kwargs)
            response.raise_for_status()
            return _unwrap(response.json())
        except httpx.HTTPStatusError as exc:
            message = extract_error_message(exc.response) or str(exc)
            raise ResolutionError(f"{method} {path} failed: {message}") from exc
        except httpx.HTTPError as exc:
            raise ResolutionError(f"{method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise ResolutionError(f"{method} {path} returned invalid JSON") from exc

    async def _submit(self, path: str, payload: dict) -> Any:
        """Request for writes; any failure becomes ``SubmissionError``."""
        try:
            response = await self._request("POST", path, json=payload)
        except httpx.HTTPError as exc:
            logger.error(f"POST {path} failed before a response arrived: {exc}")
            raise SubmissionError() from exc
        if response.is_error:
            message = extract_error_message(response)
            logger.warning(f"POST {path} rejected with {response.status_code}: {message}")
            raise SubmissionError(message, status_code=response.status_code)
        try:
            return _unwrap(response.json())
        except ValueError:
            return None

    async def estimate_cost(self, weight_kg: float, distance_km: float, category_id: Optional[str]) -> dict:
        payload = {"weight_kg": weight_kg, "distance_km": distance_km, "category_id": category_id}
        data = await self._fetch("POST", "/cargos/estimate-cost", json=payload)
        if not isinstance(data, dict) or "estimated_cost" not in data:
            raise ResolutionError("Cost estimate response is missing estimated_cost.")
        return {"cost": float(data["estimated_cost"]), "breakdown": data.get("breakdown")}

    async def available_vehicles(self, on_date: date, capacity_min: Optional[float] = None) -> list[Vehicle]:
        params: dict[str, Any] = {"date": on_date.isoformat(), "limit": 100}
        if capacity_min is not None:
            params["capacity_min"] = capacity_min
        data = await self._fetch("GET", "/vehicles/available", params=params)
        return [_vehicle_from_payload(item) for item in data or []]

    async def available_drivers(self, on_date: date) -> list[Driver]:
        params = {"date": on_date.isoformat(), "limit": 100}
        data = await self._fetch("GET", "/drivers/available", params=params)
        return [_driver_from_payload(item) for item in data or []]

    async def create_assignment(self, payload: dict) -> dict:
        return await self._submit("/delivery-assignments", payload)

    async def create_split_assignment(self, payload: dict) -> Any:
        return await self._submit("/delivery-assignments/split", payload)
