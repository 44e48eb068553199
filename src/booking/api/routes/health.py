"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
async def health_osrm() -> dict:
    """Check OSRM service health."""
    from ...services.lookup.providers import check_osrm_health

    healthy = await check_osrm_health()
    return {"service": "osrm", "healthy": healthy, "configured": bool(settings.osrm_base_url)}


@router.get("/health/providers", status_code=status.HTTP_200_OK)
def health_providers() -> dict:
    """Report which external collaborators are configured."""
    return {
        "places": bool(settings.google_maps_api_key),
        "osrm": bool(settings.osrm_base_url),
        "backend": bool(settings.backend_base_url),
    }
