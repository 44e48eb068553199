"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Cargo Booking Core API"
    api_prefix: str = "/api"
    backend_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the booking backend (pricing, fleet inventory, assignments).",
    )
    backend_token: Optional[str] = Field(
        default=None,
        description="Bearer token forwarded to the booking backend.",
    )
    google_maps_api_key: Optional[str] = Field(default=None, description="Google Places API key.")
    google_maps_base_url: str = Field(default="https://maps.googleapis.com/maps/api")
    search_country_code: str = Field(default="RW", description="Country restriction for place search.")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing distances.",
    )
    http_timeout_seconds: float = Field(default=15.0, gt=0.0)

    search_debounce_seconds: float = Field(default=0.3, ge=0.0)
    search_cache_size: int = Field(default=50, ge=1)
    min_query_length: int = Field(default=2, ge=1)
    distance_debounce_seconds: float = Field(default=0.5, ge=0.0)
    distance_cache_size: int = Field(default=20, ge=1)
    min_distance_km: float = Field(default=1.0, ge=0.0)
    default_distance_km: float = Field(default=25.0, ge=0.0)

    split_min_rows: int = Field(default=2, ge=1)
    split_max_rows: int = Field(default=5, ge=1)

    # Checkout fallback: vehicle base rate per km plus a flat per-kg rate.
    fallback_weight_rate_per_kg: float = Field(default=500.0, ge=0.0)
    urgent_multiplier: float = Field(default=1.5, ge=1.0)
    # Invoice fallback: platform-wide rates.
    global_rate_per_km: float = Field(default=2500.0, ge=0.0)
    global_rate_per_kg: float = Field(default=1200.0, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("backend_base_url", "osrm_base_url", "google_maps_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.rstrip("/") or None
        return value


settings = Settings()
