"""Location, distance and pricing schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CandidateLocationModel(BaseModel):
    place_id: str
    description: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


class LocationSearchResponse(BaseModel):
    channel: str
    query: str
    results: List[CandidateLocationModel]


class CoordinatesModel(BaseModel):
    lat: float
    lng: float
    address: Optional[str] = None


class DistanceResponse(BaseModel):
    distance_km: Optional[float] = Field(None, description="Unresolved when the provider failed.")
    billable_km: Optional[float] = None
    notices: List[str] = Field(default_factory=list)


class CostEstimateRequest(BaseModel):
    weight_kg: float = Field(..., gt=0)
    distance_km: Optional[float] = Field(None, ge=0)
    category_id: Optional[str] = None
    force: bool = False


class CostEstimateResponse(BaseModel):
    cost: float
    source: Literal["provider", "fallback"]
    breakdown: Optional[dict] = None
