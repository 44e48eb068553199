"""Location search, place resolution, distance and pricing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...errors import ResolutionError
from ...models.domain import Coordinates
from ...schemas.lookup import (
    CandidateLocationModel,
    CoordinatesModel,
    CostEstimateRequest,
    CostEstimateResponse,
    DistanceResponse,
    LocationSearchResponse,
)
from ...services.lookup import DESTINATION, PICKUP
from ...services.session import BookingSession
from ..deps import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["lookup"])


@router.get("/locations/search", response_model=LocationSearchResponse)
async def search_locations(
    q: str = Query(..., description="Free-text location query"),
    channel: str = Query(PICKUP, pattern=f"^({PICKUP}|{DESTINATION})$"),
    session: BookingSession = Depends(get_session),
) -> LocationSearchResponse:
    resolver = session.resolver
    resolver.resolve(q, channel)
    state = await resolver.wait(channel)
    return LocationSearchResponse(
        channel=channel,
        query=state.query,
        results=[
            CandidateLocationModel(
                place_id=item.place_id,
                description=item.description,
                main_text=item.main_text,
                secondary_text=item.secondary_text,
            )
            for item in state.results
        ],
    )


@router.get("/locations/{place_id}", response_model=CoordinatesModel)
async def place_coordinates(place_id: str, session: BookingSession = Depends(get_session)) -> CoordinatesModel:
    try:
        coordinates = await session.resolver.get_coordinates(place_id)
    except ResolutionError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return CoordinatesModel(lat=coordinates.lat, lng=coordinates.lng, address=coordinates.address)


@router.get("/distance", response_model=DistanceResponse)
async def distance(
    origin_lat: float = Query(..., ge=-90, le=90),
    origin_lng: float = Query(..., ge=-180, le=180),
    destination_lat: float = Query(..., ge=-90, le=90),
    destination_lng: float = Query(..., ge=-180, le=180),
    session: BookingSession = Depends(get_session),
) -> DistanceResponse:
    estimator = session.distance
    session.notices.drain()
    estimator.estimate(
        Coordinates(lat=origin_lat, lng=origin_lng),
        Coordinates(lat=destination_lat, lng=destination_lng),
    )
    state = await estimator.wait()
    return DistanceResponse(
        distance_km=state.distance_km,
        billable_km=estimator.billable_km,
        notices=[notice.message for notice in session.notices.drain()],
    )


@router.post("/pricing/estimate", response_model=CostEstimateResponse)
async def estimate_cost(
    payload: CostEstimateRequest,
    session: BookingSession = Depends(get_session),
) -> CostEstimateResponse:
    try:
        estimate = await session.pricing.estimate(
            payload.weight_kg,
            payload.distance_km,
            payload.category_id,
            force=payload.force,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CostEstimateResponse(cost=estimate.cost, source=estimate.source, breakdown=estimate.breakdown)
