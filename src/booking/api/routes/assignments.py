"""Assignment recommendation, validation and submission endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.assignments import (
    AssignmentRequest,
    RecommendationRequest,
    RecommendationResponse,
    RowErrorModel,
    SubmissionResponse,
    ValidationResponse,
)
from ...services.assignment import AssignmentPlanner, recommend
from ...services.notices import NoticeLog
from ...services.session import BookingSession
from ..deps import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])


def _planner_from_request(payload: AssignmentRequest) -> AssignmentPlanner:
    planner = AssignmentPlanner(notices=NoticeLog())
    # Mode is explicit in the request, so no recommendation is applied.
    planner.choose_mode(payload.assignment_type)
    planner.set_roster([vehicle.to_domain() for vehicle in payload.vehicles])
    planner.set_cargo(payload.cargo.to_domain())
    planner.set_field("driver_id", payload.driver_id)
    planner.set_field("vehicle_id", payload.vehicle_id)
    planner.set_field("assigned_weight_kg", payload.assigned_weight_kg)
    planner.set_field("assigned_volume", payload.assigned_volume)
    planner.set_field("notes", payload.notes)
    planner.rows = [row.to_domain() for row in payload.driver_assignments]
    return planner


def _validation_response(planner: AssignmentPlanner, valid: bool) -> ValidationResponse:
    return ValidationResponse(
        valid=valid,
        errors=planner.errors,
        row_errors=[
            RowErrorModel(index=index, field=name, message=message)
            for (index, name), message in sorted(planner.row_errors.items())
        ],
    )


@router.post("/recommend", response_model=RecommendationResponse, status_code=status.HTTP_200_OK)
def recommend_vehicle(payload: RecommendationRequest) -> RecommendationResponse:
    result = recommend(payload.cargo.to_domain(), [vehicle.to_domain() for vehicle in payload.vehicles])
    return RecommendationResponse(
        mode=result.mode.value,
        vehicle_id=result.vehicle.vehicle_id if result.vehicle else None,
        utilization=result.utilization,
        suitable_count=result.suitable_count,
    )


@router.post("/validate", response_model=ValidationResponse, status_code=status.HTTP_200_OK)
def validate_assignment(payload: AssignmentRequest) -> ValidationResponse:
    planner = _planner_from_request(payload)
    return _validation_response(planner, planner.validate())


@router.post("/submit", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_assignment(
    payload: AssignmentRequest,
    session: BookingSession = Depends(get_session),
) -> SubmissionResponse:
    if session.submissions is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking backend is not configured.",
        )

    planner = _planner_from_request(payload)
    if not planner.validate():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_validation_response(planner, False).model_dump(),
        )

    result = await planner.submit(session.submissions)
    if planner.submission_error is not None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=planner.submission_error)
    return SubmissionResponse(assignment_type=planner.mode.value, result=result)
