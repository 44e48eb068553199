"""Assignment request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Cargo, DriverAssignmentRow, Vehicle


class CargoModel(BaseModel):
    cargo_id: str
    weight_kg: float = Field(..., gt=0)
    volume: Optional[float] = Field(None, gt=0)
    category_id: Optional[str] = None
    pickup_date: Optional[date] = None

    def to_domain(self) -> Cargo:
        return Cargo(
            cargo_id=self.cargo_id,
            weight_kg=self.weight_kg,
            volume=self.volume,
            category_id=self.category_id,
            pickup_date=self.pickup_date,
        )


class VehicleModel(BaseModel):
    vehicle_id: str
    capacity_kg: float = Field(..., ge=0)
    capacity_volume: Optional[float] = None
    status: str = "available"
    plate_number: Optional[str] = None

    def to_domain(self) -> Vehicle:
        return Vehicle(
            vehicle_id=self.vehicle_id,
            capacity_kg=self.capacity_kg,
            capacity_volume=self.capacity_volume,
            status=self.status,
            plate_number=self.plate_number,
        )


class DriverRowModel(BaseModel):
    driver_id: str = ""
    vehicle_id: str = ""
    weight_kg: float = 0.0
    volume: float = 0.0

    def to_domain(self) -> DriverAssignmentRow:
        return DriverAssignmentRow(
            driver_id=self.driver_id,
            vehicle_id=self.vehicle_id,
            weight_kg=self.weight_kg,
            volume=self.volume,
        )


class RecommendationRequest(BaseModel):
    cargo: CargoModel
    vehicles: List[VehicleModel]


class RecommendationResponse(BaseModel):
    mode: Literal["full", "partial", "split"]
    vehicle_id: Optional[str] = None
    utilization: Optional[float] = Field(None, description="Cargo weight over vehicle capacity.")
    suitable_count: int


class AssignmentRequest(BaseModel):
    cargo: CargoModel
    vehicles: List[VehicleModel] = Field(default_factory=list)
    assignment_type: Literal["full", "partial", "split"] = "full"
    driver_id: str = ""
    vehicle_id: str = ""
    assigned_weight_kg: Optional[float] = None
    assigned_volume: Optional[float] = None
    driver_assignments: List[DriverRowModel] = Field(default_factory=list)
    notes: str = ""


class RowErrorModel(BaseModel):
    index: int
    field: str
    message: str


class ValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str]
    row_errors: List[RowErrorModel]


class SubmissionResponse(BaseModel):
    assignment_type: Literal["full", "partial", "split"]
    result: Any = None
