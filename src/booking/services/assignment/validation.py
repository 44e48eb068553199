"""Validation rules for full, partial and split assignment requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ...config import settings
from ...models.domain import AssignmentMode, Cargo, DriverAssignmentRow, Vehicle

REQUIRED = "This field is required"
CAPACITY_EXCEEDED = "Cargo weight exceeds vehicle capacity"

RowKey = Tuple[int, str]


@dataclass(slots=True)
class ValidationReport:
    """Field-level errors keyed by field name, row errors keyed by (row index, field)."""

    errors: Dict[str, str] = field(default_factory=dict)
    row_errors: Dict[RowKey, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors and not self.row_errors


def _fmt(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def validate_single(
    cargo: Optional[Cargo],
    mode: AssignmentMode,
    *,
    driver_id: str,
    vehicle_id: str,
    assigned_weight_kg: Optional[float],
    assigned_volume: Optional[float],
    vehicles_by_id: Mapping[str, Vehicle],
) -> ValidationReport:
    """Check a full or partial assignment against the cargo and the chosen vehicle."""
    report = ValidationReport()
    errors = report.errors

    if cargo is None or not cargo.cargo_id:
        errors["cargo_id"] = REQUIRED
    if not driver_id:
        errors["driver_id"] = REQUIRED
    if not vehicle_id:
        errors["vehicle_id"] = REQUIRED

    if mode is AssignmentMode.PARTIAL:
        if assigned_weight_kg is None:
            errors["assigned_weight_kg"] = REQUIRED
        elif assigned_weight_kg <= 0:
            errors["assigned_weight_kg"] = "Weight must be greater than 0"
        elif cargo is not None and assigned_weight_kg > cargo.weight_kg:
            errors["assigned_weight_kg"] = f"Weight cannot exceed cargo weight ({_fmt(cargo.weight_kg)} kg)"

        if assigned_volume is not None and cargo is not None and cargo.volume:
            if assigned_volume <= 0:
                errors["assigned_volume"] = "Volume must be greater than 0"
            elif assigned_volume > cargo.volume:
                errors["assigned_volume"] = f"Volume cannot exceed cargo volume ({_fmt(cargo.volume)})"

    vehicle = vehicles_by_id.get(vehicle_id) if vehicle_id else None
    if cargo is not None and vehicle is not None:
        load_kg = assigned_weight_kg if mode is AssignmentMode.PARTIAL else cargo.weight_kg
        # Capacity problems belong to the vehicle choice, not the weight input.
        if load_kg is not None and load_kg > vehicle.capacity_kg:
            errors["vehicle_id"] = CAPACITY_EXCEEDED

    return report


def validate_split(
    cargo: Optional[Cargo],
    rows: Sequence[DriverAssignmentRow],
    *,
    vehicles_by_id: Mapping[str, Vehicle],
    min_rows: int | None = None,
    max_rows: int | None = None,
) -> ValidationReport:
    """Check a split assignment.

    Only rows with both a driver and a vehicle take part. Row errors keep the
    row's position in ``rows`` so callers can map them back to their inputs.
    Totals must match the cargo exactly.
    """
    min_rows = min_rows if min_rows is not None else settings.split_min_rows
    max_rows = max_rows if max_rows is not None else settings.split_max_rows
    report = ValidationReport()
    errors, row_errors = report.errors, report.row_errors

    if cargo is None or not cargo.cargo_id:
        errors["cargo_id"] = REQUIRED

    candidates = [(index, row) for index, row in enumerate(rows) if row.is_complete]

    if len(candidates) < min_rows:
        errors["split_count"] = f"Split assignment requires at least {min_rows} drivers"
    elif len(candidates) > max_rows:
        errors["split_count"] = f"Split assignment cannot have more than {max_rows} drivers"

    for index, row in candidates:
        if not row.driver_id:
            row_errors[(index, "driver_id")] = "Driver is required"
        if not row.vehicle_id:
            row_errors[(index, "vehicle_id")] = "Vehicle is required"
        if row.weight_kg <= 0:
            row_errors[(index, "weight_kg")] = "Weight must be greater than 0"

    if cargo is not None:
        total_weight = sum(row.weight_kg for _, row in candidates)
        if total_weight != cargo.weight_kg:
            errors["split_weight"] = (
                f"Total weight ({_fmt(total_weight)}kg) must equal cargo weight ({_fmt(cargo.weight_kg)}kg)"
            )
        if cargo.volume:
            total_volume = sum(row.volume or 0 for _, row in candidates)
            if total_volume != cargo.volume:
                errors["split_volume"] = (
                    f"Total volume ({_fmt(total_volume)}m³) must equal cargo volume ({_fmt(cargo.volume)}m³)"
                )

    for index, row in candidates:
        vehicle = vehicles_by_id.get(row.vehicle_id)
        if vehicle is not None and row.weight_kg > vehicle.capacity_kg:
            row_errors[(index, "capacity")] = f"Weight exceeds vehicle capacity ({_fmt(vehicle.capacity_kg)}kg)"

    return report
