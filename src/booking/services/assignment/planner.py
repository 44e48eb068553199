"""Stateful assignment form: recommendation, validation and submission."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Callable, Optional, Sequence

from ...config import settings
from ...errors import GENERIC_FAILURE_MESSAGE, SubmissionError
from ...models.domain import AssignmentMode, Cargo, Driver, DriverAssignmentRow, Vehicle
from ..backend_client import FleetInventoryProvider, SubmissionProvider
from ..notices import ASSIGNMENT_CREATED, SPLIT_CREATED, NoticeLog, NoticeSink
from .recommendation import Recommendation, recommend, utilization_ratio
from .validation import RowKey, validate_single, validate_split

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("driver_id", "vehicle_id", "assigned_weight_kg", "assigned_volume", "notes")
_ROW_FIELDS = ("driver_id", "vehicle_id", "weight_kg", "volume")


class AssignmentPlanner:
    """Holds one assignment being prepared for a cargo.

    While no vehicle is chosen, the planner recomputes its recommendation
    whenever the cargo or the roster changes. The first recommendation
    made before the mode is picked explicitly is adopted as the mode and
    vehicle; later ones are only kept in ``recommendation``.
    """

    def __init__(
        self,
        cargo: Optional[Cargo] = None,
        vehicles: Sequence[Vehicle] = (),
        drivers: Sequence[Driver] = (),
        *,
        notices: Optional[NoticeSink] = None,
        min_rows: int | None = None,
        max_rows: int | None = None,
    ) -> None:
        self.notices = notices if notices is not None else NoticeLog()
        self.min_rows = min_rows if min_rows is not None else settings.split_min_rows
        self.max_rows = max_rows if max_rows is not None else settings.split_max_rows

        self.cargo: Optional[Cargo] = cargo
        self.vehicles: list[Vehicle] = list(vehicles)
        self.drivers: list[Driver] = list(drivers)
        self.mode: AssignmentMode = AssignmentMode.FULL
        self.mode_chosen = False
        self.auto_suggested = False
        self.driver_id = ""
        self.vehicle_id = ""
        self.assigned_weight_kg: Optional[float] = None
        self.assigned_volume: Optional[float] = None
        self.notes = ""
        self.rows: list[DriverAssignmentRow] = [DriverAssignmentRow() for _ in range(self.min_rows)]

        self.errors: dict[str, str] = {}
        self.row_errors: dict[RowKey, str] = {}
        self.recommendation: Optional[Recommendation] = None
        self.submitting = False
        self.submission_error: Optional[str] = None
        self._refresh_recommendation()

    # -- inputs -----------------------------------------------------------

    def set_cargo(self, cargo: Cargo) -> None:
        self.cargo = cargo
        self._refresh_recommendation()

    def set_roster(self, vehicles: Sequence[Vehicle], drivers: Optional[Sequence[Driver]] = None) -> None:
        self.vehicles = list(vehicles)
        if drivers is not None:
            self.drivers = list(drivers)
        self._refresh_recommendation()

    async def load_roster(
        self,
        inventory: FleetInventoryProvider,
        *,
        on_date: Optional[date] = None,
        capacity_min: Optional[float] = None,
    ) -> bool:
        """Fetch available vehicles and drivers for the cargo's pickup date.

        Returns False (and raises a notice) when the inventory could not be read.
        """
        if on_date is None:
            on_date = self.cargo.pickup_date if self.cargo and self.cargo.pickup_date else date.today()
        try:
            vehicles = await inventory.available_vehicles(on_date, capacity_min=capacity_min)
            drivers = await inventory.available_drivers(on_date)
        except Exception as exc:
            logger.warning(f"Failed to load fleet inventory for {on_date}: {exc}")
            self.notices.error("Failed to load available vehicles and drivers")
            return False
        logger.info(f"Loaded {len(vehicles)} vehicles and {len(drivers)} drivers for {on_date}")
        self.set_roster(vehicles, drivers)
        return True

    def choose_mode(self, mode: AssignmentMode | str) -> None:
        self.mode = AssignmentMode(mode)
        self.mode_chosen = True

    def set_field(self, name: str, value: Any) -> None:
        """Update a form field; clears that field's error only."""
        if name not in _EDITABLE_FIELDS:
            raise ValueError(f"Unknown assignment field '{name}'.")
        setattr(self, name, value)
        self.errors.pop(name, None)
        if name == "vehicle_id" and not value:
            self._refresh_recommendation()

    def add_row(self) -> bool:
        if len(self.rows) >= self.max_rows:
            return False
        self.rows.append(DriverAssignmentRow())
        return True

    def remove_row(self, index: int) -> bool:
        if len(self.rows) <= self.min_rows:
            return False
        del self.rows[index]
        # Row errors are positional; shift them along with the rows.
        self.row_errors = {
            (i if i < index else i - 1, name): message
            for (i, name), message in self.row_errors.items()
            if i != index
        }
        return True

    def update_row(self, index: int, name: str, value: Any) -> None:
        if name not in _ROW_FIELDS:
            raise ValueError(f"Unknown split row field '{name}'.")
        setattr(self.rows[index], name, value)
        self.row_errors.pop((index, name), None)

    # -- derived state ----------------------------------------------------

    @property
    def vehicles_by_id(self) -> dict[str, Vehicle]:
        return {vehicle.vehicle_id: vehicle for vehicle in self.vehicles}

    @property
    def selected_vehicle(self) -> Optional[Vehicle]:
        return self.vehicles_by_id.get(self.vehicle_id) if self.vehicle_id else None

    @property
    def complete_rows(self) -> list[DriverAssignmentRow]:
        return [row for row in self.rows if row.is_complete]

    def utilization(self, vehicle: Vehicle) -> Optional[float]:
        """Capacity usage of ``vehicle`` by the cargo, as a percentage."""
        if self.cargo is None or vehicle.capacity_kg <= 0:
            return None
        return round(utilization_ratio(self.cargo, vehicle) * 100, 1)

    def _refresh_recommendation(self) -> None:
        if self.vehicle_id or self.cargo is None:
            return
        self.recommendation = recommend(self.cargo, self.vehicles) if self.vehicles else None
        if self.recommendation is None or self.mode_chosen or self.auto_suggested:
            return
        # Only the first recommendation is adopted; later ones are informational.
        self.auto_suggested = True
        self.mode = self.recommendation.mode
        if self.recommendation.vehicle is not None:
            self.vehicle_id = self.recommendation.vehicle.vehicle_id
            logger.info(
                f"Recommended vehicle {self.vehicle_id} for cargo {self.cargo.cargo_id} "
                f"({self.recommendation.utilization:.0%} utilization)"
            )
        else:
            logger.info(f"No single vehicle can carry cargo {self.cargo.cargo_id}; recommending split")

    # -- validation & submission ------------------------------------------

    def validate(self) -> bool:
        if self.mode is AssignmentMode.SPLIT:
            report = validate_split(
                self.cargo,
                self.rows,
                vehicles_by_id=self.vehicles_by_id,
                min_rows=self.min_rows,
                max_rows=self.max_rows,
            )
        else:
            report = validate_single(
                self.cargo,
                self.mode,
                driver_id=self.driver_id,
                vehicle_id=self.vehicle_id,
                assigned_weight_kg=self.assigned_weight_kg,
                assigned_volume=self.assigned_volume,
                vehicles_by_id=self.vehicles_by_id,
            )
        self.errors = report.errors
        self.row_errors = report.row_errors
        return report.valid

    def build_payload(self) -> dict:
        if self.cargo is None:
            raise ValueError("Cannot build an assignment payload without a cargo.")
        if self.mode is AssignmentMode.SPLIT:
            return {
                "cargo_id": self.cargo.cargo_id,
                "driver_assignments": [asdict(row) for row in self.complete_rows],
                "notes": self.notes,
            }
        partial = self.mode is AssignmentMode.PARTIAL
        return {
            "cargo_id": self.cargo.cargo_id,
            "driver_id": self.driver_id,
            "vehicle_id": self.vehicle_id,
            "assigned_weight_kg": self.assigned_weight_kg if partial else None,
            "assigned_volume": self.assigned_volume if partial else None,
            "assignment_type": self.mode.value,
            "notes": self.notes,
        }

    async def submit(
        self,
        provider: SubmissionProvider,
        on_success: Optional[Callable[[Any], None]] = None,
    ) -> Optional[Any]:
        """Validate and send the assignment.

        Returns the created record(s), or None when validation failed or the
        backend rejected the request. Split rows travel in one request, so a
        rejection means nothing was created.
        """
        self.submission_error = None
        if not self.validate():
            logger.debug(f"Assignment not submitted; errors={self.errors} row_errors={self.row_errors}")
            return None

        payload = self.build_payload()
        self.submitting = True
        try:
            if self.mode is AssignmentMode.SPLIT:
                result = await provider.create_split_assignment(payload)
                self.notices.success(SPLIT_CREATED)
            else:
                result = await provider.create_assignment(payload)
                self.notices.success(ASSIGNMENT_CREATED)
        except SubmissionError as exc:
            self.submission_error = exc.user_message
            self.notices.error(exc.user_message)
            return None
        except Exception:
            logger.exception(f"Unexpected failure submitting {self.mode.value} assignment")
            self.submission_error = GENERIC_FAILURE_MESSAGE
            self.notices.error(GENERIC_FAILURE_MESSAGE)
            return None
        finally:
            self.submitting = False

        logger.info(f"Created {self.mode.value} assignment for cargo {payload['cargo_id']}")
        if on_success is not None:
            on_success(result)
        return result
