"""Domain models for cargo, fleet and location records."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class AssignmentMode(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    SPLIT = "split"


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lng: float
    address: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CandidateLocation:
    """A geocoding search hit that can be resolved to coordinates."""

    place_id: str
    description: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Cargo:
    """Shipment request being assigned. Built by the booking flow and never mutated."""

    cargo_id: str
    weight_kg: float
    category_id: Optional[str] = None
    volume: Optional[float] = None
    pickup: Optional[Coordinates] = None
    destination: Optional[Coordinates] = None
    pickup_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.weight_kg <= 0:
            raise ValueError("Cargo weight_kg must be greater than 0.")
        if self.volume is not None and self.volume <= 0:
            raise ValueError("Cargo volume must be greater than 0 when set.")


@dataclass(frozen=True, slots=True)
class Vehicle:
    """Fleet inventory record."""

    vehicle_id: str
    capacity_kg: float
    capacity_volume: Optional[float] = None
    status: str = "available"
    plate_number: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Driver:
    driver_id: str
    name: str = ""
    status: str = "available"


@dataclass(slots=True)
class DriverAssignmentRow:
    """One vehicle/driver share of a split assignment."""

    driver_id: str = ""
    vehicle_id: str = ""
    weight_kg: float = 0.0
    volume: float = 0.0

    @property
    def is_complete(self) -> bool:
        return bool(self.driver_id and self.vehicle_id)
