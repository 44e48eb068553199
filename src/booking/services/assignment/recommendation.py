"""Best-fit vehicle recommendation for a single cargo."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import AssignmentMode, Cargo, Vehicle


@dataclass(frozen=True, slots=True)
class Recommendation:
    mode: AssignmentMode
    vehicle: Optional[Vehicle]
    utilization: Optional[float]
    suitable_count: int


def utilization_ratio(cargo: Cargo, vehicle: Vehicle) -> float:
    """Share of the vehicle's weight capacity that the cargo would use."""
    return cargo.weight_kg / vehicle.capacity_kg


def suitable_vehicles(cargo: Cargo, vehicles: Sequence[Vehicle]) -> list[Vehicle]:
    return [vehicle for vehicle in vehicles if vehicle.capacity_kg >= cargo.weight_kg]


def recommend(cargo: Cargo, vehicles: Sequence[Vehicle]) -> Recommendation:
    """Pick the suitable vehicle that wastes the least capacity.

    Suggests split mode when no single vehicle can carry the cargo. Ties on
    utilization go to the vehicle that comes first in ``vehicles``; callers
    that need a stable outcome should pass the roster in a stable order.
    """
    candidates = suitable_vehicles(cargo, vehicles)
    if not candidates:
        return Recommendation(mode=AssignmentMode.SPLIT, vehicle=None, utilization=None, suitable_count=0)

    best = candidates[0]
    best_ratio = utilization_ratio(cargo, best)
    for vehicle in candidates[1:]:
        ratio = utilization_ratio(cargo, vehicle)
        if ratio > best_ratio:
            best, best_ratio = vehicle, ratio

    return Recommendation(
        mode=AssignmentMode.FULL,
        vehicle=best,
        utilization=best_ratio,
        suitable_count=len(candidates),
    )
