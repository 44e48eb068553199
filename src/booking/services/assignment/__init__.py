"""Vehicle recommendation and assignment validation."""

from .planner import AssignmentPlanner
from .recommendation import Recommendation, recommend, suitable_vehicles, utilization_ratio
from .validation import ValidationReport, validate_single, validate_split

__all__ = [
    "AssignmentPlanner",
    "Recommendation",
    "recommend",
    "suitable_vehicles",
    "utilization_ratio",
    "ValidationReport",
    "validate_single",
    "validate_split",
]
