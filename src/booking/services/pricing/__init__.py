"""Cargo pricing helpers."""

from .estimator import (
    VEHICLE_CLASS_RATES_PER_KM,
    CostEstimate,
    CostEstimator,
    LinearRate,
    checkout_rate,
    invoice_rate,
)

__all__ = [
    "CostEstimator",
    "CostEstimate",
    "LinearRate",
    "checkout_rate",
    "invoice_rate",
    "VEHICLE_CLASS_RATES_PER_KM",
]
