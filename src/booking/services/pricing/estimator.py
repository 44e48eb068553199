"""Cost estimation with a local linear fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from ...config import settings
from ..backend_client import PricingProvider

logger = logging.getLogger(__name__)

# Per-km base rates (RWF) used by the checkout fallback, by vehicle class.
VEHICLE_CLASS_RATES_PER_KM = {
    "motorcycle": 1500.0,
    "small_truck": 2000.0,
    "large_truck": 2500.0,
}


@dataclass(frozen=True, slots=True)
class LinearRate:
    """cost = (rate_per_km * distance_km + rate_per_kg * weight_kg) * multiplier"""

    rate_per_km: float
    rate_per_kg: float
    multiplier: float = 1.0

    def cost(self, weight_kg: float, distance_km: float) -> float:
        return (self.rate_per_km * distance_km + self.rate_per_kg * weight_kg) * self.multiplier


def checkout_rate(vehicle_class: str, *, urgent: bool = False) -> LinearRate:
    """Fallback used while a client books a cargo: vehicle base rate plus a flat per-kg rate."""
    try:
        rate_per_km = VEHICLE_CLASS_RATES_PER_KM[vehicle_class]
    except KeyError:
        raise ValueError(f"Unknown vehicle class '{vehicle_class}'.") from None
    return LinearRate(
        rate_per_km=rate_per_km,
        rate_per_kg=settings.fallback_weight_rate_per_kg,
        multiplier=settings.urgent_multiplier if urgent else 1.0,
    )


def invoice_rate() -> LinearRate:
    """Fallback used when invoicing an existing cargo: platform-wide rates."""
    return LinearRate(rate_per_km=settings.global_rate_per_km, rate_per_kg=settings.global_rate_per_kg)


@dataclass(slots=True)
class CostEstimate:
    cost: float
    source: Literal["provider", "fallback"]
    breakdown: Optional[dict] = None


class CostEstimator:
    """Prices a cargo through the pricing provider, falling back to ``fallback_rate``.

    The last estimate is reused when asked again for identical parameters
    and fallback rate, unless ``force`` is set.
    """

    def __init__(
        self,
        provider: Optional[PricingProvider],
        *,
        fallback_rate: Optional[LinearRate] = None,
        default_distance_km: float | None = None,
    ) -> None:
        self._provider = provider
        self.fallback_rate = fallback_rate or invoice_rate()
        self.default_distance_km = (
            default_distance_km if default_distance_km is not None else settings.default_distance_km
        )
        self._last_params: Optional[tuple[float, float, Optional[str], LinearRate]] = None
        self._last_estimate: Optional[CostEstimate] = None

    @property
    def last_estimate(self) -> Optional[CostEstimate]:
        return self._last_estimate

    async def estimate(
        self,
        weight_kg: float,
        distance_km: Optional[float],
        category_id: Optional[str],
        *,
        force: bool = False,
        fallback_rate: Optional[LinearRate] = None,
    ) -> CostEstimate:
        if weight_kg <= 0:
            raise ValueError("weight_kg must be greater than 0")
        if distance_km is None:
            distance_km = self.default_distance_km
        if distance_km < 0:
            raise ValueError("distance_km must be non-negative")

        rate = fallback_rate or self.fallback_rate
        params = (weight_kg, distance_km, category_id, rate)
        if not force and self._last_estimate is not None and params == self._last_params:
            logger.debug(f"Reusing cost estimate for {params}")
            return self._last_estimate

        estimate = await self._estimate(weight_kg, distance_km, category_id, rate)
        self._last_params = params
        self._last_estimate = estimate
        return estimate

    async def _estimate(
        self, weight_kg: float, distance_km: float, category_id: Optional[str], rate: LinearRate
    ) -> CostEstimate:
        if self._provider is not None:
            try:
                result = await self._provider.estimate_cost(weight_kg, distance_km, category_id)
                logger.info(f"Cost estimated by provider: {result['cost']}")
                return CostEstimate(cost=float(result["cost"]), source="provider", breakdown=result.get("breakdown"))
            except Exception as exc:
                logger.warning(f"Cost estimation failed, using fallback formula: {exc}")

        cost = rate.cost(weight_kg, distance_km)
        return CostEstimate(
            cost=cost,
            source="fallback",
            breakdown={
                "distance_cost": rate.rate_per_km * distance_km * rate.multiplier,
                "weight_cost": rate.rate_per_kg * weight_kg * rate.multiplier,
                "multiplier": rate.multiplier,
            },
        )
