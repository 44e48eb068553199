import asyncio

import pytest

from src.booking.errors import ResolutionError
from src.booking.services.pricing import CostEstimator, LinearRate, checkout_rate, invoice_rate


class FakePricing:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    async def estimate_cost(self, weight_kg, distance_km, category_id):
        self.calls.append((weight_kg, distance_km, category_id))
        if self.fail:
            raise ResolutionError("pricing service down")
        return {"cost": 48000.0, "breakdown": {"base": 20000, "distance": 28000}}


def test_provider_estimate_is_used_when_available():
    pricing = FakePricing()
    estimator = CostEstimator(pricing)

    estimate = asyncio.run(estimator.estimate(120, 14.5, "electronics"))

    assert estimate.source == "provider"
    assert estimate.cost == 48000.0
    assert estimate.breakdown == {"base": 20000, "distance": 28000}
    assert pricing.calls == [(120, 14.5, "electronics")]


def test_invoice_fallback_formula():
    estimator = CostEstimator(FakePricing(fail=True), fallback_rate=invoice_rate())

    estimate = asyncio.run(estimator.estimate(10, 20, "general"))

    assert estimate.source == "fallback"
    assert estimate.cost == 2500 * 20 + 1200 * 10


def test_checkout_fallback_uses_vehicle_rate_and_urgency():
    estimator = CostEstimator(None)

    normal = asyncio.run(estimator.estimate(30, 10, None, fallback_rate=checkout_rate("motorcycle")))
    urgent = asyncio.run(
        estimator.estimate(30, 10, None, force=True, fallback_rate=checkout_rate("motorcycle", urgent=True))
    )

    assert normal.cost == 1500 * 10 + 500 * 30
    assert urgent.cost == pytest.approx(normal.cost * 1.5)


def test_unresolved_distance_uses_default():
    estimator = CostEstimator(None, fallback_rate=LinearRate(rate_per_km=100, rate_per_kg=0), default_distance_km=25)

    estimate = asyncio.run(estimator.estimate(5, None, None))

    assert estimate.cost == 2500


def test_identical_parameters_are_not_estimated_twice():
    pricing = FakePricing()
    estimator = CostEstimator(pricing)

    async def scenario():
        await estimator.estimate(120, 14.5, "general")
        await estimator.estimate(120, 14.5, "general")
        await estimator.estimate(120, 14.5, "general", force=True)
        await estimator.estimate(121, 14.5, "general")

    asyncio.run(scenario())

    assert len(pricing.calls) == 3


def test_changing_fallback_rate_is_not_served_from_last_estimate():
    estimator = CostEstimator(None)

    async def scenario():
        invoice = await estimator.estimate(100, 10, "general", fallback_rate=invoice_rate())
        checkout = await estimator.estimate(100, 10, "general", fallback_rate=checkout_rate("motorcycle"))
        return invoice, checkout

    invoice, checkout = asyncio.run(scenario())

    assert invoice.cost == 2500 * 10 + 1200 * 100
    assert checkout.cost == 1500 * 10 + 500 * 100


def test_unknown_vehicle_class_is_rejected():
    with pytest.raises(ValueError):
        checkout_rate("bicycle")


def test_non_positive_weight_is_rejected():
    with pytest.raises(ValueError):
        asyncio.run(CostEstimator(None).estimate(0, 10, None))
