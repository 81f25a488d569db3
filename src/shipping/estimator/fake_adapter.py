"""Fake rate estimator — deterministic quotes for testing and development.

Each configured method charges a flat base plus a per-unit amount. The
cheapest quote is pre-selected, as a real estimator would do by default.
"""

from dataclasses import dataclass

from shipping.errors import EstimatorFailure
from shipping.estimator.port import RateEstimator, RateQuote
from shipping.shipment.packaging import Package


@dataclass(frozen=True)
class FakeMethod:
    shipping_method_id: str
    name: str
    base_cost: float
    per_unit_cost: float = 0.0
    tracking_url: str | None = None


DEFAULT_METHODS = (
    FakeMethod("ship-standard", "Standard", 5.0, 0.5, "https://track.example.com/standard/:tracking"),
    FakeMethod("ship-express", "Express", 12.0, 1.0, "https://track.example.com/express?number=:tracking"),
    FakeMethod("ship-overnight", "Overnight", 25.0, 2.0),
)


class FakeRateEstimator(RateEstimator):
    """Estimator that always succeeds by default."""

    def __init__(self, methods: tuple[FakeMethod, ...] = DEFAULT_METHODS):
        self.methods = list(methods)
        self.should_succeed = True
        self.failure_reason = "Estimator unavailable"
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Estimator unavailable",
        methods: list[FakeMethod] | None = None,
    ):
        """Configure the fake estimator behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        if methods is not None:
            self.methods = list(methods)

    def quote(self, package: Package) -> list[RateQuote]:
        self.calls.append(
            {
                "method": "quote",
                "shipment_id": package.shipment_id,
                "stock_location_id": package.stock_location_id,
                "quantity": package.quantity(),
            }
        )
        if not self.should_succeed:
            raise EstimatorFailure(self.failure_reason)

        units = package.quantity()
        priced = sorted(
            ((m, round(m.base_cost + m.per_unit_cost * units, 2)) for m in self.methods),
            key=lambda pair: pair[1],
        )
        return [
            RateQuote(
                shipping_method_id=method.shipping_method_id,
                name=method.name,
                cost=cost,
                selected=index == 0,
                tracking_url=method.tracking_url,
            )
            for index, (method, cost) in enumerate(priced)
        ]
