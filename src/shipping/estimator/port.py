"""Rate estimator port — quotes shipping methods for a package.

Adapters return one RateQuote per available shipping method. Exactly one of
the quotes may come back pre-selected; that is the estimator's default choice.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shipping.shipment.packaging import Package


@dataclass(frozen=True)
class RateQuote:
    """One shipping method's price for a package."""

    shipping_method_id: str
    name: str
    cost: float
    selected: bool = False
    tracking_url: str | None = None


class RateEstimator(ABC):
    """Abstract interface for rate estimator adapters."""

    @abstractmethod
    def quote(self, package: Package) -> list[RateQuote]:
        """Quote every shipping method available for ``package``.

        Raises EstimatorFailure when the estimator cannot be reached.
        """
        ...
