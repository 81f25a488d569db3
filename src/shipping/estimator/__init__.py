"""Rate estimator factory.

Provides get_estimator() / set_estimator() to swap implementations:
- FakeRateEstimator for development and testing
- a carrier-backed estimator in production
"""

import os

from shipping.estimator.port import RateEstimator

_current_estimator: RateEstimator | None = None


def get_estimator() -> RateEstimator:
    """Return the configured rate estimator. Defaults to FakeRateEstimator."""
    global _current_estimator
    if _current_estimator is None:
        adapter = os.environ.get("SHIPPING_ESTIMATOR_ADAPTER", "fake")
        if adapter == "fake":
            from shipping.estimator.fake_adapter import FakeRateEstimator

            _current_estimator = FakeRateEstimator()
        else:
            raise ValueError(f"Unknown rate estimator adapter: {adapter}")
    return _current_estimator


def set_estimator(estimator: RateEstimator) -> None:
    """Override the active estimator (useful for tests)."""
    global _current_estimator
    _current_estimator = estimator


def reset_estimator() -> None:
    """Reset to default estimator."""
    global _current_estimator
    _current_estimator = None
