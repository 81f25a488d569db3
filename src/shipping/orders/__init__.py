"""Order source factory.

Provides get_order_source() / set_order_source() so the ordering system's
real read model can replace the in-memory fake in deployment.
"""

import os

from shipping.orders.port import OrderSource

_current_source: OrderSource | None = None


def get_order_source() -> OrderSource:
    """Return the configured order source (singleton).

    Uses FakeOrderSource by default. Configure via SHIPPING_ORDER_SOURCE.
    """
    global _current_source
    if _current_source is None:
        adapter = os.environ.get("SHIPPING_ORDER_SOURCE", "fake")
        if adapter == "fake":
            from shipping.orders.fake_adapter import FakeOrderSource

            _current_source = FakeOrderSource()
        else:
            raise ValueError(f"Unknown order source: {adapter}")
    return _current_source


def set_order_source(source: OrderSource) -> None:
    global _current_source
    _current_source = source


def reset_order_source() -> None:
    """Reset the order source singleton (useful for testing)."""
    global _current_source
    _current_source = None
