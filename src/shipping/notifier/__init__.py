"""Shipment notifier factory.

Uses FakeShipmentNotifier by default. In production, configure via the
SHIPPING_NOTIFIER environment variable.
"""

import os

from shipping.notifier.port import ShipmentNotifier

_notifier_instance: ShipmentNotifier | None = None


def get_notifier() -> ShipmentNotifier:
    """Return the configured notifier adapter (singleton)."""
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("SHIPPING_NOTIFIER", "fake")
        if adapter == "fake":
            from shipping.notifier.fake_adapter import FakeShipmentNotifier

            _notifier_instance = FakeShipmentNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _notifier_instance


def set_notifier(notifier: ShipmentNotifier) -> None:
    global _notifier_instance
    _notifier_instance = notifier


def reset_notifier():
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None
