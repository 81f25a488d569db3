"""Business configuration for the Shipping domain.

Settings are read from the environment once and handed to the state machine
explicitly, so eligibility checks never consult ambient global state.
"""

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ShippingSettings:
    """Flags that influence shipment eligibility."""

    require_payment_to_ship: bool = True

    @classmethod
    def from_env(cls) -> "ShippingSettings":
        raw = os.environ.get("SHIPPING_REQUIRE_PAYMENT_TO_SHIP", "true")
        return cls(require_payment_to_ship=raw.strip().lower() in _TRUTHY)


_current_settings: ShippingSettings | None = None


def get_settings() -> ShippingSettings:
    """Return the active settings. Loaded from the environment on first use."""
    global _current_settings
    if _current_settings is None:
        _current_settings = ShippingSettings.from_env()
    return _current_settings


def set_settings(settings: ShippingSettings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Drop overrides; the next call re-reads the environment."""
    global _current_settings
    _current_settings = None
