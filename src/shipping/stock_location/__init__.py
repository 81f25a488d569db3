"""Stock location registry — resolves a shipment's stock_location_id to a ledger.

Fake locations are created on first lookup. In production, register the real
ledger adapters at startup with register_stock_location().
"""

import os

from shipping.stock_location.port import StockLocation

_locations: dict[str, StockLocation] = {}


def get_stock_location(location_id: str | None) -> StockLocation | None:
    """Return the ledger for ``location_id``, or None when no location is set."""
    if location_id is None:
        return None

    key = str(location_id)
    if key not in _locations:
        adapter = os.environ.get("SHIPPING_STOCK_LEDGER", "fake")
        if adapter == "fake":
            from shipping.stock_location.fake_adapter import FakeStockLocation

            _locations[key] = FakeStockLocation(key)
        else:
            raise ValueError(f"Unknown stock ledger adapter: {adapter}")
    return _locations[key]


def register_stock_location(location: StockLocation) -> StockLocation:
    _locations[str(location.id)] = location
    return location


def reset_stock_locations():
    """Forget all registered locations (useful for testing)."""
    _locations.clear()
