"""Shipment domain events — immutable facts about shipment changes.

All events are past tense and versioned. ShipmentShipped is the trigger for
the customer notification, which runs after the Unit of Work commits.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from shipping.domain import shipping


@shipping.event(part_of="Shipment")
class ShipmentCreated:
    """A shipment was planned for part of an order."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    number = String(required=True)
    order_id = Identifier(required=True)
    stock_location_id = Identifier()
    unit_count = Integer(required=True)
    created_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentStateChanged:
    """A guarded transition moved the shipment to a new state."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    previous_state = String(required=True)
    next_state = String(required=True)
    changed_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentShipped:
    """The shipment left the stock location (or needed no physical shipping)."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    number = String(required=True)
    tracking = String()
    suppress_notification = Boolean(default=False)
    shipped_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShippingRateSelected:
    """A different shipping rate became the shipment's selection."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    shipping_rate_id = Identifier(required=True)
    shipping_method_id = Identifier(required=True)
    cost = Float(required=True)
    selected_at = DateTime(required=True)


@shipping.event(part_of="Shipment")
class ShipmentFinalized:
    """Pending inventory units had their stock taken from the location."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    finalized_unit_count = Integer(required=True)
    finalized_at = DateTime(required=True)
