"""Shipping bounded context — Shipment lifecycle, stock side effects and pricing.

Owns the state machine that moves a single shipment between Pending, Ready,
Shipped and Canceled, reserves and releases stock at the shipment's stock
location, and selects among shipping-rate quotes. Uses CQRS: the Shipment
aggregate is persisted as current state, and transitions leave an audit trail
of StateChange records.
"""

from protean.domain import Domain

import shipping.utils.logging  # noqa: F401

shipping = Domain(name="shipping")
