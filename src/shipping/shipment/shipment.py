"""Shipment aggregate (CQRS) — the core of the shipping domain.

A shipment is the subset of an order's units that travel together from one
stock location to the customer. The aggregate holds the shipment's state, its
inventory units, the shipping-rate quotes it was priced with, its adjustments,
and an append-only history of state changes.

Transition rules that depend on the order, the stock location or
configuration live in ShipmentStateMachine; the aggregate only records the
outcome.

State Machine:
    PENDING ⇄ READY → SHIPPED
    {PENDING, READY} → CANCELED → {PENDING, READY, SHIPPED}
    PENDING → SHIPPED (shipments that need no physical shipping)
"""

import secrets
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import quote

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    String,
)

from shipping.domain import shipping
from shipping.errors import DestroyBlocked
from shipping.shipment.events import (
    ShipmentCreated,
    ShipmentFinalized,
    ShipmentShipped,
    ShipmentStateChanged,
    ShippingRateSelected,
)
from shipping.shipment.manifest import ManifestItem, build_manifest


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ShipmentState(Enum):
    PENDING = "Pending"
    READY = "Ready"
    SHIPPED = "Shipped"
    CANCELED = "Canceled"


class InventoryUnitState(Enum):
    ON_HAND = "On_Hand"
    BACKORDERED = "Backordered"
    SHIPPED = "Shipped"
    RETURNED = "Returned"
    CANCELED = "Canceled"


_UNDELETABLE_STATES = {ShipmentState.SHIPPED, ShipmentState.CANCELED}


def generate_shipment_number() -> str:
    """Permalink-style number: ``H`` followed by 11 digits."""
    return f"H{secrets.randbelow(10**11):011d}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@shipping.entity(part_of="Shipment")
class InventoryUnit:
    """One unit of one variant travelling in this shipment.

    ``pending`` stays true until finalization has taken the unit's stock out
    of the location; after that the unit is never unstocked again.
    """

    variant_id = Identifier(required=True)
    line_item_id = Identifier(required=True)
    state = String(
        max_length=50,
        choices=InventoryUnitState,
        default=InventoryUnitState.ON_HAND.value,
    )
    pending = Boolean(default=True)

    def is_shippable(self) -> bool:
        return self.state == InventoryUnitState.ON_HAND.value

    def is_backordered(self) -> bool:
        return self.state == InventoryUnitState.BACKORDERED.value

    def is_shipped(self) -> bool:
        return self.state == InventoryUnitState.SHIPPED.value

    def is_canceled(self) -> bool:
        return self.state == InventoryUnitState.CANCELED.value


@shipping.entity(part_of="Shipment")
class ShippingRate:
    """A quote tying a shipping method to a cost for this shipment."""

    shipping_method_id = Identifier(required=True)
    name = String(max_length=100)
    cost = Float(default=0.0, min_value=0.0)
    selected = Boolean(default=False)
    # Carrier URL with a ":tracking" placeholder
    tracking_url_template = String(max_length=255)


@shipping.entity(part_of="Shipment")
class Adjustment:
    """A signed amount applied on top of the shipping cost (promotion, tax)."""

    label = String(required=True, max_length=255)
    amount = Float(required=True)
    is_tax = Boolean(default=False)
    eligible = Boolean(default=True)


@shipping.entity(part_of="Shipment")
class StateChange:
    """Audit record of one state transition. Never updated or removed."""

    previous_state = String(max_length=50)
    next_state = String(required=True, max_length=50)
    name = String(default="shipment", max_length=50)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@shipping.aggregate
class Shipment:
    number = String(required=True, max_length=20, unique=True)
    order_id = Identifier(required=True)
    stock_location_id = Identifier()
    state = String(
        required=True,
        max_length=50,
        choices=ShipmentState,
        default=ShipmentState.PENDING.value,
    )
    cost = Float(default=0.0, min_value=0.0)
    tracking = String(max_length=255)
    shipped_at = DateTime()
    included_tax_total = Float(default=0.0)
    additional_tax_total = Float(default=0.0)
    inventory_units = HasMany(InventoryUnit)
    shipping_rates = HasMany(ShippingRate)
    adjustments = HasMany(Adjustment)
    state_changes = HasMany(StateChange)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def at_most_one_selected_rate(self):
        selected = [rate for rate in self.shipping_rates or [] if rate.selected]
        if len(selected) > 1:
            raise ValidationError({"shipping_rates": ["Only one shipping rate can be selected"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        units_data: list[dict],
        stock_location_id: str | None = None,
        cost: float | None = None,
        number: str | None = None,
    ):
        """Plan a new shipment for part of an order.

        Each entry of ``units_data`` describes one unit (``variant_id``,
        ``line_item_id``, optional ``state``); a ``quantity`` key expands the
        entry into that many identical units. ``number`` defaults to a freshly
        generated permalink.
        """
        now = datetime.now(UTC)
        shipment = cls(
            number=number or generate_shipment_number(),
            order_id=order_id,
            stock_location_id=stock_location_id,
            state=ShipmentState.PENDING.value,
            cost=cost if cost is not None else 0.0,
            created_at=now,
            updated_at=now,
        )
        for unit_data in units_data:
            unit_data = dict(unit_data)
            quantity = unit_data.pop("quantity", 1)
            for _ in range(quantity):
                shipment.add_inventory_units(InventoryUnit(**unit_data))

        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                number=shipment.number,
                order_id=order_id,
                stock_location_id=stock_location_id,
                unit_count=len(shipment.inventory_units),
                created_at=now,
            )
        )
        return shipment

    # -------------------------------------------------------------------
    # State predicates
    # -------------------------------------------------------------------
    def is_pending(self) -> bool:
        return self.state == ShipmentState.PENDING.value

    def is_ready(self) -> bool:
        return self.state == ShipmentState.READY.value

    def is_shipped(self) -> bool:
        return self.state == ShipmentState.SHIPPED.value

    def is_canceled(self) -> bool:
        return self.state == ShipmentState.CANCELED.value

    def is_ready_or_pending(self) -> bool:
        return self.is_ready() or self.is_pending()

    def is_editable(self) -> bool:
        return not self.is_shipped()

    # -------------------------------------------------------------------
    # State recording
    # -------------------------------------------------------------------
    def change_state(self, new_state: ShipmentState) -> bool:
        """Move to ``new_state`` and append one StateChange.

        Returns False, recording nothing, when the shipment is already there.
        """
        previous_state = self.state
        if new_state.value == previous_state:
            return False

        now = datetime.now(UTC)
        self._write_state(new_state, now)
        self.add_state_changes(
            StateChange(
                previous_state=previous_state,
                next_state=new_state.value,
                created_at=now,
            )
        )
        self.raise_(
            ShipmentStateChanged(
                shipment_id=str(self.id),
                previous_state=previous_state,
                next_state=new_state.value,
                changed_at=now,
            )
        )
        return True

    def overwrite_state(self, new_state: ShipmentState) -> bool:
        """Set the state column directly, without an audit record.

        Used only by out-of-band reconciliation.
        """
        if new_state.value == self.state:
            return False
        self._write_state(new_state, datetime.now(UTC))
        return True

    def _write_state(self, new_state: ShipmentState, now: datetime) -> None:
        self.state = new_state.value
        self.updated_at = now
        # shipped_at is set once and survives cancel/resume
        if new_state == ShipmentState.SHIPPED and self.shipped_at is None:
            self.shipped_at = now

    def record_shipped(self, suppress_notification: bool = False) -> None:
        """Announce that the shipment has shipped; notification follows the commit."""
        self.raise_(
            ShipmentShipped(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                number=self.number,
                tracking=self.tracking,
                suppress_notification=suppress_notification,
                shipped_at=self.shipped_at or datetime.now(UTC),
            )
        )

    def ensure_can_destroy(self) -> None:
        if ShipmentState(self.state) in _UNDELETABLE_STATES:
            raise DestroyBlocked({"state": [f"Cannot destroy a shipment in {self.state} state"]})

    # -------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------
    def manifest(self) -> list[ManifestItem]:
        return build_manifest(self.inventory_units or [])

    def pending_units(self) -> list[InventoryUnit]:
        return [unit for unit in self.inventory_units or [] if unit.pending]

    def all_units_shippable(self) -> bool:
        """Every unit is already shipped, on hand, or canceled."""
        return all(
            unit.is_shipped() or unit.is_shippable() or unit.is_canceled() for unit in self.inventory_units or []
        )

    def backordered(self) -> bool:
        return any(unit.is_backordered() for unit in self.inventory_units or [])

    def inventory_units_for(self, variant_id: str) -> list[InventoryUnit]:
        return [unit for unit in self.inventory_units or [] if str(unit.variant_id) == str(variant_id)]

    def inventory_units_for_item(self, line_item_id: str, variant_id: str | None = None) -> list[InventoryUnit]:
        return [
            unit
            for unit in self.inventory_units or []
            if str(unit.line_item_id) == str(line_item_id)
            and (variant_id is None or str(unit.variant_id) == str(variant_id))
        ]

    def includes_variant(self, variant_id: str) -> bool:
        return bool(self.inventory_units_for(variant_id))

    def line_item_ids(self) -> list[str]:
        return list(dict.fromkeys(str(unit.line_item_id) for unit in self.inventory_units or []))

    def set_up_inventory(self, state: str, variant_id: str, line_item_id: str) -> InventoryUnit:
        unit = InventoryUnit(state=state, variant_id=variant_id, line_item_id=line_item_id)
        self.add_inventory_units(unit)
        return unit

    def mark_units_finalized(self, units: list[InventoryUnit]) -> None:
        now = datetime.now(UTC)
        with atomic_change(self):
            for unit in units:
                unit.pending = False
            self.updated_at = now
        self.raise_(
            ShipmentFinalized(
                shipment_id=str(self.id),
                finalized_unit_count=len(units),
                finalized_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Shipping rates
    # -------------------------------------------------------------------
    def selected_rate(self) -> ShippingRate | None:
        return next((rate for rate in self.shipping_rates or [] if rate.selected), None)

    def selected_rate_id(self) -> str | None:
        rate = self.selected_rate()
        return str(rate.id) if rate else None

    def shipping_method_id(self) -> str | None:
        rate = self.selected_rate()
        return str(rate.shipping_method_id) if rate else None

    def tracking_url(self) -> str | None:
        """Carrier tracking link for the selected method, or None without tracking or a method."""
        rate = self.selected_rate()
        if not self.tracking or rate is None or not rate.tracking_url_template:
            return None
        return rate.tracking_url_template.replace(":tracking", quote(self.tracking, safe=""))

    def replace_shipping_rates(self, rates: list[ShippingRate]) -> None:
        """Swap the whole quote set for ``rates``."""
        with atomic_change(self):
            for rate in list(self.shipping_rates or []):
                self.remove_shipping_rates(rate)
            for rate in rates:
                self.add_shipping_rates(rate)
            self.updated_at = datetime.now(UTC)

    def set_selected_rate_id(self, rate_id: str) -> None:
        """Make the rate with ``rate_id`` the only selected rate."""
        if self.selected_rate_id() == str(rate_id):
            return

        new_rate = next((rate for rate in self.shipping_rates or [] if str(rate.id) == str(rate_id)), None)
        if new_rate is None:
            raise ObjectNotFoundError(
                {"shipping_rate_id": [f"Could not find shipping rate id {rate_id} for shipment {self.number}"]}
            )

        now = datetime.now(UTC)
        current = self.selected_rate()
        with atomic_change(self):
            if current is not None:
                current.selected = False
            new_rate.selected = True
            self.updated_at = now

        self.raise_(
            ShippingRateSelected(
                shipment_id=str(self.id),
                shipping_rate_id=str(new_rate.id),
                shipping_method_id=str(new_rate.shipping_method_id),
                cost=new_rate.cost,
                selected_at=now,
            )
        )

    def update_amounts(self) -> bool:
        """Copy the selected rate's cost onto the shipment.

        Returns True when the cost actually changed.
        """
        rate = self.selected_rate()
        if rate is None or rate.cost == self.cost:
            return False
        self.cost = rate.cost
        self.updated_at = datetime.now(UTC)
        return True

    # -------------------------------------------------------------------
    # Adjustments and taxes
    # -------------------------------------------------------------------
    def add_adjustment(self, label: str, amount: float, is_tax: bool = False, eligible: bool = True) -> Adjustment:
        adjustment = Adjustment(label=label, amount=amount, is_tax=is_tax, eligible=eligible)
        self.add_adjustments(adjustment)
        return adjustment

    def set_tax_totals(self, included: float = 0.0, additional: float = 0.0) -> None:
        self.included_tax_total = included
        self.additional_tax_total = additional

    # -------------------------------------------------------------------
    # Amounts
    # -------------------------------------------------------------------
    def _cost(self) -> float:
        return self.cost if self.cost is not None else 0.0

    def adjustment_total(self) -> float:
        return sum(adjustment.amount for adjustment in self.adjustments or [])

    def total(self) -> float:
        """Cost plus every adjustment."""
        return self._cost() + self.adjustment_total()

    def total_before_tax(self) -> float:
        """Cost plus eligible, non-tax adjustments."""
        return self._cost() + sum(
            adjustment.amount for adjustment in self.adjustments or [] if not adjustment.is_tax and adjustment.eligible
        )

    def total_excluding_vat(self) -> float:
        # Like cost, this never includes additional tax
        return self.total_before_tax() - (self.included_tax_total or 0.0)

    def tax_total(self) -> float:
        # Only one of the two is set in practice
        return (self.included_tax_total or 0.0) + (self.additional_tax_total or 0.0)

    def item_cost(self, order) -> float:
        return sum(order.line_item_total(line_item_id) for line_item_id in self.line_item_ids())

    def total_with_items(self, order) -> float:
        return self.total() + self.item_cost(order)
