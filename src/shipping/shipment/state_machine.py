"""Shipment state machine — guarded transitions with stock side effects.

Guards are evaluated against live facts every time: the order's payment and
shipping status, the per-unit inventory states, the stock location, and the
shipping settings. Nothing is cached between calls, because any of those can
change independently of the shipment.

Transitions:

    pend    READY              → PENDING
    ready   PENDING            → SHIPPED  when no physical shipping is needed
                               → READY    when eligible
    ship    READY | CANCELED   → SHIPPED  (resume hook too, if it was CANCELED)
    cancel  READY | PENDING    → CANCELED (restock the manifest)
    resume  CANCELED           → READY if eligible, else PENDING (unstock the manifest)

Each operation returns True/False; the ``*_or_raise`` variants raise
InvalidStateChange instead of returning False.
"""

import structlog

from shipping.config import ShippingSettings, get_settings
from shipping.errors import InvalidStateChange
from shipping.orders import get_order_source
from shipping.shipment.manifest import build_manifest
from shipping.shipment.shipment import Shipment, ShipmentState
from shipping.shipment.stock import StockAdjuster
from shipping.stock_location import get_stock_location

logger = structlog.get_logger(__name__)


class ShipmentStateMachine:
    def __init__(
        self,
        shipment: Shipment,
        order,
        stock_location=None,
        settings: ShippingSettings | None = None,
        suppress_notification: bool = False,
    ):
        self.shipment = shipment
        self.order = order
        self.stock_location = stock_location
        self.settings = settings or get_settings()
        self.suppress_notification = suppress_notification
        self.stock = StockAdjuster(stock_location, shipment)

    @classmethod
    def for_shipment(cls, shipment: Shipment, suppress_notification: bool = False) -> "ShipmentStateMachine":
        """Wire a machine to the shipment's order and stock location via the configured adapters."""
        return cls(
            shipment,
            order=get_order_source().get(shipment.order_id),
            stock_location=get_stock_location(shipment.stock_location_id),
            suppress_notification=suppress_notification,
        )

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def requires_shipment(self) -> bool:
        return self.stock_location is None or self.stock_location.is_fulfillable()

    def can_transition_from_pending_to_shipped(self) -> bool:
        return not self.requires_shipment()

    def can_transition_from_pending_to_ready(self, order=None) -> bool:
        order = order or self.order
        return (
            order.can_ship()
            and self.shipment.all_units_shippable()
            and (order.is_paid() or not self.settings.require_payment_to_ship)
        )

    def can_transition_from_canceled_to_ready(self) -> bool:
        return self.can_transition_from_pending_to_ready()

    def can_pend(self) -> bool:
        return self.shipment.is_ready()

    def can_ready(self) -> bool:
        return self.shipment.is_pending() and (
            self.can_transition_from_pending_to_shipped() or self.can_transition_from_pending_to_ready()
        )

    def can_ship(self) -> bool:
        return self.shipment.is_ready() or self.shipment.is_canceled()

    def can_cancel(self) -> bool:
        return self.shipment.is_ready_or_pending()

    def can_resume(self) -> bool:
        return self.shipment.is_canceled()

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def pend(self) -> bool:
        if not self.can_pend():
            return False
        self._change_state(ShipmentState.PENDING)
        return True

    def ready(self) -> bool:
        if not self.shipment.is_pending():
            return False

        if self.can_transition_from_pending_to_shipped():
            self._change_state(ShipmentState.SHIPPED)
            self._after_ship()
        elif self.can_transition_from_pending_to_ready():
            self._change_state(ShipmentState.READY)
        else:
            return False
        return True

    def ship(self) -> bool:
        if not self.can_ship():
            return False

        previous_state = ShipmentState(self.shipment.state)
        self._change_state(ShipmentState.SHIPPED)
        self._after_ship()
        if previous_state == ShipmentState.CANCELED:
            self._after_resume()
        return True

    def cancel(self) -> bool:
        if not self.can_cancel():
            return False
        self._change_state(ShipmentState.CANCELED)
        self._after_cancel()
        return True

    def resume(self) -> bool:
        if not self.can_resume():
            return False

        if self.can_transition_from_canceled_to_ready():
            self._change_state(ShipmentState.READY)
        else:
            self._change_state(ShipmentState.PENDING)
        self._after_resume()
        return True

    def pend_or_raise(self) -> None:
        self._strict(self.pend, "pend")

    def ready_or_raise(self) -> None:
        self._strict(self.ready, "ready")

    def ship_or_raise(self) -> None:
        self._strict(self.ship, "ship")

    def cancel_or_raise(self) -> None:
        self._strict(self.cancel, "cancel")

    def resume_or_raise(self) -> None:
        self._strict(self.resume, "resume")

    def _strict(self, transition, name: str) -> None:
        state = self.shipment.state
        if not transition():
            raise InvalidStateChange({"state": [f"Cannot {name} shipment {self.shipment.number} in {state} state"]})

    # -------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------
    def determine_state(self, order=None) -> ShipmentState:
        """The state the shipment should be in given the order's current facts.

        CANCELED if the order is canceled, SHIPPED if already shipped, PENDING
        unless the order can ship, READY when eligible, PENDING otherwise.
        """
        order = order or self.order
        if order.is_canceled():
            return ShipmentState.CANCELED
        if self.shipment.is_shipped():
            return ShipmentState.SHIPPED
        if not order.can_ship():
            return ShipmentState.PENDING
        if self.can_transition_from_pending_to_ready(order):
            return ShipmentState.READY
        return ShipmentState.PENDING

    def sync_state(self, order=None) -> bool:
        """Force the shipment into ``determine_state`` without guards.

        Writes the state directly: no StateChange is recorded and the
        cancel/resume stock hooks do not run. The ship hook still fires when
        the new state is SHIPPED.
        """
        old_state = self.shipment.state
        new_state = self.determine_state(order)
        if not self.shipment.overwrite_state(new_state):
            return False

        logger.info(
            "Shipment state synchronized",
            shipment_id=str(self.shipment.id),
            previous_state=old_state,
            next_state=new_state.value,
        )
        if new_state == ShipmentState.SHIPPED:
            self._after_ship()
        return True

    # -------------------------------------------------------------------
    # Finalization
    # -------------------------------------------------------------------
    def finalize(self) -> int:
        """Take stock for every unit that has not been finalized yet.

        Returns the number of units finalized.
        """
        pending_units = self.shipment.pending_units()
        if not pending_units:
            return 0

        self.stock.unstock_manifest(build_manifest(pending_units))
        self.shipment.mark_units_finalized(pending_units)
        return len(pending_units)

    # -------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------
    def _change_state(self, new_state: ShipmentState) -> None:
        previous_state = self.shipment.state
        if self.shipment.change_state(new_state):
            logger.info(
                "Shipment state changed",
                shipment_id=str(self.shipment.id),
                previous_state=previous_state,
                next_state=new_state.value,
            )

    def _after_ship(self) -> None:
        self.shipment.record_shipped(suppress_notification=self.suppress_notification)

    def _after_cancel(self) -> None:
        self.stock.restock_manifest(self.shipment.manifest())

    def _after_resume(self) -> None:
        self.stock.unstock_manifest(self.shipment.manifest())
