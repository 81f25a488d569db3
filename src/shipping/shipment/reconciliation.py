"""Shipment state reconciliation — commands and handler.

Background consistency jobs use these to pull shipments back in line with
their order after the order changed out of band (paid, canceled, held).
Reconciliation writes the state directly and never moves stock.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment
from shipping.shipment.state_machine import ShipmentStateMachine

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class SyncShipmentState:
    """Recompute one shipment's state from its order."""

    shipment_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class SyncOrderShipments:
    """Recompute the state of every shipment of an order."""

    order_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class ShipmentReconciliationHandler:
    @handle(SyncShipmentState)
    def sync_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if ShipmentStateMachine.for_shipment(shipment).sync_state():
            repo.add(shipment)
        return shipment.state

    @handle(SyncOrderShipments)
    def sync_order(self, command):
        repo = current_domain.repository_for(Shipment)
        shipments = repo.for_order(command.order_id)
        if not shipments:
            logger.info("No shipments found for order", order_id=str(command.order_id))
            return {}

        states = {}
        for shipment in shipments:
            if ShipmentStateMachine.for_shipment(shipment).sync_state():
                repo.add(shipment)
            states[str(shipment.id)] = shipment.state
        return states
