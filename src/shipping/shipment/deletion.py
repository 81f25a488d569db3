"""Shipment deletion — command and handler.

Only shipments that have neither shipped nor been canceled may be deleted;
the others carry stock and audit history that must survive.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class DeleteShipment:
    shipment_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class DeleteShipmentHandler:
    @handle(DeleteShipment)
    def delete_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.ensure_can_destroy()
        repo._dao.delete(shipment)
        logger.info("Shipment deleted", shipment_id=str(shipment.id), state=shipment.state)
