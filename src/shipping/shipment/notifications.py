"""Shipped notification — event handler.

Runs after the Unit of Work that shipped the shipment has committed, so a
failing notifier can never undo a shipment.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from shipping.domain import shipping
from shipping.notifier import get_notifier
from shipping.shipment.events import ShipmentShipped
from shipping.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@shipping.event_handler(part_of=Shipment)
class ShipmentNotificationHandler:
    @handle(ShipmentShipped)
    def on_shipment_shipped(self, event: ShipmentShipped) -> None:
        shipment = current_domain.repository_for(Shipment).get(event.shipment_id)
        result = get_notifier().on_shipped(shipment, suppress=event.suppress_notification)

        if result.get("status") == "failed":
            logger.warning(
                "Shipped notification failed",
                shipment_id=str(shipment.id),
                error=result.get("error"),
            )
        else:
            logger.info(
                "Shipped notification dispatched",
                shipment_id=str(shipment.id),
                status=result.get("status"),
            )
