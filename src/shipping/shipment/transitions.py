"""Shipment transitions — commands and handler.

Each command runs the strict variant of its transition, so an illegal request
raises InvalidStateChange and the Unit of Work discards every change,
including stock movements made before the failure surfaced.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment
from shipping.shipment.state_machine import ShipmentStateMachine

logger = structlog.get_logger(__name__)


@shipping.command(part_of="Shipment")
class PendShipment:
    """Send a ready shipment back to pending."""

    shipment_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class ReadyShipment:
    """Mark a pending shipment ready once the order allows it."""

    shipment_id = Identifier(required=True)
    suppress_notification = Boolean(default=False)


@shipping.command(part_of="Shipment")
class ShipShipment:
    """Record that the shipment has left the stock location."""

    shipment_id = Identifier(required=True)
    tracking = String(max_length=255)
    suppress_notification = Boolean(default=False)
    special_instructions = Text()


@shipping.command(part_of="Shipment")
class CancelShipment:
    """Cancel the shipment and return its stock."""

    shipment_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class ResumeShipment:
    """Bring a canceled shipment back and take its stock again."""

    shipment_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class FinalizeShipment:
    """Take stock for every unit that has not been finalized yet."""

    shipment_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class ShipmentTransitionHandler:
    @handle(PendShipment)
    def pend(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        ShipmentStateMachine.for_shipment(shipment).pend_or_raise()
        repo.add(shipment)
        return shipment.state

    @handle(ReadyShipment)
    def ready(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        machine = ShipmentStateMachine.for_shipment(shipment, suppress_notification=command.suppress_notification)
        machine.ready_or_raise()
        repo.add(shipment)
        return shipment.state

    @handle(ShipShipment)
    def ship(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        if command.tracking:
            shipment.tracking = command.tracking
        if command.special_instructions:
            logger.info(
                "Shipping with special instructions",
                shipment_id=str(shipment.id),
                special_instructions=command.special_instructions,
            )
        machine = ShipmentStateMachine.for_shipment(shipment, suppress_notification=command.suppress_notification)
        machine.ship_or_raise()
        repo.add(shipment)
        return shipment.state

    @handle(CancelShipment)
    def cancel(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        ShipmentStateMachine.for_shipment(shipment).cancel_or_raise()
        repo.add(shipment)
        return shipment.state

    @handle(ResumeShipment)
    def resume(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        ShipmentStateMachine.for_shipment(shipment).resume_or_raise()
        repo.add(shipment)
        return shipment.state

    @handle(FinalizeShipment)
    def finalize(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        finalized = ShipmentStateMachine.for_shipment(shipment).finalize()
        repo.add(shipment)
        return finalized
