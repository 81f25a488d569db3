"""Shipment creation — command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment, generate_shipment_number


@shipping.command(part_of="Shipment")
class CreateShipment:
    """Plan a shipment for part of an order from one stock location."""

    order_id = Identifier(required=True)
    stock_location_id = Identifier()
    inventory_units = Text(required=True)  # JSON list of unit dicts
    cost = Float(min_value=0.0)


@shipping.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        repo = current_domain.repository_for(Shipment)

        # Numbers are random; draw again until one is free
        number = generate_shipment_number()
        while repo.by_number(number) is not None:
            number = generate_shipment_number()

        units_data = (
            json.loads(command.inventory_units)
            if isinstance(command.inventory_units, str)
            else command.inventory_units
        )
        shipment = Shipment.create(
            order_id=command.order_id,
            units_data=units_data,
            stock_location_id=command.stock_location_id,
            cost=command.cost,
            number=number,
        )
        repo.add(shipment)
        return str(shipment.id)
