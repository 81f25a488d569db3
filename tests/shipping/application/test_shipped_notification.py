"""Application tests for the shipped notification event handler."""

import json

import pytest
from protean import current_domain
from shipping.shipment.creation import CreateShipment
from shipping.shipment.transitions import CancelShipment, ReadyShipment, ShipShipment


@pytest.fixture(autouse=True)
def _collaborators(order, location):
    pass


def _ready_shipment():
    units = json.dumps([{"variant_id": "var-1", "line_item_id": "li-1"}])
    shipment_id = current_domain.process(
        CreateShipment(order_id="ord-001", stock_location_id="loc-1", inventory_units=units),
        asynchronous=False,
    )
    current_domain.process(ReadyShipment(shipment_id=shipment_id), asynchronous=False)
    return shipment_id


class TestShippedNotification:
    def test_sent_once_on_ship(self, notifier):
        shipment_id = _ready_shipment()
        current_domain.process(ShipShipment(shipment_id=shipment_id, tracking="TRK-1"), asynchronous=False)
        assert len(notifier.delivered()) == 1
        assert notifier.delivered()[0]["shipment_id"] == shipment_id
        assert notifier.delivered()[0]["tracking"] == "TRK-1"

    def test_suppressed(self, notifier):
        shipment_id = _ready_shipment()
        current_domain.process(
            ShipShipment(shipment_id=shipment_id, suppress_notification=True),
            asynchronous=False,
        )
        assert notifier.delivered() == []
        assert notifier.notifications[0]["suppressed"] is True

    def test_not_sent_for_other_transitions(self, notifier):
        shipment_id = _ready_shipment()
        current_domain.process(CancelShipment(shipment_id=shipment_id), asynchronous=False)
        assert notifier.notifications == []

    def test_failed_notification_keeps_shipment_shipped(self, notifier):
        notifier.configure(should_succeed=False)
        shipment_id = _ready_shipment()
        state = current_domain.process(ShipShipment(shipment_id=shipment_id), asynchronous=False)
        assert state == "Shipped"
        assert len(notifier.notifications) == 1
