"""Shared BDD fixtures and step definitions for the Shipping domain."""

import pytest
from pytest_bdd import given, parsers, then
from shipping.config import ShippingSettings
from shipping.errors import InvalidStateChange
from shipping.orders.fake_adapter import FakeOrder
from shipping.shipment.events import (
    ShipmentCreated,
    ShipmentFinalized,
    ShipmentShipped,
    ShipmentStateChanged,
    ShippingRateSelected,
)
from shipping.shipment.shipment import Shipment, ShipmentState
from shipping.shipment.state_machine import ShipmentStateMachine
from shipping.stock_location.fake_adapter import FakeStockLocation

_SHIPMENT_EVENT_CLASSES = {
    "ShipmentCreated": ShipmentCreated,
    "ShipmentStateChanged": ShipmentStateChanged,
    "ShipmentShipped": ShipmentShipped,
    "ShippingRateSelected": ShippingRateSelected,
    "ShipmentFinalized": ShipmentFinalized,
}

_DEFAULT_UNITS = [
    {"variant_id": "var-kb", "line_item_id": "li-1", "quantity": 2},
    {"variant_id": "var-mp", "line_item_id": "li-2"},
]


@pytest.fixture()
def error():
    """Container for captured transition errors."""
    return {"exc": None}


@pytest.fixture()
def bdd_order():
    return FakeOrder("ord-bdd-001")


@pytest.fixture()
def bdd_location():
    return FakeStockLocation("loc-bdd", count_on_hand={"var-kb": 10, "var-mp": 10})


@pytest.fixture()
def machine_for(bdd_order, bdd_location):
    def _build(shipment):
        return ShipmentStateMachine(
            shipment,
            order=bdd_order,
            stock_location=bdd_location,
            settings=ShippingSettings(require_payment_to_ship=True),
        )

    return _build


def _new_shipment():
    shipment = Shipment.create(order_id="ord-bdd-001", stock_location_id="loc-bdd", units_data=_DEFAULT_UNITS)
    shipment._events.clear()
    return shipment


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending shipment", target_fixture="shipment")
def pending_shipment():
    return _new_shipment()


@given("a ready shipment", target_fixture="shipment")
def ready_shipment():
    shipment = _new_shipment()
    shipment.change_state(ShipmentState.READY)
    shipment._events.clear()
    return shipment


@given("a shipped shipment", target_fixture="shipment")
def shipped_shipment():
    shipment = _new_shipment()
    shipment.change_state(ShipmentState.READY)
    shipment.change_state(ShipmentState.SHIPPED)
    shipment._events.clear()
    return shipment


@given("the order is not paid")
def order_not_paid(bdd_order):
    bdd_order.paid = False


@given("the order is paid")
def order_paid(bdd_order):
    bdd_order.paid = True


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipment state is "{state}"'))
def shipment_state_is(shipment, state):
    assert shipment.state == state


@then("the transition is rejected")
def transition_rejected(error):
    assert error["exc"] is not None, "Expected an invalid state change but none was raised"
    assert isinstance(error["exc"], InvalidStateChange)


@then(parsers.cfparse("a {event_type} event is raised"))
def shipment_event_raised(shipment, event_type):
    event_cls = _SHIPMENT_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in shipment._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in shipment._events]}"


@then(parsers.cfparse("the shipment has {count:d} state changes"))
def shipment_has_n_state_changes(shipment, count):
    assert len(shipment.state_changes) == count


@then(parsers.cfparse('the location has {count:d} units of "{variant_id}" on hand'))
def location_count_on_hand(bdd_location, count, variant_id):
    assert bdd_location.count_on_hand[variant_id] == count
