import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from shipping.config import ShippingSettings, reset_settings, set_settings
from shipping.estimator import reset_estimator, set_estimator
from shipping.estimator.fake_adapter import FakeRateEstimator
from shipping.notifier import reset_notifier, set_notifier
from shipping.notifier.fake_adapter import FakeShipmentNotifier
from shipping.orders import reset_order_source, set_order_source
from shipping.orders.fake_adapter import FakeOrder, FakeOrderSource
from shipping.stock_location import register_stock_location, reset_stock_locations
from shipping.stock_location.fake_adapter import FakeStockLocation


@pytest.fixture(scope="session")
def shipping_bed():
    from shipping.domain import shipping
    from shipping.utils.db import drop_db, setup_db

    bed = DomainFixture(shipping)
    bed.setup()
    setup_db(shipping)
    yield bed
    drop_db(shipping)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(shipping_bed):
    with shipping_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def _adapters():
    """Start every test with fresh collaborators and default settings."""
    set_settings(ShippingSettings(require_payment_to_ship=True))
    yield
    reset_settings()
    reset_order_source()
    reset_stock_locations()
    reset_estimator()
    reset_notifier()


@pytest.fixture
def order_source():
    source = FakeOrderSource()
    set_order_source(source)
    return source


@pytest.fixture
def order(order_source):
    return order_source.add(
        FakeOrder(
            "ord-001",
            line_item_totals={"li-1": 20.0, "li-2": 15.5},
        )
    )


@pytest.fixture
def location():
    return register_stock_location(FakeStockLocation("loc-1", count_on_hand={"var-1": 10, "var-2": 10}))


@pytest.fixture
def estimator():
    fake = FakeRateEstimator()
    set_estimator(fake)
    return fake


@pytest.fixture
def notifier():
    fake = FakeShipmentNotifier()
    set_notifier(fake)
    return fake
