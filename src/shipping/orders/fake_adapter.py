"""Fake order source — in-memory orders whose facts tests can flip at will."""

from protean.exceptions import ObjectNotFoundError

from shipping.orders.port import OrderFacts, OrderSource, ShipAddress


def _default_address() -> ShipAddress:
    return ShipAddress(
        street="1 Infinite Loop",
        city="Cupertino",
        postal_code="95014",
        country="US",
        state="CA",
    )


class FakeOrder(OrderFacts):
    """Mutable order facts. Every attribute can be changed between calls."""

    def __init__(
        self,
        order_id: str,
        shippable: bool = True,
        paid: bool = True,
        canceled: bool = False,
        address: ShipAddress | None = None,
        line_item_totals: dict[str, float] | None = None,
    ):
        self.id = order_id
        self.shippable = shippable
        self.paid = paid
        self.canceled = canceled
        self.address = address if address is not None else _default_address()
        self.line_item_totals = dict(line_item_totals or {})

    def can_ship(self) -> bool:
        return self.shippable and not self.canceled

    def is_paid(self) -> bool:
        return self.paid

    def is_canceled(self) -> bool:
        return self.canceled

    def ship_address(self) -> ShipAddress | None:
        return self.address

    def line_item_total(self, line_item_id: str) -> float:
        return self.line_item_totals.get(str(line_item_id), 0.0)


class FakeOrderSource(OrderSource):
    """Keeps FakeOrders in a dict keyed by order id."""

    def __init__(self):
        self.orders: dict[str, FakeOrder] = {}

    def add(self, order: FakeOrder) -> FakeOrder:
        self.orders[str(order.id)] = order
        return order

    def get(self, order_id: str) -> OrderFacts:
        try:
            return self.orders[str(order_id)]
        except KeyError:
            raise ObjectNotFoundError({"order_id": [f"Order {order_id} not found"]}) from None

    def reset(self):
        self.orders.clear()
