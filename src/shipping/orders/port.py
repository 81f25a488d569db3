"""Order port — read-only view of the order a shipment belongs to.

The shipment core never mutates the order. It only asks the questions that
decide whether a shipment may advance, and reads line-item totals for the
shipment's amount helpers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ShipAddress:
    """Destination address as seen by the shipping domain."""

    street: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    state: str | None = None

    def is_valid(self) -> bool:
        return all((self.street, self.city, self.postal_code, self.country))


class OrderFacts(ABC):
    """Facts about one order, evaluated live on every call."""

    @abstractmethod
    def can_ship(self) -> bool:
        """Whether the order has progressed far enough to ship anything."""
        ...

    @abstractmethod
    def is_paid(self) -> bool: ...

    @abstractmethod
    def is_canceled(self) -> bool: ...

    @abstractmethod
    def ship_address(self) -> ShipAddress | None: ...

    @abstractmethod
    def line_item_total(self, line_item_id: str) -> float:
        """Total (price x quantity, after line-level adjustments) of one line item."""
        ...


class OrderSource(ABC):
    """Looks up order facts by order id."""

    @abstractmethod
    def get(self, order_id: str) -> OrderFacts:
        """Return the facts for ``order_id``.

        Raises ObjectNotFoundError when the order is unknown.
        """
        ...
