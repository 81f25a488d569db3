"""Stock location port — the inventory ledger a shipment draws stock from.

The shipping domain tells the ledger how many units to put back or take out,
and attributes the movement to the shipment. Ledger mechanics (stock items,
backorder filling, movement history) belong to the adapter.
"""

from abc import ABC, abstractmethod


class StockLocation(ABC):
    """Abstract interface for stock-location ledger adapters."""

    id: str

    @abstractmethod
    def is_fulfillable(self) -> bool:
        """Whether shipments from this location need physical shipping."""
        ...

    @abstractmethod
    def restock(self, variant_id: str, quantity: int, originator) -> None:
        """Return on-hand units to stock.

        Raises LedgerFailure if the ledger rejects the movement.
        """
        ...

    @abstractmethod
    def restock_backordered(self, variant_id: str, quantity: int) -> None:
        """Return units that were backordered when the shipment was planned."""
        ...

    @abstractmethod
    def unstock(self, variant_id: str, quantity: int, originator) -> None:
        """Take units out of stock on behalf of ``originator``."""
        ...
