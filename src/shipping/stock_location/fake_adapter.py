"""Fake stock location — in-memory ledger for development and testing.

Tracks count-on-hand per variant and records every call so tests can assert
on the exact movements a transition produced.
"""

from shipping.errors import LedgerFailure
from shipping.stock_location.port import StockLocation


class FakeStockLocation(StockLocation):
    """Ledger that always succeeds by default."""

    def __init__(self, location_id: str, fulfillable: bool = True, count_on_hand: dict[str, int] | None = None):
        self.id = location_id
        self.fulfillable = fulfillable
        self.count_on_hand: dict[str, int] = dict(count_on_hand or {})
        self.calls: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Ledger unavailable"
        self.failing_variants: set[str] = set()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Ledger unavailable",
        failing_variants: set[str] | None = None,
    ):
        """Configure the fake ledger behavior for testing.

        ``failing_variants`` rejects movements for those variants only.
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_variants = set(failing_variants or ())

    def _guard(self, variant_id: str):
        if not self.should_succeed or variant_id in self.failing_variants:
            raise LedgerFailure(self.failure_reason)

    def _originator_id(self, originator):
        return str(originator.id) if originator is not None else None

    def is_fulfillable(self) -> bool:
        return self.fulfillable

    def restock(self, variant_id: str, quantity: int, originator) -> None:
        self._guard(variant_id)
        self.count_on_hand[variant_id] = self.count_on_hand.get(variant_id, 0) + quantity
        self.calls.append(
            {
                "method": "restock",
                "variant_id": variant_id,
                "quantity": quantity,
                "originator_id": self._originator_id(originator),
            }
        )

    def restock_backordered(self, variant_id: str, quantity: int) -> None:
        self._guard(variant_id)
        self.count_on_hand[variant_id] = self.count_on_hand.get(variant_id, 0) + quantity
        self.calls.append(
            {
                "method": "restock_backordered",
                "variant_id": variant_id,
                "quantity": quantity,
                "originator_id": None,
            }
        )

    def unstock(self, variant_id: str, quantity: int, originator) -> None:
        self._guard(variant_id)
        self.count_on_hand[variant_id] = self.count_on_hand.get(variant_id, 0) - quantity
        self.calls.append(
            {
                "method": "unstock",
                "variant_id": variant_id,
                "quantity": quantity,
                "originator_id": self._originator_id(originator),
            }
        )

    def calls_for(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]
