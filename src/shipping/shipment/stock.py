"""Stock adjuster — turns manifest items into ledger movements.

Canceling a shipment puts its stock back (on-hand and backordered units are
returned separately); resuming or finalizing takes it out again. Ledger
failures are not retried. A manifest is applied as a whole: when the ledger
rejects one item, the movements already made for earlier items are reverted
before the failure propagates, so the enclosing Unit of Work can roll back the
transition against an untouched ledger.
"""

import structlog

from shipping.errors import LedgerFailure
from shipping.shipment.manifest import ManifestItem
from shipping.shipment.shipment import InventoryUnitState

logger = structlog.get_logger(__name__)


class StockAdjuster:
    def __init__(self, stock_location, shipment):
        self.stock_location = stock_location
        self.shipment = shipment
        self._applied: list[tuple[str, str, int]] = []

    def _has_ledger(self) -> bool:
        if self.stock_location is None:
            logger.info(
                "Shipment has no stock location, skipping stock adjustment",
                shipment_id=str(self.shipment.id),
            )
            return False
        return True

    def restock(self, item: ManifestItem) -> None:
        on_hand = item.quantity_in(InventoryUnitState.ON_HAND.value)
        backordered = item.quantity_in(InventoryUnitState.BACKORDERED.value)

        if on_hand > 0:
            self.stock_location.restock(item.variant_id, on_hand, self.shipment)
            self._applied.append(("restock", item.variant_id, on_hand))
        if backordered > 0:
            self.stock_location.restock_backordered(item.variant_id, backordered)
            self._applied.append(("restock", item.variant_id, backordered))

    def unstock(self, item: ManifestItem) -> None:
        self.stock_location.unstock(item.variant_id, item.quantity, self.shipment)
        self._applied.append(("unstock", item.variant_id, item.quantity))

    def restock_manifest(self, items: list[ManifestItem]) -> None:
        if not self._has_ledger():
            return
        self._apply_all(self.restock, items)
        logger.info(
            "Shipment stock restocked",
            shipment_id=str(self.shipment.id),
            stock_location_id=str(self.stock_location.id),
            items=len(items),
        )

    def unstock_manifest(self, items: list[ManifestItem]) -> None:
        if not self._has_ledger():
            return
        self._apply_all(self.unstock, items)
        logger.info(
            "Shipment stock unstocked",
            shipment_id=str(self.shipment.id),
            stock_location_id=str(self.stock_location.id),
            items=len(items),
        )

    def _apply_all(self, movement, items: list[ManifestItem]) -> None:
        self._applied = []
        try:
            for item in items:
                movement(item)
        except LedgerFailure as exc:
            logger.warning(
                "Ledger rejected stock movement, reverting applied movements",
                shipment_id=str(self.shipment.id),
                stock_location_id=str(self.stock_location.id),
                reverted=len(self._applied),
                reason=exc.reason,
            )
            self._revert()
            raise
        finally:
            self._applied = []

    def _revert(self) -> None:
        """Undo applied movements, newest first."""
        for method, variant_id, quantity in reversed(self._applied):
            try:
                if method == "restock":
                    self.stock_location.unstock(variant_id, quantity, self.shipment)
                else:
                    self.stock_location.restock(variant_id, quantity, self.shipment)
            except LedgerFailure as exc:
                # The original failure is still raised; this one needs manual repair
                logger.error(
                    "Could not revert stock movement",
                    shipment_id=str(self.shipment.id),
                    method=method,
                    variant_id=variant_id,
                    quantity=quantity,
                    reason=exc.reason,
                )
