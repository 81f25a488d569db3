"""Repository for the Shipment aggregate."""

from datetime import UTC, datetime

from shipping.domain import shipping
from shipping.shipment.shipment import Shipment, ShipmentState


@shipping.repository(part_of=Shipment)
class ShipmentRepository:
    """Shipment lookups used by reconciliation jobs and admin screens."""

    def by_number(self, number: str) -> Shipment | None:
        return self._dao.query.filter(number=number).all().first

    def for_order(self, order_id: str) -> list[Shipment]:
        return self._dao.query.filter(order_id=str(order_id)).all().items

    def with_state(self, *states: ShipmentState) -> list[Shipment]:
        wanted = {state.value for state in states}
        return [shipment for shipment in self._dao.query.all().items if shipment.state in wanted]

    def trackable(self) -> list[Shipment]:
        """Shipments that carry a non-blank tracking number."""
        return [shipment for shipment in self._dao.query.all().items if shipment.tracking]

    def reverse_chronological(self) -> list[Shipment]:
        """Most recently shipped first, falling back to creation time."""
        return sorted(
            self._dao.query.all().items,
            key=lambda s: (s.shipped_at or s.created_at or datetime.min.replace(tzinfo=UTC), str(s.id)),
            reverse=True,
        )
