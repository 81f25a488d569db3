"""Package — what the rate estimator sees of a shipment."""

from dataclasses import dataclass

from shipping.shipment.manifest import build_manifest


@dataclass(frozen=True)
class PackageContent:
    variant_id: str
    line_item_id: str
    state: str
    quantity: int


@dataclass(frozen=True)
class Package:
    shipment_id: str
    stock_location_id: str | None
    contents: tuple[PackageContent, ...] = ()

    def quantity(self, state: str | None = None) -> int:
        """Number of units in the package, optionally only those in ``state``."""
        return sum(c.quantity for c in self.contents if state is None or c.state == state)

    def variant_ids(self) -> list[str]:
        return list(dict.fromkeys(c.variant_id for c in self.contents))


def to_package(shipment) -> Package:
    """Build the estimator package from the shipment's units, split by per-unit state."""
    contents = tuple(
        PackageContent(
            variant_id=item.variant_id,
            line_item_id=item.line_item_id,
            state=state,
            quantity=quantity,
        )
        for item in build_manifest(shipment.inventory_units or [])
        for state, quantity in item.states.items()
    )
    return Package(
        shipment_id=str(shipment.id),
        stock_location_id=str(shipment.stock_location_id) if shipment.stock_location_id else None,
        contents=contents,
    )
