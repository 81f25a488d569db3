"""Shipping manifest — the shipment's units collapsed per variant and line item.

Stock adjustments and packaging both work on manifest items rather than on
individual inventory units: one item per (variant, line item) pair, with the
quantity broken down by per-unit state.
"""

from dataclasses import dataclass, field


@dataclass
class ManifestItem:
    variant_id: str
    line_item_id: str
    quantity: int = 0
    states: dict[str, int] = field(default_factory=dict)

    def quantity_in(self, state: str) -> int:
        return self.states.get(state, 0)


def build_manifest(units) -> list[ManifestItem]:
    """Group ``units`` by variant, then by line item.

    Groups keep the order in which their first unit appears, so the same set
    of units always yields the same manifest.
    """
    by_variant: dict[str, dict[str, ManifestItem]] = {}
    for unit in units:
        variant_id = str(unit.variant_id)
        line_item_id = str(unit.line_item_id)

        items = by_variant.setdefault(variant_id, {})
        item = items.get(line_item_id)
        if item is None:
            item = items[line_item_id] = ManifestItem(variant_id=variant_id, line_item_id=line_item_id)

        item.quantity += 1
        item.states[unit.state] = item.states.get(unit.state, 0) + 1

    return [item for items in by_variant.values() for item in items.values()]
