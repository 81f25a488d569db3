"""Shipping rates — quoting, selection and the commands that drive them.

RateSelector asks the estimator for quotes on the shipment's package. A
refresh replaces the quote set wholesale but keeps the customer's previously
chosen shipping method selected when it is still offered.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from shipping.domain import shipping
from shipping.estimator import get_estimator
from shipping.orders import get_order_source
from shipping.shipment.packaging import to_package
from shipping.shipment.shipment import Shipment, ShippingRate

logger = structlog.get_logger(__name__)


class RateSelector:
    def __init__(self, estimator=None):
        self.estimator = estimator or get_estimator()

    def _quote(self, shipment: Shipment) -> list[ShippingRate]:
        return [
            ShippingRate(
                shipping_method_id=quote.shipping_method_id,
                name=quote.name,
                cost=quote.cost,
                selected=quote.selected,
                tracking_url_template=quote.tracking_url,
            )
            for quote in self.estimator.quote(to_package(shipment))
        ]

    def refresh_rates(self, shipment: Shipment, order) -> list[ShippingRate]:
        if shipment.is_shipped():
            return list(shipment.shipping_rates)

        address = order.ship_address()
        if address is None or not address.is_valid():
            return []

        # The replacement below drops the current selection
        original_method_id = shipment.shipping_method_id()

        new_rates = self._quote(shipment)

        # Keep the customer's method if it is still offered, else the estimator's default
        kept = next((rate for rate in new_rates if str(rate.shipping_method_id) == original_method_id), None)
        if kept is not None:
            for rate in new_rates:
                rate.selected = rate is kept

        shipment.replace_shipping_rates(new_rates)
        logger.info(
            "Shipping rates refreshed",
            shipment_id=str(shipment.id),
            rate_count=len(new_rates),
            selected_method_id=shipment.shipping_method_id(),
        )
        return list(shipment.shipping_rates)

    def select_shipping_method(self, shipment: Shipment, shipping_method_id: str) -> ShippingRate:
        """Price ``shipping_method_id`` afresh and make it the shipment's only rate."""
        rates = self._quote(shipment)
        rate = next((r for r in rates if str(r.shipping_method_id) == str(shipping_method_id)), None)
        if rate is None:
            raise ObjectNotFoundError(
                {"shipping_method_id": [f"Shipping method {shipping_method_id} is not available for this shipment"]}
            )

        rate.selected = True
        shipment.replace_shipping_rates([rate])
        return rate


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@shipping.command(part_of="Shipment")
class RefreshShippingRates:
    """Re-quote the shipment with the rate estimator."""

    shipment_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class SelectShippingMethod:
    """Replace the shipment's quotes with one fresh quote for a method."""

    shipment_id = Identifier(required=True)
    shipping_method_id = Identifier(required=True)


@shipping.command(part_of="Shipment")
class SetSelectedShippingRate:
    """Switch the selection to another of the shipment's existing quotes."""

    shipment_id = Identifier(required=True)
    shipping_rate_id = Identifier(required=True)


@shipping.command_handler(part_of=Shipment)
class ShippingRatesHandler:
    @handle(RefreshShippingRates)
    def refresh_rates(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        order = get_order_source().get(shipment.order_id)
        rates = RateSelector().refresh_rates(shipment, order)
        repo.add(shipment)
        return [str(rate.id) for rate in rates]

    @handle(SelectShippingMethod)
    def select_shipping_method(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        rate = RateSelector().select_shipping_method(shipment, command.shipping_method_id)
        shipment.update_amounts()
        repo.add(shipment)
        return str(rate.id)

    @handle(SetSelectedShippingRate)
    def set_selected_rate(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.set_selected_rate_id(command.shipping_rate_id)
        # The cost follows the selection so order totals can be recalculated
        shipment.update_amounts()
        repo.add(shipment)
