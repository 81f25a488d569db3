"""Shipment notifier port — tells the customer a shipment has left."""

from abc import ABC, abstractmethod


class ShipmentNotifier(ABC):
    """Abstract interface for shipment notification adapters."""

    @abstractmethod
    def on_shipped(self, shipment, suppress: bool = False) -> dict:
        """Dispatch the shipped notification for ``shipment``.

        When ``suppress`` is true the adapter records the shipment without
        contacting the customer.

        Returns:
            dict with keys: status ("sent", "suppressed" or "failed"), error (optional)
        """
        ...
