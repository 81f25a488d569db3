"""Fake shipment notifier — records notifications for testing."""

from shipping.notifier.port import ShipmentNotifier


class FakeShipmentNotifier(ShipmentNotifier):
    """Notifier that records shipped notifications in memory."""

    def __init__(self):
        self.notifications: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Mailer unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Mailer unavailable"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def on_shipped(self, shipment, suppress: bool = False) -> dict:
        record = {
            "shipment_id": str(shipment.id),
            "number": shipment.number,
            "tracking": shipment.tracking,
            "suppressed": suppress,
        }
        self.notifications.append(record)

        if suppress:
            return {"status": "suppressed"}
        if not self.should_succeed:
            return {"status": "failed", "error": self.failure_reason}
        return {"status": "sent"}

    def delivered(self) -> list[dict]:
        """Notifications that actually reached the customer."""
        return [n for n in self.notifications if not n["suppressed"]]

    def reset(self):
        self.notifications.clear()
        self.should_succeed = True
        self.failure_reason = "Mailer unavailable"
