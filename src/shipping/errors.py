"""Typed errors raised by the Shipping domain.

Field-level problems use Protean's ``ValidationError`` and missing rates use
``ObjectNotFoundError``. The classes here cover the remaining failure kinds so
callers can catch by type instead of parsing messages.
"""

from protean.exceptions import InvalidOperationError


class InvalidStateChange(InvalidOperationError):
    """A strict transition was requested from a state that does not allow it."""


class DestroyBlocked(InvalidOperationError):
    """A shipped or canceled shipment cannot be deleted."""


class CollaboratorFailure(Exception):
    """Base for failures reported by an external collaborator."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class LedgerFailure(CollaboratorFailure):
    """The stock-location ledger rejected a restock or unstock."""


class EstimatorFailure(CollaboratorFailure):
    """The rate estimator could not produce quotes."""
