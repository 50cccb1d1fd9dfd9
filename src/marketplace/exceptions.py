"""Typed business errors for the marketplace core.

Every business failure extends a Protean exception so that it flows through
the same handlers as framework validation errors. Message payloads follow the
Protean convention of a ``{field: [messages]}`` dict.

Infrastructure failures (``ExpectedVersionError`` once retries are exhausted,
``DatabaseError``, ``TransactionError``) are never wrapped here; they
propagate unchanged.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class NotFound(ObjectNotFoundError):
    """A referenced user, farmer, product, order, review or message does not exist."""

    def __init__(self, kind: str, identifier, **kwargs):
        self.kind = kind
        self.identifier = str(identifier) if identifier is not None else None
        super().__init__(f"{kind} {self.identifier} does not exist", **kwargs)


class InvalidStatusTransition(ValidationError):
    """An illegal order or moderation edge was attempted."""


class InsufficientStock(ValidationError):
    """A stock decrement would leave the product below zero."""


class OrderNotCancellable(ValidationError):
    """Cancellation attempted outside PENDING/ACCEPTED."""


class AlreadyModerated(ValidationError):
    """Moderation re-applied to an item that already carries a final decision."""


class AlreadyApproved(AlreadyModerated):
    pass


class CannotRejectApproved(AlreadyModerated):
    pass


class InvariantViolation(ValidationError):
    """Internal consistency check failed, e.g. sender == receiver."""


class Forbidden(ValidationError):
    """The principal may not perform this operation on this record."""


class IneligibleReviewer(Forbidden):
    """Reviewer is not a participant, has the wrong role, already reviewed,
    or the order is not completed."""


class NotPermitted(Forbidden):
    """Principal lacks ownership of, or the role required for, the record."""
