"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Review")
class ReviewSubmitted:
    """A participant reviewed the other party of a completed order."""

    __version__ = 1

    review_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reviewee_id = Identifier(required=True)
    reviewer_role = String(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    submitted_at = DateTime(required=True)


@marketplace.event(part_of="Review")
class ReviewApproved:
    __version__ = 1

    review_id = Identifier(required=True)
    reviewee_id = Identifier(required=True)
    reviewer_role = String(required=True)
    rating = Integer(required=True)
    moderated_by = Identifier(required=True)
    moderated_at = DateTime(required=True)


@marketplace.event(part_of="Review")
class ReviewRejected:
    __version__ = 1

    review_id = Identifier(required=True)
    moderated_by = Identifier(required=True)
    moderated_at = DateTime(required=True)


@marketplace.event(part_of="Review")
class ReviewEdited:
    """The reviewer changed rating or comment; the review is back in the queue."""

    __version__ = 1

    review_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    edited_at = DateTime(required=True)
