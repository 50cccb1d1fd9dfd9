"""SubmitReview: rate the other party of a completed order.

The existence check, the unique (order, reviewer, role) index and the
order's per-direction review marker are all written in this handler's Unit
of Work. Marking the order bumps its version, so of two racing submissions
only one commits; the other is re-run and finds the marker set.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import IneligibleReviewer, InvariantViolation, NotFound
from marketplace.order.order import Order
from marketplace.review.eligibility import assert_can_review, counterparty
from marketplace.review.review import Review


@marketplace.command(part_of="Review")
class SubmitReview:
    order_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reviewer_role = String(required=True, max_length=10)
    reviewee_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)


@marketplace.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get_or_none(command.order_id)
        if order is None:
            raise NotFound("Order", command.order_id)

        assert_can_review(order, command.reviewer_id, command.reviewer_role)

        if str(command.reviewer_id) == str(command.reviewee_id):
            raise InvariantViolation({"reviewee_id": ["Cannot review yourself"]})
        if str(command.reviewee_id) != counterparty(order, command.reviewer_role):
            raise IneligibleReviewer({"reviewee_id": ["The reviewee must be the other party of the order"]})

        review = Review.submit(
            order_id=order.id,
            reviewer_id=command.reviewer_id,
            reviewee_id=command.reviewee_id,
            reviewer_role=command.reviewer_role,
            rating=command.rating,
            comment=command.comment,
        )
        current_domain.repository_for(Review).add(review)

        order.mark_reviewed(command.reviewer_role)
        order_repo.add(order)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            order_id=str(order.id),
            reviewer_role=review.reviewer_role,
            rating=review.rating,
        )
        return str(review.id)
