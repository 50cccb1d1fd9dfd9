"""Who may review whom, and when.

A participant may review the other party of an order once the order is
COMPLETED, once per direction. ``can_review`` answers the question for the
UI; ``assert_can_review`` is the same rule with a reason, re-checked by the
handler before a review is written.
"""

from protean.utils.globals import current_domain

from marketplace.exceptions import IneligibleReviewer
from marketplace.farmer.farmer import Farmer
from marketplace.order.order import Order, OrderStatus
from marketplace.review.review import Review, ReviewerRole


def review_exists(order_id, reviewer_id, reviewer_role) -> bool:
    return bool(
        current_domain.repository_for(Review)
        ._dao.query.filter(
            order_id=str(order_id),
            reviewer_id=str(reviewer_id),
            reviewer_role=reviewer_role,
        )
        .all()
        .items
    )


def parties_of(order) -> tuple[str, str | None]:
    """(buyer user id, farmer's owning user id) for ``order``."""
    farmer = current_domain.repository_for(Farmer).get_or_none(order.farmer_id)
    return str(order.buyer_id), str(farmer.user_id) if farmer else None


def counterparty(order, reviewer_role) -> str | None:
    """The user a reviewer in ``reviewer_role`` reviews on ``order``."""
    buyer_user, farmer_user = parties_of(order)
    return farmer_user if reviewer_role == ReviewerRole.BUYER.value else buyer_user


def ineligibility_reason(order, user_id, role) -> str | None:
    """Why ``user_id`` cannot review ``order`` as ``role``, or None if they can."""
    if order is None:
        return "Order does not exist"
    if role not in {r.value for r in ReviewerRole}:
        return f"Role {role} cannot write reviews"
    if order.status != OrderStatus.COMPLETED.value:
        return "Reviews can only be written for completed orders"

    buyer_user, farmer_user = parties_of(order)
    participant = buyer_user if role == ReviewerRole.BUYER.value else farmer_user
    if participant is None or str(user_id) != participant:
        return f"Only the order's {role.lower()} can review it as {role}"

    if order.has_been_reviewed_by(role) or review_exists(order.id, user_id, role):
        return "You have already reviewed this order"
    return None


def can_review(order_id, user_id, role) -> bool:
    order = current_domain.repository_for(Order).get_or_none(order_id)
    return ineligibility_reason(order, user_id, role) is None


def assert_can_review(order, user_id, role):
    reason = ineligibility_reason(order, user_id, role)
    if reason:
        raise IneligibleReviewer({"review": [reason]})
