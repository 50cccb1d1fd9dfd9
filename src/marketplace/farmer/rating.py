"""Farmer rating: derived from approved buyer reviews, never written by hand.

``recompute_rating`` rescans every approved BUYER review of the farmer's
user and stores the half-up average (one decimal) and the count on the
Farmer profile. It runs inside whichever Unit of Work changed the approved
set, so the rating commits or aborts with that change. A full rescan is
O(reviews per farmer); it keeps the rating correct under any interleaving
of approvals, edits and deletions.
"""

from decimal import Decimal

from protean.utils.globals import current_domain

from marketplace.domain import logger
from marketplace.farmer.farmer import Farmer
from marketplace.farmer.registration import farmer_for_user
from marketplace.moderation.queue import ModerationFlag
from marketplace.review.review import Review, ReviewerRole
from marketplace.shared.money import round_half_up


def approved_buyer_ratings(farmer_user_id) -> list[int]:
    reviews = (
        current_domain.repository_for(Review)
        ._dao.query.filter(
            reviewee_id=str(farmer_user_id),
            reviewer_role=ReviewerRole.BUYER.value,
            moderation_flag=ModerationFlag.APPROVED.value,
        )
        .all()
        .items
    )
    return [review.rating for review in reviews]


def recompute_rating(farmer_user_id) -> Farmer | None:
    """Refresh the rating of the farmer owned by ``farmer_user_id``.

    Returns the updated profile, or None when the user owns no farm (a
    buyer reviewed by a farmer has no stored rating).
    """
    farmer = farmer_for_user(farmer_user_id)
    if farmer is None:
        return None

    ratings = approved_buyer_ratings(farmer_user_id)
    if ratings:
        rating = float(round_half_up(Decimal(sum(ratings)) / len(ratings), 1))
    else:
        rating = 0.0

    farmer.record_rating(rating, len(ratings))
    current_domain.repository_for(Farmer).add(farmer)

    logger.info(
        "Farmer rating recomputed",
        farmer_id=str(farmer.id),
        rating=rating,
        review_count=len(ratings),
    )
    return farmer
