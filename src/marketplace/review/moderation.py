"""ModerateReview: an admin approves or rejects a review.

Approval is final and is the only transition that adds to a farmer's
rating, so it recomputes the reviewee's rating in the same Unit of Work.
Rejection leaves the rating alone and can later be overturned by an
approval.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotFound, NotPermitted
from marketplace.farmer.rating import recompute_rating
from marketplace.moderation.queue import ModerationFlag, parse_flag
from marketplace.review.review import ModerationAction, Review, ReviewerRole
from marketplace.user.user import is_admin


@marketplace.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    moderator_role = String(required=True, max_length=10)
    action = String(required=True, max_length=10)  # "approve"/"reject", or the APPROVED/REJECTED flag


def load_review(review_id) -> Review:
    """Fetch a review or raise ``NotFound``."""
    review = current_domain.repository_for(Review).get_or_none(review_id)
    if review is None:
        raise NotFound("Review", review_id)
    return review


@marketplace.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        if not is_admin(command.moderator_role):
            raise NotPermitted({"moderator": ["Only administrators can moderate reviews"]})

        review = load_review(command.review_id)
        flag = parse_flag(command.action)
        if flag == ModerationFlag.PENDING:
            raise ValidationError({"action": ["Reviews can only be approved or rejected"]})
        action = ModerationAction.APPROVE if flag == ModerationFlag.APPROVED else ModerationAction.REJECT

        if action == ModerationAction.APPROVE:
            review.approve(moderator_id=command.moderator_id)
        else:
            review.reject(moderator_id=command.moderator_id)
        current_domain.repository_for(Review).add(review)

        if action == ModerationAction.APPROVE and review.reviewer_role == ReviewerRole.BUYER.value:
            recompute_rating(review.reviewee_id)

        logger.info(
            "Review moderated",
            review_id=str(review.id),
            action=action.value,
            moderated_by=str(command.moderator_id),
        )
