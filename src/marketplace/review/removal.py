"""DeleteReview: the reviewer or an admin removes a review.

Removing an approved buyer review changes the farmer's approved set, so the
rating is recomputed in the same Unit of Work. The order keeps its review
marker, so a deleted review never frees its direction for a second review.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import NotPermitted
from marketplace.farmer.rating import recompute_rating
from marketplace.review.moderation import load_review
from marketplace.review.review import Review
from marketplace.user.user import is_admin


@marketplace.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=10)


@marketplace.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        review = load_review(command.review_id)
        if not is_admin(command.actor_role) and str(review.reviewer_id) != str(command.actor_id):
            raise NotPermitted({"review": ["Only the reviewer or an administrator can delete this review"]})

        affects_rating = review.counts_toward_rating

        current_domain.repository_for(Review)._dao.delete(review)

        if affects_rating:
            recompute_rating(review.reviewee_id)

        logger.info(
            "Review deleted",
            review_id=str(review.id),
            deleted_by=str(command.actor_id),
            recomputed=affects_rating,
        )
