"""EditReview: the reviewer revises a review that is not yet approved."""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.exceptions import NotPermitted
from marketplace.review.moderation import load_review
from marketplace.review.review import Review


@marketplace.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    rating = Integer()
    comment = Text()


@marketplace.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        review = load_review(command.review_id)
        if str(review.reviewer_id) != str(command.reviewer_id):
            raise NotPermitted({"review": ["Only the reviewer can edit this review"]})

        review.edit(rating=command.rating, comment=command.comment)
        current_domain.repository_for(Review).add(review)
