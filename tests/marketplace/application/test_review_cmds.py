"""Application tests for review eligibility, submission, editing and deletion."""

import pytest
from marketplace.exceptions import IneligibleReviewer, InvariantViolation, NotFound, NotPermitted
from marketplace.order.order import Order
from marketplace.review.editing import EditReview
from marketplace.review.eligibility import can_review
from marketplace.review.moderation import ModerateReview
from marketplace.review.removal import DeleteReview
from marketplace.review.review import Review
from marketplace.review.submission import SubmitReview
from protean import current_domain
from protean.exceptions import ValidationError


def _submit(order_id, reviewer_id, reviewee_id, role="BUYER", rating=5, comment="Fresh produce and friendly service."):
    return current_domain.process(
        SubmitReview(
            order_id=order_id,
            reviewer_id=reviewer_id,
            reviewer_role=role,
            reviewee_id=reviewee_id,
            rating=rating,
            comment=comment,
        ),
        asynchronous=False,
    )


def _approve(review_id, admin_id):
    current_domain.process(
        ModerateReview(review_id=review_id, moderator_id=admin_id, moderator_role="ADMIN", action="approve"),
        asynchronous=False,
    )


class TestCanReview:
    def test_both_parties_may_review_a_completed_order(self, world, completed_order):
        assert can_review(completed_order, world.buyer_id, "BUYER")
        assert can_review(completed_order, world.farmer_user_id, "FARMER")

    def test_not_before_completion(self, world, builders):
        pending = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 1)])
        assert not can_review(pending, world.buyer_id, "BUYER")

    def test_wrong_role_or_stranger(self, world, builders, completed_order):
        stranger = builders.register_user("BUYER", name="Stranger Buyer")
        assert not can_review(completed_order, world.buyer_id, "FARMER")
        assert not can_review(completed_order, world.farmer_user_id, "BUYER")
        assert not can_review(completed_order, stranger, "BUYER")
        assert not can_review(completed_order, world.admin_id, "ADMIN")

    def test_unknown_order(self, world):
        assert not can_review("missing", world.buyer_id, "BUYER")

    def test_once_per_direction(self, world, completed_order):
        _submit(completed_order, world.buyer_id, world.farmer_user_id)
        assert not can_review(completed_order, world.buyer_id, "BUYER")
        assert can_review(completed_order, world.farmer_user_id, "FARMER")


class TestSubmitReview:
    def test_persists_unapproved_and_marks_order(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)

        review = current_domain.repository_for(Review).get(review_id)
        assert review.is_approved is False
        assert review.reviewee_id == world.farmer_user_id

        order = current_domain.repository_for(Order).get(completed_order)
        assert order.buyer_reviewed is True
        assert order.farmer_reviewed is False

    def test_farmer_reviews_buyer(self, world, completed_order):
        review_id = _submit(completed_order, world.farmer_user_id, world.buyer_id, role="FARMER", rating=4)
        assert current_domain.repository_for(Review).get(review_id).reviewer_role == "FARMER"

    def test_second_review_in_same_direction_fails(self, world, completed_order):
        _submit(completed_order, world.buyer_id, world.farmer_user_id)
        with pytest.raises(IneligibleReviewer):
            _submit(completed_order, world.buyer_id, world.farmer_user_id, rating=1)
        assert current_domain.repository_for(Review)._dao.query.all().total == 1

    def test_pending_order_is_ineligible(self, world, builders):
        pending = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 1)])
        with pytest.raises(IneligibleReviewer):
            _submit(pending, world.buyer_id, world.farmer_user_id)

    def test_reviewee_must_be_the_other_party(self, world, builders, completed_order):
        stranger = builders.register_user("FARMER", name="Stranger Farmer")
        with pytest.raises(IneligibleReviewer):
            _submit(completed_order, world.buyer_id, stranger)

    def test_self_review(self, world, completed_order):
        with pytest.raises(InvariantViolation):
            _submit(completed_order, world.buyer_id, world.buyer_id)

    def test_unknown_order(self, world):
        with pytest.raises(NotFound):
            _submit("missing", world.buyer_id, world.farmer_user_id)

    def test_short_comment(self, world, completed_order):
        with pytest.raises(ValidationError):
            _submit(completed_order, world.buyer_id, world.farmer_user_id, comment="ok")
        order = current_domain.repository_for(Order).get(completed_order)
        assert order.buyer_reviewed is False


class TestEditReview:
    def test_reviewer_edits_pending_review(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)
        current_domain.process(
            EditReview(review_id=review_id, reviewer_id=world.buyer_id, rating=3),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).get(review_id).rating == 3

    def test_only_the_reviewer_edits(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)
        with pytest.raises(NotPermitted):
            current_domain.process(
                EditReview(review_id=review_id, reviewer_id=world.farmer_user_id, rating=1),
                asynchronous=False,
            )

    def test_approved_review_is_frozen(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)
        _approve(review_id, world.admin_id)
        with pytest.raises(ValidationError):
            current_domain.process(
                EditReview(review_id=review_id, reviewer_id=world.buyer_id, rating=1),
                asynchronous=False,
            )


class TestDeleteReview:
    def test_deleted_review_does_not_reopen_the_order(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)
        current_domain.process(
            DeleteReview(review_id=review_id, actor_id=world.buyer_id, actor_role="BUYER"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Review).get_or_none(review_id) is None
        assert not can_review(completed_order, world.buyer_id, "BUYER")
        with pytest.raises(IneligibleReviewer):
            _submit(completed_order, world.buyer_id, world.farmer_user_id, rating=2)

    def test_strangers_cannot_delete(self, world, completed_order):
        review_id = _submit(completed_order, world.buyer_id, world.farmer_user_id)
        with pytest.raises(NotPermitted):
            current_domain.process(
                DeleteReview(review_id=review_id, actor_id=world.farmer_user_id, actor_role="FARMER"),
                asynchronous=False,
            )

    def test_unknown_review(self, world):
        with pytest.raises(NotFound):
            current_domain.process(
                DeleteReview(review_id="missing", actor_id=world.admin_id, actor_role="ADMIN"),
                asynchronous=False,
            )
