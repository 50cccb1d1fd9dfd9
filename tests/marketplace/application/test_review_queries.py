"""Application tests for review visibility, review listings and the moderation queue."""

from types import SimpleNamespace

import pytest
from marketplace.exceptions import NotFound, NotPermitted
from marketplace.order.fulfillment import UpdateOrderStatus
from marketplace.review.moderation import ModerateReview
from marketplace.review.queries import (
    ReviewFilter,
    get_review,
    list_pending_reviews,
    list_reviews,
    list_reviews_for_user,
    my_reviews,
)
from marketplace.review.submission import SubmitReview
from marketplace.shared.principal import Principal
from protean import current_domain
from protean.exceptions import ValidationError


@pytest.fixture()
def review_id(world, completed_order):
    return current_domain.process(
        SubmitReview(
            order_id=completed_order,
            reviewer_id=world.buyer_id,
            reviewer_role="BUYER",
            reviewee_id=world.farmer_user_id,
            rating=5,
            comment="Fresh produce and friendly service.",
        ),
        asynchronous=False,
    )


def _review(order_id, reviewer_id, role, reviewee_id, rating):
    return current_domain.process(
        SubmitReview(
            order_id=order_id,
            reviewer_id=reviewer_id,
            reviewer_role=role,
            reviewee_id=reviewee_id,
            rating=rating,
            comment="Reviewed after a completed order.",
        ),
        asynchronous=False,
    )


def _moderate(review_id, action, admin_id):
    current_domain.process(
        ModerateReview(review_id=review_id, moderator_id=admin_id, moderator_role="ADMIN", action=action),
        asynchronous=False,
    )


class TestVisibility:
    def test_pending_review_is_not_public(self, world, review_id):
        with pytest.raises(NotFound):
            get_review(review_id, None)
        assert list_reviews_for_user(world.farmer_user_id, None) == []

    def test_pending_review_is_visible_to_parties_and_admin(self, world, review_id):
        for viewer in (world.buyer, world.farmer, world.admin):
            assert get_review(review_id, viewer).id == review_id

    def test_approved_review_is_public(self, world, review_id):
        _moderate(review_id, "approve", world.admin_id)
        assert get_review(review_id, None).is_approved
        assert [r.id for r in list_reviews_for_user(world.farmer_user_id, None)] == [review_id]

    def test_rejected_review_is_kept_for_author_and_admin(self, world, review_id):
        _moderate(review_id, "reject", world.admin_id)
        assert get_review(review_id, world.buyer).id == review_id
        assert get_review(review_id, world.admin).id == review_id
        with pytest.raises(NotFound):
            get_review(review_id, world.farmer)
        stranger = Principal(user_id="someone-else", role="BUYER")
        assert list_reviews_for_user(world.farmer_user_id, stranger) == []


class TestPendingQueue:
    def test_lists_pending_reviews_for_admins(self, world, review_id):
        assert [r.id for r in list_pending_reviews(world.admin)] == [review_id]

        _moderate(review_id, "approve", world.admin_id)
        assert list_pending_reviews(world.admin) == []

    def test_non_admins_are_refused(self, world, review_id):
        with pytest.raises(NotPermitted):
            list_pending_reviews(world.buyer)


@pytest.fixture()
def history(world, builders):
    """Three buyer reviews (approved, rejected, pending) and one pending farmer review."""
    orders = []
    for _ in range(3):
        order_id = builders.place_order(world.buyer_id, world.farmer_id, [(world.product_id, 1)])
        for status in ("ACCEPTED", "COMPLETED"):
            current_domain.process(
                UpdateOrderStatus(order_id=order_id, status=status, actor_id=world.farmer_user_id, actor_role="FARMER"),
                asynchronous=False,
            )
        orders.append(order_id)

    approved, rejected, pending = (
        _review(order_id, world.buyer_id, "BUYER", world.farmer_user_id, rating)
        for order_id, rating in zip(orders, (5, 2, 4))
    )
    _moderate(approved, "approve", world.admin_id)
    _moderate(rejected, "reject", world.admin_id)
    about_buyer = _review(orders[0], world.farmer_user_id, "FARMER", world.buyer_id, 5)
    return SimpleNamespace(approved=approved, rejected=rejected, pending=pending, about_buyer=about_buyer)


def _ids(page):
    return [r.id for r in page.items]


class TestListReviews:
    def test_filter_by_reviewer_role_newest_first(self, world, history):
        page = list_reviews(ReviewFilter(reviewer_role="buyer"), world.admin)
        assert _ids(page) == [history.pending, history.rejected, history.approved]
        assert page.total == 3

    def test_anonymous_viewers_see_approved_only(self, world, history):
        page = list_reviews(ReviewFilter(reviewee_id=world.farmer_user_id))
        assert _ids(page) == [history.approved]
        assert page.total == 1

    def test_approval_filter_is_for_admins(self, world, history):
        assert _ids(list_reviews(ReviewFilter(approved=True), world.admin)) == [history.approved]
        assert set(_ids(list_reviews(ReviewFilter(approved=False), world.admin))) == {
            history.rejected,
            history.pending,
            history.about_buyer,
        }

        # Ignored for everyone else: the buyer still sees all four of their reviews
        assert list_reviews(ReviewFilter(approved=True), world.buyer).total == 4

    def test_pagination_counts_all_visible_reviews(self, world, history):
        first = list_reviews(ReviewFilter(), world.admin, page=1, limit=3)
        second = list_reviews(ReviewFilter(), world.admin, page=2, limit=3)
        assert len(first.items) == 3
        assert len(second.items) == 1
        assert first.total == second.total == 4
        assert set(_ids(first)) | set(_ids(second)) == {
            history.approved,
            history.rejected,
            history.pending,
            history.about_buyer,
        }

    @pytest.mark.parametrize("page, limit", [(0, 20), (1, 0), (1, 101)])
    def test_page_bounds(self, world, page, limit):
        with pytest.raises(ValidationError):
            list_reviews(ReviewFilter(), world.admin, page=page, limit=limit)

    def test_unknown_reviewer_role(self, world):
        with pytest.raises(ValidationError):
            list_reviews(ReviewFilter(reviewer_role="ADMIN"), world.admin)


class TestMyReviews:
    def test_given_includes_my_rejected_reviews(self, world, history):
        page = my_reviews(world.buyer, "given")
        assert _ids(page) == [history.pending, history.rejected, history.approved]

    def test_received_hides_rejected_reviews_from_the_reviewee(self, world, history):
        page = my_reviews(world.farmer, "received")
        assert _ids(page) == [history.pending, history.approved]
        assert _ids(my_reviews(world.buyer, "received")) == [history.about_buyer]

    def test_defaults_to_given(self, world, history):
        assert _ids(my_reviews(world.farmer)) == [history.about_buyer]

    def test_unknown_type(self, world):
        with pytest.raises(ValidationError) as exc:
            my_reviews(world.buyer, "sent")
        assert "type" in exc.value.messages
