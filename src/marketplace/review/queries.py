"""Read paths for reviews, filtered through the moderation visibility rule."""

from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.exceptions import NotFound, NotPermitted
from marketplace.moderation.queue import ModerationFlag, is_visible_to
from marketplace.review.moderation import load_review
from marketplace.review.review import Review, ReviewerRole
from marketplace.shared.paging import check_page
from marketplace.shared.principal import Principal


class ReviewDirection(Enum):
    GIVEN = "given"
    RECEIVED = "received"


@dataclass(frozen=True)
class ReviewFilter:
    reviewer_id: str | None = None
    reviewee_id: str | None = None
    reviewer_role: str | None = None
    approved: bool | None = None  # honoured for admins only


@dataclass(frozen=True)
class ReviewPage:
    items: list
    total: int
    page: int
    limit: int


def _visible(review, viewer) -> bool:
    return is_visible_to(review, viewer, author_id=review.reviewer_id, counterparty_id=review.reviewee_id)


def get_review(review_id, viewer=None) -> Review:
    review = load_review(review_id)
    if not _visible(review, viewer):
        # Hidden reviews are indistinguishable from missing ones
        raise NotFound("Review", review_id)
    return review


def list_reviews(
    review_filter: ReviewFilter,
    viewer: Principal | None = None,
    page: int = 1,
    limit: int = 20,
) -> ReviewPage:
    """Reviews matching ``review_filter`` that ``viewer`` may see, newest first.

    Visibility is decided per review, so the page is cut after filtering and
    ``total`` counts only what the viewer can see.
    """
    offset = check_page(page, limit)

    criteria = {}
    if review_filter.reviewer_id:
        criteria["reviewer_id"] = str(review_filter.reviewer_id)
    if review_filter.reviewee_id:
        criteria["reviewee_id"] = str(review_filter.reviewee_id)
    if review_filter.reviewer_role:
        try:
            criteria["reviewer_role"] = ReviewerRole(review_filter.reviewer_role.upper()).value
        except ValueError:
            raise ValidationError({"reviewer_role": [f"Unknown reviewer role: {review_filter.reviewer_role}"]}) from None
    if review_filter.approved is not None and viewer is not None and viewer.is_admin:
        criteria["is_approved"] = review_filter.approved

    reviews = current_domain.repository_for(Review)._dao.query.filter(**criteria).all().items
    visible = sorted(
        (review for review in reviews if _visible(review, viewer)),
        key=lambda r: r.created_at,
        reverse=True,
    )
    return ReviewPage(items=visible[offset : offset + limit], total=len(visible), page=page, limit=limit)


def my_reviews(viewer: Principal, direction="given", page: int = 1, limit: int = 20) -> ReviewPage:
    """Reviews ``viewer`` wrote (``given``) or that were written about them (``received``)."""
    try:
        direction = ReviewDirection(direction)
    except ValueError:
        raise ValidationError({"type": ['Type must be "given" or "received"']}) from None

    if direction == ReviewDirection.GIVEN:
        review_filter = ReviewFilter(reviewer_id=viewer.user_id)
    else:
        review_filter = ReviewFilter(reviewee_id=viewer.user_id)
    return list_reviews(review_filter, viewer, page=page, limit=limit)


def list_reviews_for_user(user_id, viewer=None) -> list[Review]:
    """Reviews written about ``user_id`` that ``viewer`` may see, newest first."""
    reviews = current_domain.repository_for(Review)._dao.query.filter(reviewee_id=str(user_id)).all().items
    visible = [review for review in reviews if _visible(review, viewer)]
    return sorted(visible, key=lambda r: r.created_at, reverse=True)


def list_pending_reviews(viewer) -> list[Review]:
    """The review moderation queue, oldest first. Admins only."""
    if viewer is None or not viewer.is_admin:
        raise NotPermitted({"moderator": ["Only administrators can see the moderation queue"]})

    reviews = (
        current_domain.repository_for(Review)
        ._dao.query.filter(moderation_flag=ModerationFlag.PENDING.value)
        .all()
        .items
    )
    return sorted(reviews, key=lambda r: r.created_at)
