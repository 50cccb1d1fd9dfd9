"""Review aggregate: one participant's rating of the other party of an order.

Buyers review the farmer they bought from; farmers review the buyer. A
review is created unapproved and only counts once a moderator approves it.

Moderation (on top of the shared queue shape):
    PENDING → APPROVED | REJECTED
    REJECTED → APPROVED (a rejection can be reconsidered)
    APPROVED → (final; cannot be rejected or edited)

Editing a pending or rejected review puts it back in the queue.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import Index, atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.exceptions import AlreadyApproved, CannotRejectApproved
from marketplace.moderation.queue import ModerationFlag, flag_of
from marketplace.review.events import (
    ReviewApproved,
    ReviewEdited,
    ReviewRejected,
    ReviewSubmitted,
)
from marketplace.user.user import Role

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MIN_COMMENT = 10
MAX_COMMENT = 1000


class ReviewerRole(Enum):
    BUYER = Role.BUYER.value
    FARMER = Role.FARMER.value


class ModerationAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"


@marketplace.aggregate(
    limit=None,
    indexes=[Index("order_id", "reviewer_id", "reviewer_role", unique=True)],
)
class Review:
    order_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    reviewee_id = Identifier(required=True)
    reviewer_role = String(choices=ReviewerRole, required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)
    is_approved = Boolean(default=False)
    moderation_flag = String(choices=ModerationFlag, default=ModerationFlag.PENDING.value)
    moderated_by = Identifier()
    moderated_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def comment_length(self):
        if self.comment is not None and not MIN_COMMENT <= len(self.comment.strip()) <= MAX_COMMENT:
            raise ValidationError(
                {"comment": [f"Review comment must be between {MIN_COMMENT} and {MAX_COMMENT} characters"]}
            )

    @invariant.post
    def reviewer_is_not_reviewee(self):
        if self.reviewer_id is not None and str(self.reviewer_id) == str(self.reviewee_id):
            raise ValidationError({"reviewee_id": ["Cannot review yourself"]})

    @invariant.post
    def approval_matches_flag(self):
        if self.is_approved != (self.moderation_flag == ModerationFlag.APPROVED.value):
            raise ValidationError({"is_approved": ["Approval must match the moderation flag"]})

    @invariant.post
    def moderation_fields_are_all_or_nothing(self):
        decided = flag_of(self) != ModerationFlag.PENDING
        if decided != (self.moderated_by is not None) or decided != (self.moderated_at is not None):
            raise ValidationError({"moderation_flag": ["A moderation decision needs a moderator and a timestamp"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(cls, order_id, reviewer_id, reviewee_id, reviewer_role, rating, comment):
        now = datetime.now(UTC)
        review = cls(
            order_id=order_id,
            reviewer_id=reviewer_id,
            reviewee_id=reviewee_id,
            reviewer_role=ReviewerRole(reviewer_role).value,
            rating=rating,
            comment=comment.strip() if comment else comment,
            is_approved=False,
            moderation_flag=ModerationFlag.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                order_id=str(order_id),
                reviewer_id=str(reviewer_id),
                reviewee_id=str(reviewee_id),
                reviewer_role=review.reviewer_role,
                rating=rating,
                comment=review.comment,
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    @property
    def counts_toward_rating(self) -> bool:
        """Approved buyer reviews are the only ones that feed a farmer's rating."""
        return self.is_approved and self.reviewer_role == ReviewerRole.BUYER.value

    def apply_moderation(self, flag, moderator_id, moderated_at):
        """Write the moderation fields together. PENDING clears the audit pair."""
        flag = ModerationFlag(flag)
        with atomic_change(self):
            self.moderation_flag = flag.value
            self.is_approved = flag == ModerationFlag.APPROVED
            if flag == ModerationFlag.PENDING:
                self.moderated_by = None
                self.moderated_at = None
            else:
                self.moderated_by = moderator_id
                self.moderated_at = moderated_at
            self.updated_at = datetime.now(UTC)

    def approve(self, moderator_id):
        if self.is_approved:
            raise AlreadyApproved({"review": ["Review is already approved"]})

        now = datetime.now(UTC)
        self.apply_moderation(ModerationFlag.APPROVED, moderator_id, now)
        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                reviewee_id=str(self.reviewee_id),
                reviewer_role=self.reviewer_role,
                rating=self.rating,
                moderated_by=str(moderator_id),
                moderated_at=now,
            )
        )

    def reject(self, moderator_id):
        if self.is_approved:
            raise CannotRejectApproved({"review": ["Cannot reject an approved review"]})

        now = datetime.now(UTC)
        self.apply_moderation(ModerationFlag.REJECTED, moderator_id, now)
        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                moderated_by=str(moderator_id),
                moderated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reviewer edits
    # -------------------------------------------------------------------
    def edit(self, rating=_UNSET, comment=_UNSET):
        if self.is_approved:
            raise ValidationError({"review": ["Approved reviews cannot be edited"]})

        with atomic_change(self):
            if rating is not _UNSET and rating is not None:
                self.rating = rating
            if comment is not _UNSET and comment is not None:
                self.comment = comment.strip()
        self.apply_moderation(ModerationFlag.PENDING, None, None)

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                rating=self.rating,
                comment=self.comment,
                edited_at=self.updated_at,
            )
        )
