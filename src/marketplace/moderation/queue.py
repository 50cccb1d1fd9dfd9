"""Moderation queue: the PENDING → APPROVED | REJECTED shape shared by
reviews and messages.

An unset flag counts as PENDING. The moderator reference and timestamp are
all-or-nothing with the flag: a decided item carries both, a pending one
carries neither. Reviews add their own policy on top (approval is final,
rejection is not); messages use the rule here as is.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError

from marketplace.exceptions import AlreadyModerated


class ModerationFlag(Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


_VERBS = {"APPROVE": "APPROVED", "REJECT": "REJECTED"}


def parse_flag(value) -> ModerationFlag:
    """Read a moderator's decision, given as a flag (``APPROVED``) or a verb (``approve``), in any case."""
    text = str(value or "").strip().upper()
    try:
        return ModerationFlag(_VERBS.get(text, text))
    except ValueError:
        raise ValidationError({"action": [f"Unknown moderation action: {value}"]}) from None


def flag_of(item) -> ModerationFlag:
    return ModerationFlag(item.moderation_flag) if item.moderation_flag else ModerationFlag.PENDING


def can_moderate(item) -> bool:
    return flag_of(item) == ModerationFlag.PENDING


def moderate(item, moderator_id, flag, moderated_at=None):
    """Stamp a moderation decision on ``item`` (a review or a message).

    Raises ``AlreadyModerated`` when the item already carries a decision,
    unless the decision is being reset to PENDING.
    """
    flag = ModerationFlag(flag)
    if flag != ModerationFlag.PENDING and not can_moderate(item):
        raise AlreadyModerated({"moderation_flag": [f"Already moderated: {flag_of(item).value}"]})

    item.apply_moderation(flag, moderator_id, moderated_at or datetime.now(UTC))


def is_visible_to(item, viewer, author_id, counterparty_id) -> bool:
    """Whether ``viewer`` (a Principal, or None when anonymous) may see ``item``.

    Approved items are visible to anyone. Pending items are visible to admins
    and both parties. Rejected items stay in the store for audit but only the
    author and admins still see them.
    """
    flag = flag_of(item)
    if flag == ModerationFlag.APPROVED:
        return True
    if viewer is None:
        return False
    if viewer.is_admin or str(viewer.user_id) == str(author_id):
        return True
    return flag == ModerationFlag.PENDING and str(viewer.user_id) == str(counterparty_id)
