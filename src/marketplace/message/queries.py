"""Read paths for messages: conversations, inboxes and the moderation queue."""

from dataclasses import dataclass

from protean.utils.globals import current_domain
from protean.utils.query import Q

from marketplace.exceptions import NotPermitted
from marketplace.message.message import Message
from marketplace.moderation.queue import ModerationFlag, is_visible_to
from marketplace.shared.principal import Principal


@dataclass(frozen=True)
class ConversationSummary:
    partner_id: str
    last_message: Message
    unread_count: int


def _visible(message, viewer) -> bool:
    return is_visible_to(message, viewer, author_id=message.sender_id, counterparty_id=message.receiver_id)


def _between(user_a, user_b) -> list[Message]:
    a, b = str(user_a), str(user_b)
    return (
        current_domain.repository_for(Message)
        ._dao.query.filter(Q(sender_id=a, receiver_id=b) | Q(sender_id=b, receiver_id=a))
        .all()
        .items
    )


def conversation(user_a, user_b, viewer: Principal) -> list[Message]:
    """Messages between two users that ``viewer`` may see, oldest first."""
    if not viewer.is_admin and str(viewer.user_id) not in {str(user_a), str(user_b)}:
        raise NotPermitted({"conversation": ["You are not part of this conversation"]})

    visible = [m for m in _between(user_a, user_b) if _visible(m, viewer)]
    return sorted(visible, key=lambda m: m.sent_at)


def _delivered_unread(messages, user_id) -> int:
    return sum(
        1
        for m in messages
        if str(m.receiver_id) == str(user_id) and m.is_delivered and not m.is_read
    )


def unread_count(user_id) -> int:
    """Approved messages addressed to ``user_id`` that have not been read."""
    messages = (
        current_domain.repository_for(Message)
        ._dao.query.filter(
            receiver_id=str(user_id),
            is_read=False,
            moderation_flag=ModerationFlag.APPROVED.value,
        )
        .all()
        .items
    )
    return len(messages)


def conversation_list(viewer: Principal) -> list[ConversationSummary]:
    """One entry per conversation partner of ``viewer``, most recent first."""
    user_id = str(viewer.user_id)
    viewer_messages = (
        current_domain.repository_for(Message)
        ._dao.query.filter(Q(sender_id=user_id) | Q(receiver_id=user_id))
        .all()
        .items
    )

    threads = {}
    for message in viewer_messages:
        partner = str(message.receiver_id) if str(message.sender_id) == user_id else str(message.sender_id)
        threads.setdefault(partner, []).append(message)

    summaries = []
    for partner, messages in threads.items():
        shown = [m for m in messages if _visible(m, viewer)]
        if not shown:
            continue
        summaries.append(
            ConversationSummary(
                partner_id=partner,
                last_message=max(shown, key=lambda m: m.sent_at),
                unread_count=_delivered_unread(messages, user_id),
            )
        )

    return sorted(summaries, key=lambda s: s.last_message.sent_at, reverse=True)


def moderation_queue(viewer: Principal) -> list[Message]:
    """Messages awaiting a decision, oldest first. Admins only."""
    if not viewer.is_admin:
        raise NotPermitted({"moderator": ["Only administrators can see the moderation queue"]})

    messages = current_domain.repository_for(Message)._dao.query.all().items
    pending = [m for m in messages if m.moderation_flag in (None, ModerationFlag.PENDING.value)]
    return sorted(pending, key=lambda m: m.sent_at)
