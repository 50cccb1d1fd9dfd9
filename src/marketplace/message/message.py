"""Message aggregate: moderated chat between a buyer and a farmer.

Messages go through the shared moderation queue unchanged: they are sent
PENDING and are only delivered (counted as unread, shown to the receiver
as approved) once a moderator approves them.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.message.events import MessageModerated, MessageRead, MessageSent
from marketplace.moderation.queue import ModerationFlag, flag_of
from marketplace.user.user import Language

MAX_CONTENT = 2000


@marketplace.aggregate(limit=None)
class Message:
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    content = Text(required=True)
    language = String(choices=Language, default=Language.EN.value)
    is_read = Boolean(default=False)
    moderation_flag = String(choices=ModerationFlag, default=ModerationFlag.PENDING.value)
    moderated_by = Identifier()
    moderated_at = DateTime()
    sent_at = DateTime()
    read_at = DateTime()

    @invariant.post
    def content_length(self):
        if self.content is not None and not 1 <= len(self.content.strip()) <= MAX_CONTENT:
            raise ValidationError({"content": [f"Message must be between 1 and {MAX_CONTENT} characters"]})

    @invariant.post
    def sender_is_not_receiver(self):
        if self.sender_id is not None and str(self.sender_id) == str(self.receiver_id):
            raise ValidationError({"receiver_id": ["Cannot send a message to yourself"]})

    @invariant.post
    def moderation_fields_are_all_or_nothing(self):
        decided = flag_of(self) != ModerationFlag.PENDING
        if decided != (self.moderated_by is not None) or decided != (self.moderated_at is not None):
            raise ValidationError({"moderation_flag": ["A moderation decision needs a moderator and a timestamp"]})

    @classmethod
    def send(cls, sender_id, receiver_id, content, language=None):
        now = datetime.now(UTC)
        message = cls(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content.strip() if content else content,
            language=language or Language.EN.value,
            is_read=False,
            moderation_flag=ModerationFlag.PENDING.value,
            sent_at=now,
        )
        message.raise_(
            MessageSent(
                message_id=str(message.id),
                sender_id=str(sender_id),
                receiver_id=str(receiver_id),
                language=message.language,
                sent_at=now,
            )
        )
        return message

    @property
    def is_delivered(self) -> bool:
        return flag_of(self) == ModerationFlag.APPROVED

    def mark_read(self):
        if self.is_read:
            return
        now = datetime.now(UTC)
        self.is_read = True
        self.read_at = now
        self.raise_(MessageRead(message_id=str(self.id), receiver_id=str(self.receiver_id), read_at=now))

    def apply_moderation(self, flag, moderator_id, moderated_at):
        flag = ModerationFlag(flag)
        with atomic_change(self):
            self.moderation_flag = flag.value
            if flag == ModerationFlag.PENDING:
                self.moderated_by = None
                self.moderated_at = None
            else:
                self.moderated_by = moderator_id
                self.moderated_at = moderated_at

        self.raise_(
            MessageModerated(
                message_id=str(self.id),
                flag=flag.value,
                moderated_by=str(moderator_id) if moderator_id else None,
                moderated_at=self.moderated_at,
            )
        )
