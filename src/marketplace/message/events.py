"""Domain events for the Message aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Message")
class MessageSent:
    __version__ = 1

    message_id = Identifier(required=True)
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    language = String(required=True)
    sent_at = DateTime(required=True)


@marketplace.event(part_of="Message")
class MessageRead:
    __version__ = 1

    message_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    read_at = DateTime(required=True)


@marketplace.event(part_of="Message")
class MessageModerated:
    __version__ = 1

    message_id = Identifier(required=True)
    flag = String(required=True)
    moderated_by = Identifier()
    moderated_at = DateTime()
