"""Messaging commands: send, read receipts, and moderation."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.exceptions import InvariantViolation, NotFound, NotPermitted
from marketplace.message.message import Message
from marketplace.moderation import queue
from marketplace.user.registration import load_user
from marketplace.user.user import Role, is_admin

_CHAT_ROLES = {Role.BUYER.value, Role.FARMER.value}


@marketplace.command(part_of="Message")
class SendMessage:
    sender_id = Identifier(required=True)
    receiver_id = Identifier(required=True)
    content = Text(required=True)
    language = String(max_length=2)


@marketplace.command(part_of="Message")
class MarkMessageRead:
    message_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@marketplace.command(part_of="Message")
class MarkConversationRead:
    actor_id = Identifier(required=True)
    partner_id = Identifier(required=True)


@marketplace.command(part_of="Message")
class ModerateMessage:
    message_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    moderator_role = String(required=True, max_length=10)
    flag = String(required=True, max_length=10)


def load_message(message_id) -> Message:
    message = current_domain.repository_for(Message).get_or_none(message_id)
    if message is None:
        raise NotFound("Message", message_id)
    return message


@marketplace.command_handler(part_of=Message)
class MessagingHandler:
    @handle(SendMessage)
    def send_message(self, command):
        if str(command.sender_id) == str(command.receiver_id):
            raise InvariantViolation({"receiver_id": ["Cannot send a message to yourself"]})

        sender = load_user(command.sender_id)
        receiver = load_user(command.receiver_id)

        # Chat is only ever between one buyer and one farmer
        if {sender.role, receiver.role} != _CHAT_ROLES:
            raise NotPermitted({"receiver_id": ["Messages can only be exchanged between a buyer and a farmer"]})

        message = Message.send(
            sender_id=sender.id,
            receiver_id=receiver.id,
            content=command.content,
            language=command.language or sender.language,
        )
        current_domain.repository_for(Message).add(message)

        logger.info(
            "Message sent",
            message_id=str(message.id),
            sender_id=str(sender.id),
            receiver_id=str(receiver.id),
        )
        return str(message.id)

    @handle(MarkMessageRead)
    def mark_message_read(self, command):
        message = load_message(command.message_id)
        if str(message.receiver_id) != str(command.actor_id):
            raise NotPermitted({"message": ["Only the receiver can mark a message as read"]})
        if not message.is_delivered:
            raise InvariantViolation({"message": ["Only delivered messages can be marked as read"]})

        message.mark_read()
        current_domain.repository_for(Message).add(message)

    @handle(MarkConversationRead)
    def mark_conversation_read(self, command):
        repo = current_domain.repository_for(Message)
        unread = repo._dao.query.filter(
            sender_id=str(command.partner_id),
            receiver_id=str(command.actor_id),
            is_read=False,
            moderation_flag=queue.ModerationFlag.APPROVED.value,
        ).all()

        for message in unread.items:
            message.mark_read()
            repo.add(message)

        return len(unread.items)

    @handle(ModerateMessage)
    def moderate_message(self, command):
        if not is_admin(command.moderator_role):
            raise NotPermitted({"moderator": ["Only administrators can moderate messages"]})

        message = load_message(command.message_id)
        queue.moderate(message, command.moderator_id, queue.parse_flag(command.flag))
        current_domain.repository_for(Message).add(message)

        logger.info(
            "Message moderated",
            message_id=str(message.id),
            flag=message.moderation_flag,
            moderated_by=str(command.moderator_id),
        )
