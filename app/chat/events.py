"""
Realtime events produced by the chat services.

Services never push to sockets themselves. A successful ServiceResult
carries ChatEvent records; the view hands them to chat.realtime after the
response is built, and a Celery task delivers each one to the personal
channel group of every recipient.

Event types (as seen by clients):
    message            - new message, to every member except the sender
    addedToGroup       - group created or members added, to the new members
    removingFromGroup  - member removed or left, to the other members and the removed user
    deletingGroup      - group deleted, to every member except the admin
    readMessage        - messages marked read, to every other member
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chat.models import Chat, Message


class ChatEventType:
    MESSAGE = "message"
    ADDED_TO_GROUP = "addedToGroup"
    REMOVING_FROM_GROUP = "removingFromGroup"
    DELETING_GROUP = "deletingGroup"
    READ_MESSAGE = "readMessage"


@dataclass(frozen=True)
class ChatEvent:
    """
    One event addressed to a set of users.

    Attributes:
        event_type: One of ChatEventType
        recipient_ids: Users whose connections should receive the event
        payload: JSON-serializable body
    """

    event_type: str
    recipient_ids: tuple[int, ...]
    payload: dict = field(default_factory=dict)

    @classmethod
    def create(cls, event_type: str, recipient_ids: Iterable[int], payload: dict) -> ChatEvent:
        # Sorted and deduplicated so delivery order is stable
        return cls(event_type, tuple(sorted(set(recipient_ids))), payload)


def _member_ids(chat: Chat) -> list[int]:
    return list(chat.users.values_list("pk", flat=True))


def message_sent(message: Message) -> ChatEvent:
    from chat.serializers import MessageSerializer

    recipients = [pk for pk in _member_ids(message.chat) if pk != message.sender_id]
    return ChatEvent.create(
        ChatEventType.MESSAGE,
        recipients,
        MessageSerializer(message).data,
    )


def added_to_group(chat: Chat, added_user_ids: Iterable[int]) -> ChatEvent:
    from chat.serializers import ChatSerializer

    return ChatEvent.create(
        ChatEventType.ADDED_TO_GROUP,
        added_user_ids,
        ChatSerializer(chat).data,
    )


def removed_from_group(chat: Chat, removed_user_id: int, actor_id: int) -> ChatEvent:
    from chat.serializers import ChatSerializer

    # Includes the removed user, also when they left on their own
    recipients = [pk for pk in _member_ids(chat) if pk != actor_id]
    recipients.append(removed_user_id)
    return ChatEvent.create(
        ChatEventType.REMOVING_FROM_GROUP,
        recipients,
        {"chat": ChatSerializer(chat).data, "removed_user_id": removed_user_id},
    )


def group_deleted(chat_id: int, member_ids: Iterable[int], admin_id: int) -> ChatEvent:
    return ChatEvent.create(
        ChatEventType.DELETING_GROUP,
        [pk for pk in member_ids if pk != admin_id],
        {"chat_id": chat_id},
    )


def messages_read(chat: Chat, reader_id: int, message_ids: Iterable[int]) -> ChatEvent:
    recipients = [pk for pk in _member_ids(chat) if pk != reader_id]
    return ChatEvent.create(
        ChatEventType.READ_MESSAGE,
        recipients,
        {
            "chat_id": chat.pk,
            "user_id": reader_id,
            "message_ids": sorted(message_ids),
        },
    )


def user_group_name(user_id: int) -> str:
    """Channel group every socket of a user joins."""
    return f"user_{user_id}"


def chat_group_name(chat_id: int) -> str:
    """Channel group of sockets currently viewing a chat."""
    return f"chat_{chat_id}"
