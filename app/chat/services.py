"""
Chat services: the chat registry and the message ledger.

This module contains the business logic for the chat system:
- ChatService: direct chat dedup, group creation and membership rules
- MessageService: sending and listing messages, latest-message pointer,
  read receipts

Design Decisions:
    - Services are stateless (use class methods)
    - Every anticipated failure is a ServiceResult.failure with an ErrorKind
    - Storage exceptions are normalized through BaseService.handle_exception
    - Where the caller is not allowed to know whether a group exists, the
      "not found" and "not admin" cases return the same failure
    - Realtime side effects are returned as ChatEvent records on the result,
      never sent from here

Usage:
    from chat.services import ChatService, MessageService

    result = ChatService.get_or_create_direct_chat(request.user, other_user_id)
    if result.success:
        chat = result.data
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError
from django.db.models import Q
from django.utils import timezone

from authentication.services import UserService
from chat import events
from chat.models import DIRECT_CHAT_NAME, Chat, DirectChatPair, Message, default_group_image_url
from core.services import BaseService, ErrorKind, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from authentication.models import User


def _populated_chats():
    """Chats with the joins every chat response needs."""
    return Chat.objects.select_related(
        "group_admin",
        "latest_message__sender",
    ).prefetch_related("users")


def _populated_messages():
    """Messages with sender, chat and chat members joined in."""
    return Message.objects.select_related(
        "sender",
        "chat",
    ).prefetch_related("chat__users", "read_by")


class ChatService(BaseService):
    """
    Service for chat registry operations.

    Handles:
        - Opening direct chats (at most one per user pair)
        - Listing a user's chats
        - Creating, renaming and deleting group chats
        - Adding and removing group members
    """

    @classmethod
    def get_populated(cls, chat_id: int) -> Chat | None:
        return _populated_chats().filter(pk=chat_id).first()

    @classmethod
    def get_or_create_direct_chat(
        cls,
        requester: User,
        target_user_id: int | None,
    ) -> ServiceResult[Chat]:
        """
        Return the direct chat between two users, creating it on first contact.

        Implementation:
            1. Resolve the target user
            2. Canonicalize the pair (lower user id first)
            3. Look up an existing DirectChatPair
            4. If none, create the chat and its pair in one transaction.
               A concurrent first contact trips the unique constraint, in
               which case the chat created by the other request is returned.

        Error codes:
            USER_ID_MISSING: No target user given
            USER_NOT_FOUND: Target user does not exist
            SAME_USER: Cannot open a direct chat with yourself
        """
        if target_user_id in (None, ""):
            return ServiceResult.failure(
                "userId wasn't sent in the body",
                error_code="USER_ID_MISSING",
            )

        target = UserService.find_by_id(target_user_id)
        if target is None:
            return ServiceResult.failure(
                "User does not exist!",
                error_code="USER_NOT_FOUND",
                kind=ErrorKind.NOT_FOUND,
            )

        if target.pk == requester.pk:
            return ServiceResult.failure(
                "Cannot create a direct chat with yourself",
                error_code="SAME_USER",
            )

        user_lower_id, user_higher_id = DirectChatPair.canonical(requester.pk, target.pk)

        try:
            pair = DirectChatPair.objects.filter(
                user_lower_id=user_lower_id,
                user_higher_id=user_higher_id,
            ).first()
            if pair is not None:
                cls.get_logger().debug(
                    f"Found existing direct chat {pair.chat_id} "
                    f"between users {user_lower_id} and {user_higher_id}"
                )
                return ServiceResult.success(cls.get_populated(pair.chat_id))

            try:
                with cls.atomic():
                    chat = Chat(chat_name=DIRECT_CHAT_NAME, is_group_chat=False)
                    chat.full_clean()
                    chat.save()
                    chat.users.add(target, requester)
                    DirectChatPair.objects.create(
                        chat=chat,
                        user_lower_id=user_lower_id,
                        user_higher_id=user_higher_id,
                    )
            except IntegrityError:
                pair = DirectChatPair.objects.get(
                    user_lower_id=user_lower_id,
                    user_higher_id=user_higher_id,
                )
                return ServiceResult.success(cls.get_populated(pair.chat_id))
        except DjangoValidationError as e:
            return ServiceResult.from_validation_error(e)
        except DatabaseError as e:
            return cls.handle_exception(e, "get or create direct chat")

        cls.get_logger().info(
            f"Created direct chat {chat.id} between users {user_lower_id} and {user_higher_id}"
        )
        return ServiceResult.success(cls.get_populated(chat.pk))

    @classmethod
    def list_chats(cls, requester: User) -> ServiceResult[list[Chat]]:
        """
        Return every chat the requester belongs to, most recently active first.

        Direct chats without any message yet are left out so that opening a
        chat with someone does not add an empty entry to the list.
        """
        try:
            chats = list(
                _populated_chats()
                .filter(users=requester)
                .filter(Q(is_group_chat=True) | Q(latest_message__isnull=False))
                .order_by("-updated_at", "-id")
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "list chats")
        return ServiceResult.success(chats)

    @classmethod
    def create_group_chat(
        cls,
        requester: User,
        chat_name: str | None,
        user_ids: Sequence[int] | None,
        group_image_url: str | None = None,
    ) -> ServiceResult[Chat]:
        """
        Create a group chat with the requester as admin.

        Args:
            requester: Creator, becomes group admin and member
            chat_name: Group name, non-blank after trimming
            user_ids: Invitees. After removing duplicates and the requester
                at least two must remain
            group_image_url: Optional picture, defaults to the configured one

        Error codes:
            VALIDATION_ERROR: Missing name or users
            GROUP_TOO_SMALL: Fewer than two invitees
            INVALID_USERS: Some invitee does not exist
        """
        if not chat_name or not chat_name.strip() or user_ids is None:
            return ServiceResult.failure(
                "users array and chatName are required!",
                error_code="VALIDATION_ERROR",
            )

        invitee_ids = list(dict.fromkeys(pk for pk in user_ids if pk != requester.pk))
        if len(invitee_ids) < 2:
            return ServiceResult.failure(
                "Group chat must contain more than 2 users!",
                error_code="GROUP_TOO_SMALL",
            )

        try:
            if not UserService.all_exist(invitee_ids):
                return ServiceResult.failure("Invalid users!", error_code="INVALID_USERS")

            with cls.atomic():
                chat = Chat(
                    chat_name=chat_name.strip(),
                    is_group_chat=True,
                    group_admin=requester,
                    group_image_url=group_image_url or default_group_image_url(),
                )
                chat.full_clean()
                chat.save()
                chat.users.add(requester, *invitee_ids)
        except DjangoValidationError as e:
            return ServiceResult.from_validation_error(e)
        except DatabaseError as e:
            return cls.handle_exception(e, "create group chat")

        cls.get_logger().info(
            f"User {requester.id} created group chat {chat.id} with {len(invitee_ids)} invitees"
        )
        chat = cls.get_populated(chat.pk)
        return ServiceResult.success(chat, events=[events.added_to_group(chat, invitee_ids)])

    @classmethod
    def delete_group_chat(cls, requester: User, chat_id: int) -> ServiceResult[None]:
        """
        Delete a group chat. Only the admin may do this.

        The chat is soft deleted and disappears from every query; its
        messages are kept. Callers that are not the admin get the same
        NOT_FOUND as for a missing group.
        """
        try:
            chat = Chat.objects.filter(
                pk=chat_id,
                is_group_chat=True,
                group_admin=requester,
            ).first()
            if chat is None:
                cls.get_logger().warning(
                    f"User {requester.id} could not delete group chat {chat_id}"
                )
                return ServiceResult.failure(
                    "Group chat not found!",
                    error_code="GROUP_NOT_FOUND",
                    kind=ErrorKind.NOT_FOUND,
                )

            member_ids = list(chat.users.values_list("pk", flat=True))
            chat.soft_delete()
        except DatabaseError as e:
            return cls.handle_exception(e, "delete group chat")

        cls.get_logger().info(f"User {requester.id} deleted group chat {chat_id}")
        return ServiceResult.success(
            events=[events.group_deleted(chat.pk, member_ids, requester.pk)],
        )

    @classmethod
    def rename_group(
        cls,
        requester: User,
        chat_id: int,
        chat_name: str | None,
    ) -> ServiceResult[Chat]:
        """
        Rename a group chat.

        Any member may rename; admin status is not required. A chat the
        requester is not in is reported as not found.
        """
        if not chat_name or not chat_name.strip():
            return ServiceResult.failure("chatName is required!", error_code="VALIDATION_ERROR")

        try:
            updated = Chat.objects.filter(pk=chat_id, users=requester).update(
                chat_name=chat_name.strip(),
                updated_at=timezone.now(),
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "rename group")

        if not updated:
            return ServiceResult.failure(
                "Group chat was not found!",
                error_code="GROUP_NOT_FOUND",
                kind=ErrorKind.NOT_FOUND,
            )

        cls.get_logger().info(f"User {requester.id} renamed group chat {chat_id}")
        return ServiceResult.success(cls.get_populated(chat_id))

    @classmethod
    def add_members_to_group(
        cls,
        requester: User,
        chat_id: int,
        user_ids: Sequence[int] | None,
    ) -> ServiceResult[Chat]:
        """
        Add users to a group. Only the admin may do this.

        Membership is a set: users already in the group are ignored.
        A missing group and a non-admin requester get the same
        PERMISSION_DENIED.
        """
        if user_ids is None:
            return ServiceResult.failure(
                "users array was not provided!",
                error_code="VALIDATION_ERROR",
            )
        if not user_ids:
            return ServiceResult.failure("users array is empty", error_code="VALIDATION_ERROR")

        try:
            if not UserService.all_exist(user_ids):
                return ServiceResult.failure("Invalid users!", error_code="INVALID_USERS")

            chat = Chat.objects.filter(
                pk=chat_id,
                is_group_chat=True,
                group_admin=requester,
            ).first()
            if chat is None:
                cls.get_logger().warning(
                    f"User {requester.id} tried to add members to group chat {chat_id}"
                )
                return ServiceResult.failure(
                    "You do not have permission to add members to this group.",
                    error_code="NOT_GROUP_ADMIN",
                    kind=ErrorKind.PERMISSION_DENIED,
                )

            with cls.atomic():
                current_ids = set(chat.users.values_list("pk", flat=True))
                added_ids = [pk for pk in dict.fromkeys(user_ids) if pk not in current_ids]
                if added_ids:
                    chat.users.add(*added_ids)
                    chat.save(update_fields=["updated_at"])
        except DatabaseError as e:
            return cls.handle_exception(e, "add members to group")

        cls.get_logger().info(
            f"User {requester.id} added {len(added_ids)} members to group chat {chat_id}"
        )
        chat = cls.get_populated(chat_id)
        chat_events = [events.added_to_group(chat, added_ids)] if added_ids else []
        return ServiceResult.success(chat, events=chat_events)

    @classmethod
    def remove_member_from_group(
        cls,
        requester: User,
        chat_id: int,
        target_user_id: int,
    ) -> ServiceResult[Chat | None]:
        """
        Remove a member from a group, or leave it.

        Authorization:
            - A member may remove themselves (leave)
            - The admin may remove anyone except themselves
            - The admin can never be removed while the group exists

        Returns:
            ServiceResult with no data when the requester left, and the
            updated chat when the admin removed someone else.
        """
        try:
            chat = Chat.objects.filter(pk=chat_id, is_group_chat=True).first()
            if chat is None:
                return ServiceResult.failure(
                    "Group chat was not found!",
                    error_code="GROUP_NOT_FOUND",
                    kind=ErrorKind.NOT_FOUND,
                )

            is_leaving = target_user_id == requester.pk
            if not is_leaving and chat.group_admin_id != requester.pk:
                cls.get_logger().warning(
                    f"User {requester.id} tried to remove user {target_user_id} "
                    f"from group chat {chat_id}"
                )
                return ServiceResult.failure(
                    "You do not have permission to remove this user",
                    error_code="NOT_GROUP_ADMIN",
                    kind=ErrorKind.PERMISSION_DENIED,
                )

            if chat.group_admin_id == target_user_id:
                return ServiceResult.failure(
                    "Admin cannot be removed from an active chat group!",
                    error_code="ADMIN_REMOVAL",
                    kind=ErrorKind.PERMISSION_DENIED,
                )

            if not chat.users.filter(pk=target_user_id).exists():
                return ServiceResult.failure(
                    "User not found!",
                    error_code="MEMBER_NOT_FOUND",
                    kind=ErrorKind.NOT_FOUND,
                )

            with cls.atomic():
                chat.users.remove(target_user_id)
                chat.save(update_fields=["updated_at"])
        except DatabaseError as e:
            return cls.handle_exception(e, "remove member from group")

        cls.get_logger().info(
            f"User {target_user_id} {'left' if is_leaving else 'was removed from'} group chat {chat_id}"
        )
        chat = cls.get_populated(chat_id)
        chat_events = [events.removed_from_group(chat, target_user_id, requester.pk)]
        if is_leaving:
            return ServiceResult.success(events=chat_events)
        return ServiceResult.success(chat, events=chat_events)


class MessageService(BaseService):
    """
    Service for message ledger operations.

    Handles:
        - Sending messages (membership checked at send time)
        - Keeping each chat's latest-message pointer current
        - Listing messages of a chat and unread messages across chats
        - Read receipts
    """

    @classmethod
    def _member_chat(
        cls,
        requester: User,
        chat_id: int,
        forbidden_message: str,
    ) -> tuple[Chat | None, ServiceResult | None]:
        """Resolve a chat the requester belongs to, or the failure to return."""
        chat = Chat.objects.filter(pk=chat_id).first()
        if chat is None:
            return None, ServiceResult.failure(
                "Chat was not found",
                error_code="CHAT_NOT_FOUND",
                kind=ErrorKind.NOT_FOUND,
            )
        if not chat.has_member(requester):
            cls.get_logger().warning(f"User {requester.id} is not a member of chat {chat_id}")
            return None, ServiceResult.failure(
                forbidden_message,
                error_code="NOT_CHAT_MEMBER",
                kind=ErrorKind.PERMISSION_DENIED,
            )
        return chat, None

    @classmethod
    def send_message(
        cls,
        requester: User,
        chat_id: int | None,
        content: str | None,
        client_timestamp: datetime | None = None,
    ) -> ServiceResult[Message]:
        """
        Append a message to a chat and point the chat at it.

        The message insert and the pointer update share a transaction. The
        pointer update runs in its own savepoint: if it fails the message
        is still sent and the pointer is left stale.

        Note:
            Not safe to retry blindly; a retry creates a second message.
            Clients can use client_timestamp to spot their own duplicates.
        """
        if not content or not content.strip() or chat_id in (None, ""):
            return ServiceResult.failure(
                "Content or chat are invalid",
                error_code="VALIDATION_ERROR",
            )

        try:
            chat, failure = cls._member_chat(
                requester,
                chat_id,
                "Cannot send message to a chat you are not part of",
            )
            if failure:
                return failure

            with cls.atomic():
                message = Message(
                    chat=chat,
                    sender=requester,
                    content=content.strip(),
                    client_timestamp=client_timestamp,
                )
                message.full_clean()
                message.save()

                try:
                    with cls.atomic():
                        Chat.objects.filter(pk=chat.pk).update(
                            latest_message=message,
                            updated_at=timezone.now(),
                        )
                except DatabaseError:
                    cls.get_logger().exception(
                        f"Could not move latest message pointer of chat {chat.pk}"
                    )
        except DjangoValidationError as e:
            return ServiceResult.from_validation_error(e)
        except DatabaseError as e:
            return cls.handle_exception(e, "send message")

        cls.get_logger().info(f"User {requester.id} sent message {message.id} to chat {chat.pk}")
        message = _populated_messages().get(pk=message.pk)
        return ServiceResult.success(message, events=[events.message_sent(message)])

    @classmethod
    def list_messages(cls, requester: User, chat_id: int) -> ServiceResult[list[Message]]:
        """Return every message of a chat, oldest first."""
        try:
            chat, failure = cls._member_chat(
                requester,
                chat_id,
                "Cannot receive messages from a chat that you are not part of.",
            )
            if failure:
                return failure

            messages = list(_populated_messages().filter(chat=chat).order_by("created_at", "id"))
        except DatabaseError as e:
            return cls.handle_exception(e, "list messages")
        return ServiceResult.success(messages)

    @classmethod
    def list_unread_messages(cls, requester: User) -> ServiceResult[list[Message]]:
        """
        Return messages the requester has not read, across all their chats.

        The requester's own messages are never unread.
        """
        try:
            chat_ids = list(Chat.objects.filter(users=requester).values_list("pk", flat=True))
            if not chat_ids:
                return ServiceResult.failure(
                    "chats not found",
                    error_code="CHATS_NOT_FOUND",
                    kind=ErrorKind.NOT_FOUND,
                )

            messages = list(
                _populated_messages()
                .filter(chat_id__in=chat_ids)
                .exclude(sender=requester)
                .exclude(read_by=requester)
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "list unread messages")
        return ServiceResult.success(messages)

    @classmethod
    def mark_read(
        cls,
        requester: User,
        chat_id: int | None,
        message_ids: Sequence[int] | None,
    ) -> ServiceResult[Chat]:
        """
        Add the requester to read_by of the given messages.

        Only the listed messages are touched, and only those that belong to
        the chat and were sent by someone else. Marking an already-read
        message is a no-op.
        """
        if chat_id in (None, ""):
            return ServiceResult.failure("chatId was not provided!", error_code="VALIDATION_ERROR")
        if not message_ids:
            return ServiceResult.failure(
                "Messages were not provided!",
                error_code="VALIDATION_ERROR",
            )

        ReadBy = Message.read_by.through

        try:
            chat, failure = cls._member_chat(requester, chat_id, "User is not part of this chat!")
            if failure:
                return failure

            target_ids = set(
                Message.objects.filter(chat=chat, pk__in=list(message_ids))
                .exclude(sender=requester)
                .values_list("pk", flat=True)
            )
            already_read = set(
                ReadBy.objects.filter(user_id=requester.pk, message_id__in=target_ids).values_list(
                    "message_id", flat=True
                )
            )
            newly_read = sorted(target_ids - already_read)
            ReadBy.objects.bulk_create(
                [ReadBy(message_id=pk, user_id=requester.pk) for pk in newly_read],
                ignore_conflicts=True,
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "mark messages read")

        if newly_read:
            cls.get_logger().info(
                f"User {requester.id} read {len(newly_read)} messages in chat {chat.pk}"
            )
        chat = ChatService.get_populated(chat.pk)
        chat_events = [events.messages_read(chat, requester.pk, newly_read)] if newly_read else []
        return ServiceResult.success(chat, events=chat_events)
