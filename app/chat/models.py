"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) chats between exactly two users
- Group chats with a single admin

Models:
    Chat: Container for messages between members
    DirectChatPair: Helper for enforcing uniqueness of direct chats
    Message: Individual message within a chat, with its read-by set

Design Decisions:
    - Membership is a plain many-to-many set; a user is either in a chat or not
    - Only the group admin may add members or delete the group
    - Deleting a group is a soft delete; its messages are left untouched
    - A chat keeps a denormalized pointer to its latest message for chat lists
    - read_by only grows through normal operation
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin
from core.models import BaseModel

# Name stored on direct chats; clients render the other member's name instead
DIRECT_CHAT_NAME = "direct"


def default_group_image_url() -> str:
    return settings.DEFAULT_GROUP_IMAGE_URL


class Chat(SoftDeleteMixin, BaseModel):
    """
    A direct or group chat.

    Chat Types:
        Direct (is_group_chat=False): exactly 2 members, no admin, placeholder
            name. Unique per user pair (enforced via DirectChatPair).

        Group (is_group_chat=True): admin plus at least two invitees at
            creation, non-blank name. The admin is always a member.

    Fields:
        chat_name: Group name (placeholder for direct chats)
        is_group_chat: Whether this is a group chat
        users: Current members
        latest_message: Most recent message, for chat list previews
        group_admin: Group admin (null for direct chats)
        group_image_url: Group picture URL (blank for direct chats)

    Relationships:
        messages: All Message records for this chat
        direct_pair: DirectChatPair if this is a direct chat
    """

    chat_name = models.CharField(
        max_length=255,
        help_text="Group name (placeholder for direct chats)",
    )

    is_group_chat = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group chat",
    )

    users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="chats",
        help_text="Current members of the chat",
    )

    latest_message = models.ForeignKey(
        "chat.Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Most recent message in this chat",
    )

    group_admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="administered_chats",
        help_text="Admin of a group chat (null for direct chats)",
    )

    group_image_url = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Group picture URL",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "chat_chat"
        ordering = ["-updated_at"]
        indexes = [
            # Chat lists are sorted by last activity
            models.Index(
                fields=["-updated_at"],
                name="chat_chat_updated_idx",
                condition=Q(is_deleted=False),
            ),
        ]

    def __str__(self) -> str:
        if self.is_group_chat:
            return f"Group: {self.chat_name}"
        return f"Direct({self.pk})"

    def clean(self) -> None:
        """
        Validate the fields that do not depend on membership.

        Membership rules (admin is a member, group size) are enforced by
        ChatService since the many-to-many set does not exist before save.
        """
        errors = {}
        if self.is_group_chat:
            if not (self.chat_name or "").strip():
                errors["chat_name"] = ["chatName is required!"]
            if self.group_admin_id is None:
                errors["group_admin"] = ["Group chat must have an admin."]
        elif self.group_admin_id is not None:
            errors["group_admin"] = ["Direct chats have no admin."]
        if errors:
            raise ValidationError(errors)

    def has_member(self, user) -> bool:
        return self.users.filter(pk=user.pk).exists()


class DirectChatPair(models.Model):
    """
    Enforces uniqueness of direct chats between two users.

    Stores user pairs in canonical order (lower user_id first) so that
    regardless of who opens the chat, only one direct chat exists per pair.

    Fields:
        chat: The direct chat (OneToOne, serves as PK)
        user_lower: User with lower ID
        user_higher: User with higher ID

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One chat per pair
        - CheckConstraint(user_lower_id < user_higher_id): Enforce canonical order
    """

    chat = models.OneToOneField(
        Chat,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct chat this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this pair",
    )

    class Meta:
        db_table = "chat_direct_chat_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_chat_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="direct_pair_user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the pair ordered lower id first."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Message(BaseModel):
    """
    A message sent to a chat.

    Messages are immutable once created except for read_by, which only
    grows. The sender had to be a member when sending; later membership
    changes do not invalidate existing messages.

    Fields:
        chat: The chat the message belongs to
        sender: Author
        content: Text body (non-blank after trimming)
        read_by: Users who have read the message (sender excluded)
        client_timestamp: Time the client composed the message, if sent
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Chat this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        help_text="Message text",
    )

    read_by = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="read_messages",
        help_text="Users who have read this message",
    )

    client_timestamp = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Time the client composed the message",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["chat", "created_at"],
                name="chat_msg_chat_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}) in chat {self.chat_id}"

    def clean(self) -> None:
        if not (self.content or "").strip():
            raise ValidationError({"content": ["Content or chat are invalid"]})
