"""
Serializers for chat API.

This module provides serializers for the chat system:
- Read models: chats and messages with their related users joined in
- Request models: one serializer per operation, validated once at the boundary

Serializer Hierarchy:
    MessagePreviewSerializer: Latest message shown in chat lists
    ChatSerializer: Chat with members, admin and latest message
    ChatSummarySerializer: Chat with members, embedded in messages
    MessageSerializer: Message with sender and chat

    AccessChatSerializer: Open a direct chat
    CreateGroupChatSerializer: Create a group
    RenameGroupSerializer: Rename a group
    AddMembersSerializer: Add members to a group
    SendMessageSerializer: Send a message
    MarkReadSerializer: Mark messages read

Design Decisions:
    - Read and write serializers are separate for clarity
    - Request serializers only check shape; membership and existence rules
      live in the services
    - User data never includes credential fields (see UserSerializer)
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSerializer
from chat.models import Chat, Message


# =============================================================================
# Read Serializers
# =============================================================================


class MessagePreviewSerializer(serializers.ModelSerializer):
    """
    Minimal message serializer for chat list preview.
    """

    sender = UserSerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "content",
            "sender",
            "client_timestamp",
            "created_at",
        ]
        read_only_fields = fields


class ChatSerializer(serializers.ModelSerializer):
    """
    Full chat representation.

    Includes members, the group admin (null for direct chats) and the
    latest message with its sender.
    """

    users = UserSerializer(many=True, read_only=True)
    group_admin = UserSerializer(read_only=True, allow_null=True)
    latest_message = MessagePreviewSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Chat
        fields = [
            "id",
            "chat_name",
            "is_group_chat",
            "users",
            "group_admin",
            "group_image_url",
            "latest_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ChatSummarySerializer(serializers.ModelSerializer):
    """Chat with its members, embedded in message payloads."""

    users = UserSerializer(many=True, read_only=True)

    class Meta:
        model = Chat
        fields = [
            "id",
            "chat_name",
            "is_group_chat",
            "users",
            "group_admin",
        ]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    """
    Message with sender and chat (including members).

    read_by is returned as a list of user ids.
    """

    sender = UserSerializer(read_only=True)
    chat = ChatSummarySerializer(read_only=True)
    read_by = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "content",
            "sender",
            "chat",
            "read_by",
            "client_timestamp",
            "created_at",
        ]
        read_only_fields = fields


# =============================================================================
# Request Serializers
# =============================================================================


class AccessChatSerializer(serializers.Serializer):
    """Open (or create) the direct chat with another user."""

    user_id = serializers.IntegerField(
        error_messages={
            "required": "userId wasn't sent in the body",
            "null": "userId wasn't sent in the body",
            "invalid": "userId wasn't sent in the body",
        },
    )


_USERS_REQUIRED = "users array and chatName are required!"


class CreateGroupChatSerializer(serializers.Serializer):
    """
    Create a group chat.

    ``users`` are the invitees; the requester is added as admin.
    """

    chat_name = serializers.CharField(
        max_length=255,
        error_messages={
            "required": _USERS_REQUIRED,
            "blank": _USERS_REQUIRED,
            "null": _USERS_REQUIRED,
        },
    )
    users = serializers.ListField(
        child=serializers.IntegerField(error_messages={"invalid": "Invalid users!"}),
        error_messages={
            "required": _USERS_REQUIRED,
            "null": _USERS_REQUIRED,
            "not_a_list": "users must be an array!",
        },
    )
    group_image_url = serializers.URLField(
        required=False,
        allow_blank=True,
        max_length=500,
        error_messages={"invalid": "groupImg supposed to be a url string!"},
    )


class RenameGroupSerializer(serializers.Serializer):
    chat_name = serializers.CharField(
        max_length=255,
        error_messages={
            "required": "chatName is required!",
            "blank": "chatName is required!",
            "null": "chatName is required!",
        },
    )


class AddMembersSerializer(serializers.Serializer):
    users = serializers.ListField(
        child=serializers.IntegerField(error_messages={"invalid": "Invalid users!"}),
        allow_empty=False,
        error_messages={
            "required": "users array was not provided!",
            "null": "users array was not provided!",
            "not_a_list": "users array was not provided!",
            "empty": "users array is empty",
        },
    )


_CONTENT_OR_CHAT = "Content or chat are invalid"


class SendMessageSerializer(serializers.Serializer):
    """
    Send a message.

    ``client_timestamp`` is the time the client composed the message; it is
    stored as-is and can be used by clients to spot duplicates on retry.
    """

    content = serializers.CharField(
        error_messages={
            "required": _CONTENT_OR_CHAT,
            "blank": _CONTENT_OR_CHAT,
            "null": _CONTENT_OR_CHAT,
        },
    )
    chat_id = serializers.IntegerField(
        error_messages={
            "required": _CONTENT_OR_CHAT,
            "null": _CONTENT_OR_CHAT,
            "invalid": _CONTENT_OR_CHAT,
        },
    )
    client_timestamp = serializers.DateTimeField(required=False, allow_null=True)


class MarkReadSerializer(serializers.Serializer):
    """Mark an explicit list of messages in one chat as read."""

    chat_id = serializers.IntegerField(
        error_messages={
            "required": "chatId was not provided!",
            "null": "chatId was not provided!",
            "invalid": "chatId was not provided!",
        },
    )
    message_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
        error_messages={
            "required": "Messages were not provided!",
            "null": "Messages were not provided!",
            "not_a_list": "Messages were not provided!",
            "empty": "Messages were not provided!",
        },
    )
