"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat management (including soft-deleted groups)
- Direct chat pairs
- Message moderation
"""

from django.contrib import admin

from chat.models import Chat, DirectChatPair, Message


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = [
        "id",
        "chat_name",
        "is_group_chat",
        "group_admin",
        "member_count",
        "is_deleted",
        "updated_at",
    ]
    list_filter = ["is_group_chat", "is_deleted", "created_at"]
    search_fields = ["chat_name", "id"]
    readonly_fields = ["created_at", "updated_at", "deleted_at", "latest_message"]
    raw_id_fields = ["group_admin"]
    filter_horizontal = ["users"]
    ordering = ["-updated_at"]

    def get_queryset(self, request):
        # Show soft-deleted groups too
        return Chat.all_objects.all()

    @admin.display(description="Members")
    def member_count(self, obj: Chat) -> int:
        return obj.users.count()


@admin.register(DirectChatPair)
class DirectChatPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectChatPair model."""

    list_display = ["chat", "user_lower", "user_higher"]
    raw_id_fields = ["chat", "user_lower", "user_higher"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "chat",
        "sender",
        "content_preview",
        "created_at",
    ]
    list_filter = ["created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at", "client_timestamp"]
    raw_id_fields = ["chat", "sender"]
    filter_horizontal = ["read_by"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
