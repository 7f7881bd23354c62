"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) chats, at most one per user pair
- Group chats with a single admin
- Messages with read receipts
- Realtime events over WebSockets
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
