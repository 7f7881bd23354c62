"""
Chat app for real-time messaging.

This app handles:
- The chat registry (direct and group chats, membership)
- The message ledger (messages, latest-message pointer, read receipts)
- WebSocket delivery of chat events and typing indicators

Related apps:
    - authentication: User model and user directory
    - core: ServiceResult, soft delete, error handling

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import ChatService, MessageService

    chat = ChatService.get_or_create_direct_chat(user, other_user.id).data
    message = MessageService.send_message(user, chat.id, "Hello!").data
"""
