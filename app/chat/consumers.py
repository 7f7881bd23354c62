"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer for real-time chat functionality.
Messages are sent through the HTTP API; the socket only receives events and
carries typing indicators.

Consumers:
    ChatConsumer: One connection per client, across all of a user's chats

Authentication:
    Users are authenticated via JWT token (query string or subprotocol).
    The JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    Every socket joins "user_{user_id}"; chat events are delivered there.
    Sockets join "chat_{chat_id}" while the client has that chat open, which
    is where typing indicators are broadcast.

Message Types (from client):
    - join_chat: Start receiving typing indicators for a chat
    - leave_chat: Stop receiving them
    - typing: Broadcast typing indicator to the chat

Message Types (to client):
    - message, addedToGroup, removingFromGroup, deletingGroup, readMessage:
      {"type": <event>, "payload": {...}}
    - chat_joined / chat_left: Acknowledgements
    - typing: Another member is typing
    - error: Error response
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from chat.events import ChatEventType, chat_group_name, user_group_name
from chat.models import Chat

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality.

    Handles:
        - Connection authentication
        - Personal group for chat events
        - Joining/leaving chat rooms (membership checked on join)
        - Typing indicators

    Attributes:
        user_group: Personal channel group of the connected user
        joined_chats: Ids of the chats this socket has joined
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_group: str | None = None
        self.joined_chats: set[int] = set()

    async def connect(self):
        """
        Handle WebSocket connection.

        Unauthenticated sockets are closed with code 4001. Otherwise the
        socket joins the user's personal group and is accepted.
        """
        user = self.scope.get("user")

        if not user or not user.is_authenticated:
            logger.warning("Rejected unauthenticated WebSocket connection")
            await self.close(code=4001)
            return

        self.user_group = user_group_name(user.pk)
        await self.channel_layer.group_add(self.user_group, self.channel_name)

        # Echo the subprotocol back when the token came that way
        subprotocols = self.scope.get("subprotocols", [])
        await self.accept(subprotocol="jwt" if subprotocols[:1] == ["jwt"] else None)
        logger.info(f"User {user.pk} connected")

    async def disconnect(self, close_code):
        """Leave every group this socket joined."""
        for chat_id in self.joined_chats:
            await self.channel_layer.group_discard(chat_group_name(chat_id), self.channel_name)
        self.joined_chats.clear()

        if self.user_group:
            await self.channel_layer.group_discard(self.user_group, self.channel_name)
            logger.info(f"User {self.scope['user'].pk} disconnected ({close_code})")

    async def receive_json(self, content, **kwargs):
        """
        Handle incoming WebSocket messages.

        Expected message format:
            {"type": "join_chat", "chat_id": 12}
            {"type": "leave_chat", "chat_id": 12}
            {"type": "typing", "chat_id": 12, "is_typing": true}
        """
        if not isinstance(content, dict):
            await self._send_error("Invalid message format")
            return

        message_type = content.get("type")
        if message_type == "join_chat":
            await self._handle_join(content)
        elif message_type == "leave_chat":
            await self._handle_leave(content)
        elif message_type == "typing":
            await self._handle_typing(content)
        else:
            await self._send_error(f"Unknown message type: {message_type}")

    async def _handle_join(self, content):
        chat_id = self._chat_id(content)
        if chat_id is None:
            await self._send_error("chat_id is required")
            return

        if not await self._is_member(chat_id):
            logger.warning(f"User {self.scope['user'].pk} cannot join chat {chat_id}")
            await self._send_error("User is not part of this chat!")
            return

        await self.channel_layer.group_add(chat_group_name(chat_id), self.channel_name)
        self.joined_chats.add(chat_id)
        await self.send_json({"type": "chat_joined", "chat_id": chat_id})

    async def _handle_leave(self, content):
        chat_id = self._chat_id(content)
        if chat_id is None:
            await self._send_error("chat_id is required")
            return

        if chat_id in self.joined_chats:
            await self.channel_layer.group_discard(chat_group_name(chat_id), self.channel_name)
            self.joined_chats.discard(chat_id)
        await self.send_json({"type": "chat_left", "chat_id": chat_id})

    async def _handle_typing(self, content):
        """
        Handle typing indicator.

        Only chats this socket has joined can be typed in.
        """
        chat_id = self._chat_id(content)
        if chat_id is None or chat_id not in self.joined_chats:
            await self._send_error("Join the chat before sending typing indicators")
            return

        await self.channel_layer.group_send(
            chat_group_name(chat_id),
            {
                "type": "chat.typing",
                "chat_id": chat_id,
                "user_id": self.scope["user"].pk,
                "is_typing": bool(content.get("is_typing", False)),
            },
        )

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Sends the event to the WebSocket client. When the event ends this
        user's membership of a chat, the socket also leaves that chat's room.
        """
        revoked_chat_id = self._revoked_chat_id(event)
        if revoked_chat_id in self.joined_chats:
            await self.channel_layer.group_discard(
                chat_group_name(revoked_chat_id), self.channel_name
            )
            self.joined_chats.discard(revoked_chat_id)

        await self.send_json({"type": event["event_type"], "payload": event["payload"]})

    def _revoked_chat_id(self, event) -> int | None:
        """Chat the user lost access to through this event, if any."""
        payload = event["payload"]
        if event["event_type"] == ChatEventType.DELETING_GROUP:
            return payload.get("chat_id")
        if (
            event["event_type"] == ChatEventType.REMOVING_FROM_GROUP
            and payload.get("removed_user_id") == self.scope["user"].pk
        ):
            return payload["chat"]["id"]
        return None

    async def chat_typing(self, event):
        """
        Handle chat.typing events from channel layer.

        Sends typing indicator to the WebSocket client (except sender).
        """
        if event["user_id"] == self.scope["user"].pk:
            return

        await self.send_json(
            {
                "type": "typing",
                "chat_id": event["chat_id"],
                "user_id": event["user_id"],
                "is_typing": event["is_typing"],
            }
        )

    async def _send_error(self, message: str):
        await self.send_json({"type": "error", "message": message})

    @staticmethod
    def _chat_id(content) -> int | None:
        try:
            return int(content.get("chat_id"))
        except (TypeError, ValueError):
            return None

    @database_sync_to_async
    def _is_member(self, chat_id: int) -> bool:
        return Chat.objects.filter(pk=chat_id, users=self.scope["user"]).exists()
