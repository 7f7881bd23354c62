"""
Celery tasks for chat app.

This module defines async tasks for:
- Delivering chat events to connected sockets

Related files:
    - realtime.py: Queues these tasks after a successful operation
    - consumers.py: Receives the events and writes them to the socket

Usage:
    from chat.tasks import deliver_chat_event

    deliver_chat_event.delay("message", [2, 3], payload)
"""

import logging

from asgiref.sync import async_to_sync
from celery import shared_task
from channels.layers import get_channel_layer

from chat.events import user_group_name

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(ConnectionError, OSError),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def deliver_chat_event(self, event_type: str, recipient_ids: list[int], payload: dict) -> int:
    """
    Push one event to the personal group of each recipient.

    Recipients without an open socket simply have no channel in their
    group; nothing is stored for later delivery.

    Args:
        event_type: Client-facing event name (see chat.events.ChatEventType)
        recipient_ids: Users to notify
        payload: JSON-serializable event body

    Returns:
        Number of groups the event was sent to
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning(f"No channel layer configured, dropping {event_type} event")
        return 0

    for user_id in recipient_ids:
        async_to_sync(channel_layer.group_send)(
            user_group_name(user_id),
            {
                "type": "chat.event",
                "event_type": event_type,
                "payload": payload,
            },
        )

    logger.debug(f"Delivered {event_type} event to {len(recipient_ids)} users")
    return len(recipient_ids)
