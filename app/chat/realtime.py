"""
Hand-off of chat events to the realtime layer.

Views call dispatch_events() with the events of a successful ServiceResult.
Each event is queued as a Celery task that pushes it to the personal channel
group of its recipients. Dispatch is fire-and-forget: a failure to enqueue is
logged and never reaches the HTTP response.

Usage:
    result = MessageService.send_message(request.user, chat_id, content)
    if not result.success:
        raise exception_for_result(result)
    dispatch_events(result.events)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chat.tasks import deliver_chat_event

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chat.events import ChatEvent

logger = logging.getLogger(__name__)


def dispatch_events(events: Iterable[ChatEvent]) -> int:
    """
    Queue delivery of each event.

    Returns:
        Number of events queued
    """
    queued = 0
    for event in events:
        if not event.recipient_ids:
            continue
        try:
            deliver_chat_event.delay(
                event.event_type,
                list(event.recipient_ids),
                event.payload,
            )
        except Exception:
            logger.exception(
                f"Could not queue {event.event_type} event for {len(event.recipient_ids)} users"
            )
            continue
        queued += 1
    return queued
