"""Utility helpers to push notification events to websocket subscribers."""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

from anyio import from_thread

from notifyhub.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    CHANNELS,
    Notification,
)
from notifyhub.utils import isoformat_or_none

from .manager import NotificationConnectionManager

logger = logging.getLogger(__name__)

EVENT_NOTIFICATION = "notification"
EVENT_READ = "notification.read"
EVENT_BULK_READ = "notification.bulk_read"
EVENT_DELETED = "notification.deleted"

_CHANNEL_KEYS = {CHANNEL_EMAIL: "email", CHANNEL_PUSH: "push", CHANNEL_IN_APP: "inApp"}


class NotificationPublisher:
    """Serialize notification events and schedule their delivery."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, notification: Notification) -> bool:
        """Schedule ``notification`` for the owner's live connections.

        Returns ``False`` when the owner has no open connection.
        """

        return self.publish(
            notification.user_id,
            event_type=EVENT_NOTIFICATION,
            payload=serialize_notification(notification),
        )

    def publish(self, user_id: str, *, event_type: str, payload: Any) -> bool:
        """Schedule a realtime ``event_type`` event for ``user_id``."""

        if not user_id or not self._manager.has_connections(user_id):
            return False
        message = {"type": event_type, "data": copy.deepcopy(payload)}
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._manager.send_to_user, user_id, message)
            except RuntimeError:
                logger.debug("No event loop reachable; realtime event %s skipped", event_type)
                return False
        else:
            loop.create_task(self._manager.send_to_user(user_id, message))
        return True


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON payload representation for ``notification``."""

    return {
        "id": notification.id,
        "userId": notification.user_id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "priority": notification.priority,
        "status": notification.status,
        "data": notification.data or {},
        "actionUrl": notification.action_url,
        "actionLabel": notification.action_label,
        "category": notification.category,
        "channels": {
            _CHANNEL_KEYS[channel]: notification.channels[channel].enabled
            for channel in CHANNELS
        },
        "deliverAt": isoformat_or_none(notification.deliver_at),
        "expiresAt": isoformat_or_none(notification.expires_at),
        "readAt": isoformat_or_none(notification.read_at),
        "createdAt": isoformat_or_none(notification.created_at),
    }


__all__ = [
    "EVENT_NOTIFICATION",
    "EVENT_READ",
    "EVENT_BULK_READ",
    "EVENT_DELETED",
    "NotificationPublisher",
    "serialize_notification",
]
