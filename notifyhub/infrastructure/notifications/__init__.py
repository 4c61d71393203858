"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager
from .publisher import (
    EVENT_BULK_READ,
    EVENT_DELETED,
    EVENT_NOTIFICATION,
    EVENT_READ,
    NotificationPublisher,
    serialize_notification,
)

__all__ = [
    "EVENT_BULK_READ",
    "EVENT_DELETED",
    "EVENT_NOTIFICATION",
    "EVENT_READ",
    "NotificationConnectionManager",
    "NotificationPublisher",
    "serialize_notification",
]
