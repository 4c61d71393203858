"""Domain entities exposed by the application."""

from .notification import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    CHANNEL_STATUS_FAILED,
    CHANNEL_STATUS_NOT_APPLICABLE,
    CHANNEL_STATUS_PENDING,
    CHANNEL_STATUS_SENT,
    CHANNELS,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_STATUS_DELIVERED,
    NOTIFICATION_STATUS_DISPATCHING,
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_PARTIAL,
    NOTIFICATION_STATUS_SCHEDULED,
    NOTIFICATION_STATUSES,
    NOTIFICATION_TYPES,
    ChannelDelivery,
    Notification,
    aggregate_delivery_status,
)
from .preferences import (
    NOTIFICATION_CATEGORIES,
    NotificationPreferences,
    category_for_type,
)
from .recipient import PUSH_PLATFORMS, PushSubscription, Recipient

__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_PUSH",
    "CHANNEL_STATUS_FAILED",
    "CHANNEL_STATUS_NOT_APPLICABLE",
    "CHANNEL_STATUS_PENDING",
    "CHANNEL_STATUS_SENT",
    "CHANNELS",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_STATUS_DELIVERED",
    "NOTIFICATION_STATUS_DISPATCHING",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_STATUS_PARTIAL",
    "NOTIFICATION_STATUS_SCHEDULED",
    "NOTIFICATION_STATUSES",
    "NOTIFICATION_TYPES",
    "ChannelDelivery",
    "Notification",
    "aggregate_delivery_status",
    "NOTIFICATION_CATEGORIES",
    "NotificationPreferences",
    "category_for_type",
    "PUSH_PLATFORMS",
    "PushSubscription",
    "Recipient",
]
