"""Domain entity representing a user notification and its delivery state."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CHANNEL_EMAIL = "email"
CHANNEL_PUSH = "push"
CHANNEL_IN_APP = "in_app"
CHANNELS = (CHANNEL_EMAIL, CHANNEL_PUSH, CHANNEL_IN_APP)

CHANNEL_STATUS_PENDING = "pending"
CHANNEL_STATUS_SENT = "sent"
CHANNEL_STATUS_FAILED = "failed"
CHANNEL_STATUS_NOT_APPLICABLE = "not_applicable"

NOTIFICATION_STATUS_SCHEDULED = "scheduled"
NOTIFICATION_STATUS_DISPATCHING = "dispatching"
NOTIFICATION_STATUS_DELIVERED = "delivered"
NOTIFICATION_STATUS_PARTIAL = "partial"
NOTIFICATION_STATUS_FAILED = "failed"
NOTIFICATION_STATUSES = (
    NOTIFICATION_STATUS_SCHEDULED,
    NOTIFICATION_STATUS_DISPATCHING,
    NOTIFICATION_STATUS_DELIVERED,
    NOTIFICATION_STATUS_PARTIAL,
    NOTIFICATION_STATUS_FAILED,
)

NOTIFICATION_TYPES = ("info", "success", "warning", "error", "system")
NOTIFICATION_PRIORITIES = ("low", "medium", "high", "urgent")


@dataclass
class ChannelDelivery:
    """Delivery bookkeeping for one channel of a notification."""

    enabled: bool
    status: str = CHANNEL_STATUS_NOT_APPLICABLE
    updated_at: datetime | None = None
    error: str | None = None

    @classmethod
    def requested(cls, enabled: bool) -> "ChannelDelivery":
        """Return the initial state for a channel that is ``enabled`` or not."""

        if enabled:
            return cls(enabled=True, status=CHANNEL_STATUS_PENDING)
        return cls(enabled=False, status=CHANNEL_STATUS_NOT_APPLICABLE)


def _default_channels() -> dict[str, ChannelDelivery]:
    return {channel: ChannelDelivery(enabled=False) for channel in CHANNELS}


@dataclass
class Notification:
    """Message addressed to a single user and fanned out over channels."""

    id: str | None
    user_id: str
    title: str
    message: str
    type: str = "info"
    priority: str = "medium"
    channels: dict[str, ChannelDelivery] = field(default_factory=_default_channels)
    status: str = NOTIFICATION_STATUS_DISPATCHING
    data: dict[str, Any] = field(default_factory=dict)
    action_url: str | None = None
    action_label: str | None = None
    category: str | None = None
    deliver_at: datetime | None = None
    expires_at: datetime | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def is_expired(self, moment: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= moment

    def enabled_channels(self) -> list[str]:
        """Return the channels this notification should be delivered on."""

        return [name for name in CHANNELS if self.channels[name].enabled]


def aggregate_delivery_status(deliveries: Iterable[ChannelDelivery]) -> str:
    """Combine per-channel outcomes into the notification's overall status.

    Disabled channels are ignored. ``delivered`` requires every enabled channel
    to have been sent, ``partial`` means at least one was, ``failed`` means none
    were, including when no channel was enabled at all. While an enabled
    channel is still pending the notification is ``dispatching``.
    """

    statuses = [delivery.status for delivery in deliveries if delivery.enabled]
    if any(status == CHANNEL_STATUS_PENDING for status in statuses):
        return NOTIFICATION_STATUS_DISPATCHING
    sent = sum(1 for status in statuses if status == CHANNEL_STATUS_SENT)
    if not sent:
        return NOTIFICATION_STATUS_FAILED
    if sent == len(statuses):
        return NOTIFICATION_STATUS_DELIVERED
    return NOTIFICATION_STATUS_PARTIAL


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_PUSH",
    "CHANNEL_IN_APP",
    "CHANNELS",
    "CHANNEL_STATUS_PENDING",
    "CHANNEL_STATUS_SENT",
    "CHANNEL_STATUS_FAILED",
    "CHANNEL_STATUS_NOT_APPLICABLE",
    "NOTIFICATION_STATUS_SCHEDULED",
    "NOTIFICATION_STATUS_DISPATCHING",
    "NOTIFICATION_STATUS_DELIVERED",
    "NOTIFICATION_STATUS_PARTIAL",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_STATUSES",
    "NOTIFICATION_TYPES",
    "NOTIFICATION_PRIORITIES",
    "ChannelDelivery",
    "Notification",
    "aggregate_delivery_status",
]
