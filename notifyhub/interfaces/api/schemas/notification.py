"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .base import CamelModel, Envelope


class ChannelFlags(CamelModel):
    """Channels requested for a notification."""

    email: bool = False
    push: bool = False
    in_app: bool = True


class NotificationCreate(CamelModel):
    """Payload used to create a notification."""

    recipient_id: str | None = Field(
        default=None, description="Recipient; must be the authenticated caller when given"
    )
    title: str
    message: str
    type: str = "info"
    priority: str = "medium"
    channels: ChannelFlags = Field(default_factory=ChannelFlags)
    data: dict[str, Any] = Field(default_factory=dict)
    action_url: str | None = Field(default=None, max_length=500)
    action_label: str | None = Field(default=None, max_length=50)
    category: str | None = None
    deliver_at: datetime | None = None
    expires_at: datetime | None = None


class NotificationSchedule(NotificationCreate):
    """Payload used to schedule a notification for later delivery."""

    deliver_at: datetime


class NotificationBulkReadRequest(CamelModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[str] = Field(..., min_length=1, max_length=500)

    def unique_ids(self) -> list[str]:
        """Return the non-blank identifiers without duplicates preserving order."""

        return list(dict.fromkeys(nid.strip() for nid in self.ids if nid and nid.strip()))


class NotificationRead(CamelModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: str
    title: str
    message: str
    type: str
    priority: str
    status: str
    channels: ChannelFlags
    data: dict[str, Any] = Field(default_factory=dict)
    action_url: str | None = None
    action_label: str | None = None
    category: str | None = None
    deliver_at: datetime | None = None
    expires_at: datetime | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None
    is_read: bool = False


class NotificationResponse(Envelope):
    notification: NotificationRead


class Pagination(CamelModel):
    limit: int
    offset: int
    has_more: bool


class NotificationListResponse(Envelope):
    notifications: list[NotificationRead]
    unread_count: int
    pagination: Pagination


class UnreadCountResponse(Envelope):
    count: int


class UpdatedCountResponse(Envelope):
    updated: int


class ScheduledNotificationResponse(Envelope):
    id: str
    deliver_at: datetime
    status: str


class ChannelStatusRead(CamelModel):
    enabled: bool
    status: str
    updated_at: datetime | None = None
    error: str | None = None


class DeliveryStatusRead(CamelModel):
    email: ChannelStatusRead
    push: ChannelStatusRead
    in_app: ChannelStatusRead


class DeliveryStatusResponse(Envelope):
    notification_id: str
    status: str
    delivery_status: DeliveryStatusRead
    read_at: datetime | None = None


class MarkReadResponse(Envelope):
    notification_id: str
    read_at: datetime | None = None


class NotificationDeletedResponse(Envelope):
    notification_id: str
    deleted: bool = True


__all__ = [
    "ChannelFlags",
    "ChannelStatusRead",
    "DeliveryStatusRead",
    "DeliveryStatusResponse",
    "MarkReadResponse",
    "NotificationBulkReadRequest",
    "NotificationCreate",
    "NotificationDeletedResponse",
    "NotificationListResponse",
    "NotificationRead",
    "NotificationResponse",
    "NotificationSchedule",
    "Pagination",
    "ScheduledNotificationResponse",
    "UnreadCountResponse",
    "UpdatedCountResponse",
]
