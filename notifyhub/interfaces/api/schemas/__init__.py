from .base import CamelModel, Envelope
from .notification import (
    ChannelFlags,
    ChannelStatusRead,
    DeliveryStatusRead,
    DeliveryStatusResponse,
    MarkReadResponse,
    NotificationBulkReadRequest,
    NotificationCreate,
    NotificationDeletedResponse,
    NotificationListResponse,
    NotificationRead,
    NotificationResponse,
    NotificationSchedule,
    Pagination,
    ScheduledNotificationResponse,
    UnreadCountResponse,
    UpdatedCountResponse,
)
from .preferences import (
    CategoryPreferences,
    CategoryPreferencesUpdate,
    PreferencesRead,
    PreferencesResponse,
    PreferencesUpdate,
)
from .push_subscription import (
    PushSubscriptionCreate,
    PushSubscriptionDeletedResponse,
    PushSubscriptionRead,
    PushSubscriptionResponse,
)

__all__ = [
    "CamelModel",
    "Envelope",
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
    "CategoryPreferences",
    "CategoryPreferencesUpdate",
    "PreferencesRead",
    "PreferencesResponse",
    "PreferencesUpdate",
    "PushSubscriptionCreate",
    "PushSubscriptionDeletedResponse",
    "PushSubscriptionRead",
    "PushSubscriptionResponse",
]
