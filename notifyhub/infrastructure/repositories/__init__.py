"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .preferences_repository import NotificationPreferencesRepository
from .recipient_repository import PushSubscriptionRepository, RecipientRepository

__all__ = [
    "NotificationRepository",
    "NotificationPreferencesRepository",
    "PushSubscriptionRepository",
    "RecipientRepository",
]
