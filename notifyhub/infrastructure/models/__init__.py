"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .preferences import NotificationPreferencesModel
from .recipient import PushSubscriptionModel, RecipientModel

__all__ = [
    "NotificationModel",
    "NotificationPreferencesModel",
    "PushSubscriptionModel",
    "RecipientModel",
]
