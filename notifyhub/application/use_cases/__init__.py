"""Aggregate application use cases."""

from .notifications import NotificationService, NotifyCommand, update_preferences

__all__ = [
    "NotificationService",
    "NotifyCommand",
    "update_preferences",
]
