"""Notification use cases: creation, scheduling and delivery."""

from .commands import ChannelSelection, NotifyCommand
from .dispatcher import DeliveryChannel, DeliveryDispatcher
from .preferences import update_preferences
from .quiet_hours import is_quiet_time, parse_clock, quiet_window_end, validate_timezone
from .service import MAX_MESSAGE_LENGTH, MAX_TITLE_LENGTH, NotificationService

__all__ = [
    "ChannelSelection",
    "NotifyCommand",
    "DeliveryChannel",
    "DeliveryDispatcher",
    "NotificationService",
    "MAX_TITLE_LENGTH",
    "MAX_MESSAGE_LENGTH",
    "update_preferences",
    "is_quiet_time",
    "parse_clock",
    "quiet_window_end",
    "validate_timezone",
]
