"""Domain entity describing how a user wants to receive notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "08:00"

CATEGORY_SECURITY = "security"
CATEGORY_UPDATES = "updates"
CATEGORY_MARKETING = "marketing"
CATEGORY_SYSTEM = "system"
CATEGORY_BILLING = "billing"
NOTIFICATION_CATEGORIES = (
    CATEGORY_SECURITY,
    CATEGORY_UPDATES,
    CATEGORY_MARKETING,
    CATEGORY_SYSTEM,
    CATEGORY_BILLING,
)

# ``success`` notifications have no category and are never muted.
_TYPE_CATEGORIES = {
    "error": CATEGORY_SECURITY,
    "warning": CATEGORY_SECURITY,
    "system": CATEGORY_SYSTEM,
    "info": CATEGORY_UPDATES,
}


def category_for_type(notification_type: str) -> str | None:
    """Return the preference category a notification ``type`` falls under."""

    return _TYPE_CATEGORIES.get(notification_type)


@dataclass
class NotificationPreferences:
    """Per-user channel opt-outs, category opt-outs and quiet hours.

    ``quiet_hours_timezone`` names the zone the quiet window is expressed in;
    ``None`` means the application timezone.
    """

    user_id: str
    email_enabled: bool = True
    push_enabled: bool = False
    in_app_enabled: bool = True
    security_enabled: bool = True
    updates_enabled: bool = True
    marketing_enabled: bool = False
    system_enabled: bool = True
    billing_enabled: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = DEFAULT_QUIET_HOURS_START
    quiet_hours_end: str = DEFAULT_QUIET_HOURS_END
    quiet_hours_timezone: str | None = None
    updated_at: datetime | None = None

    def allows_category(self, category: str | None) -> bool:
        if category is None:
            return True
        return bool(getattr(self, f"{category}_enabled", True))

    def categories(self) -> dict[str, bool]:
        return {category: self.allows_category(category) for category in NOTIFICATION_CATEGORIES}


__all__ = [
    "CATEGORY_BILLING",
    "CATEGORY_MARKETING",
    "CATEGORY_SECURITY",
    "CATEGORY_SYSTEM",
    "CATEGORY_UPDATES",
    "DEFAULT_QUIET_HOURS_START",
    "DEFAULT_QUIET_HOURS_END",
    "NOTIFICATION_CATEGORIES",
    "NotificationPreferences",
    "category_for_type",
]
