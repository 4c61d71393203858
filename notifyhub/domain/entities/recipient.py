"""Domain entities for notification recipients and their devices."""

from dataclasses import dataclass
from datetime import datetime

PUSH_PLATFORMS = ("web", "ios", "android")


@dataclass
class Recipient:
    """Caller identity as asserted by the identity provider."""

    id: str
    email: str | None = None
    name: str | None = None


@dataclass
class PushSubscription:
    """Device token registered by a user to receive push messages."""

    id: int | None
    user_id: str
    token: str
    platform: str = "web"
    created_at: datetime | None = None
