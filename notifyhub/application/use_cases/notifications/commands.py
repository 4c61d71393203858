"""Request objects accepted by the notification use cases."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from notifyhub.domain.entities import CHANNEL_EMAIL, CHANNEL_IN_APP, CHANNEL_PUSH


@dataclass(frozen=True)
class ChannelSelection:
    """Channels the caller asks a notification to be delivered on."""

    email: bool = False
    push: bool = False
    in_app: bool = True

    def as_dict(self) -> dict[str, bool]:
        return {
            CHANNEL_EMAIL: self.email,
            CHANNEL_PUSH: self.push,
            CHANNEL_IN_APP: self.in_app,
        }

    def any_enabled(self) -> bool:
        return self.email or self.push or self.in_app


@dataclass(frozen=True)
class NotifyCommand:
    """Everything needed to create and deliver one notification."""

    recipient_id: str
    title: str
    message: str
    type: str = "info"
    priority: str = "medium"
    channels: ChannelSelection = field(default_factory=ChannelSelection)
    deliver_at: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)
    action_url: str | None = None
    action_label: str | None = None
    expires_at: datetime | None = None
    category: str | None = None


__all__ = ["ChannelSelection", "NotifyCommand"]
