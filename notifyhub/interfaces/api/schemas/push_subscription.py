"""Schemas for push subscription endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from .base import CamelModel, Envelope


class PushSubscriptionCreate(CamelModel):
    """Device token to register; surrounding whitespace is dropped before validation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    token: str = Field(..., min_length=1, max_length=512)
    platform: Literal["web", "ios", "android"] = "web"


class PushSubscriptionRead(CamelModel):
    id: int
    token: str
    platform: str
    created_at: datetime | None = None


class PushSubscriptionResponse(Envelope):
    subscription: PushSubscriptionRead


class PushSubscriptionDeletedResponse(Envelope):
    token: str
    deleted: bool = True


__all__ = [
    "PushSubscriptionCreate",
    "PushSubscriptionDeletedResponse",
    "PushSubscriptionRead",
    "PushSubscriptionResponse",
]
