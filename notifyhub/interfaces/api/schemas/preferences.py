"""Schemas for notification preference endpoints."""

from datetime import datetime

from pydantic import ConfigDict, Field

from .base import CamelModel, Envelope

_CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CategoryPreferences(CamelModel):
    security: bool
    updates: bool
    marketing: bool
    system: bool
    billing: bool


class PreferencesRead(CamelModel):
    email_enabled: bool
    push_enabled: bool
    in_app_enabled: bool
    categories: CategoryPreferences
    quiet_hours_enabled: bool
    quiet_hours_start: str
    quiet_hours_end: str
    quiet_hours_timezone: str | None = None
    updated_at: datetime | None = None


class CategoryPreferencesUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    security: bool | None = None
    updates: bool | None = None
    marketing: bool | None = None
    system: bool | None = None
    billing: bool | None = None


class PreferencesUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value.

    An empty ``quietHoursTimezone`` goes back to the server timezone.
    """

    model_config = ConfigDict(extra="forbid")

    email_enabled: bool | None = None
    push_enabled: bool | None = None
    in_app_enabled: bool | None = None
    categories: CategoryPreferencesUpdate | None = None
    quiet_hours_enabled: bool | None = None
    quiet_hours_start: str | None = Field(default=None, pattern=_CLOCK_PATTERN)
    quiet_hours_end: str | None = Field(default=None, pattern=_CLOCK_PATTERN)
    quiet_hours_timezone: str | None = Field(default=None, max_length=64)


class PreferencesResponse(Envelope):
    preferences: PreferencesRead


__all__ = [
    "CategoryPreferences",
    "CategoryPreferencesUpdate",
    "PreferencesRead",
    "PreferencesResponse",
    "PreferencesUpdate",
]
