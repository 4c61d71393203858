"""Quiet-hours rules applied before a notification is dispatched."""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta, tzinfo

from notifyhub.domain.entities import NotificationPreferences
from notifyhub.domain.exceptions import NotificationValidationError
from notifyhub.utils import ensure_app_timezone, get_app_timezone, resolve_timezone

_CLOCK_PATTERN = re.compile(r"^(?P<hour>[01]\d|2[0-3]):(?P<minute>[0-5]\d)$")


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` 24-hour clock value."""

    match = _CLOCK_PATTERN.match(value or "")
    if not match:
        raise NotificationValidationError(f"'{value}' is not a valid HH:MM time")
    return time(int(match.group("hour")), int(match.group("minute")))


def validate_timezone(name: str) -> str:
    """Return ``name`` stripped, or raise when it is not a known timezone."""

    cleaned = (name or "").strip()
    if resolve_timezone(cleaned) is None:
        raise NotificationValidationError(f"'{name}' is not a known timezone")
    return cleaned


def _quiet_timezone(preferences: NotificationPreferences) -> tzinfo:
    return resolve_timezone(preferences.quiet_hours_timezone) or get_app_timezone()


def is_quiet_time(preferences: NotificationPreferences, moment: datetime) -> bool:
    """Return ``True`` when ``moment`` falls inside the user's quiet window.

    The window is read in the user's quiet-hours timezone and may cross
    midnight (``22:00``-``08:00``). Equal start and end times describe an
    empty window.
    """

    if not preferences.quiet_hours_enabled:
        return False
    start = parse_clock(preferences.quiet_hours_start)
    end = parse_clock(preferences.quiet_hours_end)
    if start == end:
        return False
    local = ensure_app_timezone(moment).astimezone(_quiet_timezone(preferences))
    current = local.time().replace(second=0, microsecond=0)
    if start < end:
        return start <= current < end
    return current >= start or current < end


def quiet_window_end(preferences: NotificationPreferences, moment: datetime) -> datetime:
    """Return the first moment after ``moment`` when the quiet window closes.

    The result is expressed in the application timezone.
    """

    end = parse_clock(preferences.quiet_hours_end)
    local = ensure_app_timezone(moment).astimezone(_quiet_timezone(preferences))
    candidate = local.replace(hour=end.hour, minute=end.minute, second=0, microsecond=0)
    if candidate <= local:
        candidate += timedelta(days=1)
    return ensure_app_timezone(candidate)


__all__ = ["is_quiet_time", "parse_clock", "quiet_window_end", "validate_timezone"]
