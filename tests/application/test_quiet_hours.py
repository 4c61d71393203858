"""Tests for quiet-hours evaluation."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notifyhub.application.use_cases.notifications import (
    is_quiet_time,
    parse_clock,
    quiet_window_end,
    validate_timezone,
)
from notifyhub.domain.entities import NotificationPreferences
from notifyhub.domain.exceptions import NotificationValidationError


def _prefs(start: str = "22:00", end: str = "08:00", enabled: bool = True):
    return NotificationPreferences(
        user_id="user-1",
        quiet_hours_enabled=enabled,
        quiet_hours_start=start,
        quiet_hours_end=end,
    )


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, 10, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("moment", "expected"),
    [
        (_at(21, 59), False),
        (_at(22, 0), True),
        (_at(23, 30), True),
        (_at(3, 0), True),
        (_at(7, 59), True),
        (_at(8, 0), False),
        (_at(12, 0), False),
    ],
)
def test_window_crossing_midnight(moment, expected):
    assert is_quiet_time(_prefs(), moment) is expected


def test_window_within_one_day():
    prefs = _prefs("13:00", "14:30")

    assert is_quiet_time(prefs, _at(13, 45)) is True
    assert is_quiet_time(prefs, _at(14, 30)) is False
    assert is_quiet_time(prefs, _at(12, 59)) is False


def test_disabled_or_empty_window_is_never_quiet():
    assert is_quiet_time(_prefs(enabled=False), _at(23)) is False
    assert is_quiet_time(_prefs("10:00", "10:00"), _at(10)) is False


def test_window_end_is_next_occurrence():
    prefs = _prefs()

    assert quiet_window_end(prefs, _at(23, 15)) == datetime(2024, 5, 11, 8, 0, tzinfo=timezone.utc)
    assert quiet_window_end(prefs, _at(2, 0)) == datetime(2024, 5, 10, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["24:00", "7:00", "07:60", "", "noon"])
def test_parse_clock_rejects_invalid_values(value):
    with pytest.raises(NotificationValidationError):
        parse_clock(value)


def test_window_is_read_in_the_users_timezone():
    prefs = NotificationPreferences(
        user_id="user-1",
        quiet_hours_enabled=True,
        quiet_hours_start="22:00",
        quiet_hours_end="08:00",
        quiet_hours_timezone="America/New_York",
    )

    # 03:00 UTC is 23:00 the previous evening in New York (EDT, UTC-4).
    assert is_quiet_time(prefs, _at(3, 0)) is True
    # 13:00 UTC is 09:00 in New York.
    assert is_quiet_time(prefs, _at(13, 0)) is False
    assert quiet_window_end(prefs, _at(3, 0)) == datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def test_fixed_offset_timezone_is_accepted():
    prefs = _prefs()
    prefs.quiet_hours_timezone = "UTC+05:30"

    # 17:00 UTC is 22:30 at UTC+05:30.
    assert is_quiet_time(prefs, _at(17, 0)) is True


@pytest.mark.parametrize("value", ["Mars/Olympus", "", "UTC+99:99x"])
def test_validate_timezone_rejects_unknown_zones(value):
    with pytest.raises(NotificationValidationError):
        validate_timezone(value)


def test_validate_timezone_strips_value():
    assert validate_timezone(" Europe/Madrid ") == "Europe/Madrid"
