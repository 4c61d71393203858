"""Use case for updating a user's notification preferences."""

from collections.abc import Mapping

from notifyhub.domain.entities import NOTIFICATION_CATEGORIES, NotificationPreferences
from notifyhub.domain.exceptions import NotificationValidationError
from notifyhub.infrastructure.repositories import NotificationPreferencesRepository

from .quiet_hours import parse_clock, validate_timezone


def update_preferences(
    repository: NotificationPreferencesRepository,
    *,
    user_id: str,
    email_enabled: bool | None = None,
    push_enabled: bool | None = None,
    in_app_enabled: bool | None = None,
    categories: Mapping[str, bool] | None = None,
    quiet_hours_enabled: bool | None = None,
    quiet_hours_start: str | None = None,
    quiet_hours_end: str | None = None,
    quiet_hours_timezone: str | None = None,
) -> NotificationPreferences:
    """Store the given changes; ``None`` leaves a preference untouched.

    Only the provided preferences are written, so concurrent updates of
    different preferences do not overwrite each other. An empty
    ``quiet_hours_timezone`` resets the quiet window to the application
    timezone.
    """

    changes: dict[str, object] = {}
    for name, value in (
        ("email_enabled", email_enabled),
        ("push_enabled", push_enabled),
        ("in_app_enabled", in_app_enabled),
        ("quiet_hours_enabled", quiet_hours_enabled),
    ):
        if value is not None:
            changes[name] = value

    for category, enabled in (categories or {}).items():
        if category not in NOTIFICATION_CATEGORIES:
            raise NotificationValidationError(f"Unknown category '{category}'")
        if enabled is not None:
            changes[f"{category}_enabled"] = enabled

    if quiet_hours_start is not None:
        parse_clock(quiet_hours_start)
        changes["quiet_hours_start"] = quiet_hours_start
    if quiet_hours_end is not None:
        parse_clock(quiet_hours_end)
        changes["quiet_hours_end"] = quiet_hours_end
    if quiet_hours_timezone is not None:
        changes["quiet_hours_timezone"] = (
            validate_timezone(quiet_hours_timezone) if quiet_hours_timezone.strip() else None
        )

    return repository.update(user_id, changes)
