"""Persistence helpers for notification preferences."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from typing import Any

from sqlalchemy.orm import Session

from notifyhub.domain.entities import NotificationPreferences
from notifyhub.infrastructure.database import update_or_insert
from notifyhub.infrastructure.models import NotificationPreferencesModel
from notifyhub.utils import ensure_app_timezone

PREFERENCE_FIELDS = (
    "email_enabled",
    "push_enabled",
    "in_app_enabled",
    "security_enabled",
    "updates_enabled",
    "marketing_enabled",
    "system_enabled",
    "billing_enabled",
    "quiet_hours_enabled",
    "quiet_hours_start",
    "quiet_hours_end",
    "quiet_hours_timezone",
)


class NotificationPreferencesRepository:
    """Read and store :class:`NotificationPreferences`."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, user_id: str) -> NotificationPreferences:
        """Return the stored preferences or the defaults for ``user_id``."""

        with self._session_factory() as session:
            model = session.get(NotificationPreferencesModel, user_id)
            if model is None:
                return NotificationPreferences(user_id=user_id)
            return self._to_entity(model)

    def update(self, user_id: str, changes: dict[str, Any]) -> NotificationPreferences:
        """Write only the columns in ``changes`` with a single ``UPDATE``.

        Users without a stored row get one created from the defaults plus
        ``changes``. Unknown keys raise ``ValueError``.
        """

        unknown = set(changes) - set(PREFERENCE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown preference fields: {', '.join(sorted(unknown))}")
        if changes:
            with self._session_factory() as session:
                update_or_insert(
                    session,
                    NotificationPreferencesModel,
                    [NotificationPreferencesModel.user_id == user_id],
                    dict(changes),
                    identity={"user_id": user_id},
                )
        return self.get(user_id)

    def save(self, preferences: NotificationPreferences) -> NotificationPreferences:
        values = asdict(preferences)
        return self.update(
            preferences.user_id, {name: values[name] for name in PREFERENCE_FIELDS}
        )

    @staticmethod
    def _to_entity(model: NotificationPreferencesModel) -> NotificationPreferences:
        return NotificationPreferences(
            user_id=model.user_id,
            updated_at=ensure_app_timezone(model.updated_at),
            **{name: getattr(model, name) for name in PREFERENCE_FIELDS},
        )


__all__ = ["PREFERENCE_FIELDS", "NotificationPreferencesRepository"]
