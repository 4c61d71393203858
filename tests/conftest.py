"""Shared fixtures: a fresh SQLite database and repositories per test."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the project root (which contains the ``notifyhub`` package) is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from notifyhub.config import reset_settings_cache  # noqa: E402
from notifyhub.domain.entities import ChannelDelivery, Notification  # noqa: E402
from notifyhub.infrastructure.database import (  # noqa: E402
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from notifyhub.infrastructure.repositories import (  # noqa: E402
    NotificationPreferencesRepository,
    NotificationRepository,
    PushSubscriptionRepository,
    RecipientRepository,
)
from notifyhub.utils import get_app_timezone  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test against UTC and without external providers configured."""

    monkeypatch.setenv("APP_TIMEZONE", "UTC")
    for name in ("SENDGRID_API_KEY", "SENDGRID_SENDER", "PUSH_GATEWAY_URL", "PUSH_GATEWAY_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    get_app_timezone.cache_clear()
    yield
    reset_settings_cache()
    get_app_timezone.cache_clear()


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'notifications.db'}"


@pytest.fixture()
def engine(database_url: str):
    engine = create_database_engine(database_url)
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def notification_repository(session_factory) -> NotificationRepository:
    return NotificationRepository(session_factory)


@pytest.fixture()
def preferences_repository(session_factory) -> NotificationPreferencesRepository:
    return NotificationPreferencesRepository(session_factory)


@pytest.fixture()
def recipient_repository(session_factory) -> RecipientRepository:
    return RecipientRepository(session_factory)


@pytest.fixture()
def push_subscription_repository(session_factory) -> PushSubscriptionRepository:
    return PushSubscriptionRepository(session_factory)


@pytest.fixture()
def make_notification(notification_repository: NotificationRepository):
    """Return a helper that stores a notification with sensible defaults."""

    def _make(
        user_id: str = "user-1",
        *,
        channels: tuple[str, ...] = ("in_app",),
        **overrides,
    ) -> Notification:
        values = {
            "id": None,
            "user_id": user_id,
            "title": "Hello",
            "message": "World",
            "channels": {
                name: ChannelDelivery.requested(name in channels)
                for name in ("email", "push", "in_app")
            },
            "created_at": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        }
        values.update(overrides)
        return notification_repository.create(Notification(**values))

    return _make
