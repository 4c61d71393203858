"""Tests for the periodic dispatch command."""

from __future__ import annotations

import importlib.util
import sys
from datetime import timedelta
from pathlib import Path

import pytest

from notifyhub.config import reset_settings_cache
from notifyhub.domain.entities import NOTIFICATION_STATUS_SCHEDULED
from notifyhub.utils import now_in_app_timezone

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "dispatch_due_notifications.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("dispatch_due_notifications", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_dispatches_due_notifications_and_cleans_up(
    monkeypatch: pytest.MonkeyPatch,
    capsys,
    database_url,
    make_notification,
    notification_repository,
) -> None:
    now = now_in_app_timezone()
    due = make_notification(
        status=NOTIFICATION_STATUS_SCHEDULED, deliver_at=now - timedelta(minutes=1)
    )
    old_read = make_notification(created_at=now - timedelta(days=90))
    notification_repository.mark_as_read(old_read.id, "user-1")

    monkeypatch.setenv("DATABASE_URL", database_url)
    reset_settings_cache()
    monkeypatch.setattr(
        sys, "argv", ["dispatch_due_notifications.py", "--limit", "10", "--cleanup-days", "30"]
    )

    _load_script().main()

    output = capsys.readouterr().out
    assert "Dispatched: 1" in output
    assert "Removed read notifications: 1" in output
    assert notification_repository.get(due.id).status == "delivered"
    assert notification_repository.get(old_read.id) is None


def test_rejects_non_positive_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["dispatch_due_notifications.py", "--limit", "0"])

    with pytest.raises(SystemExit):
        _load_script().main()
