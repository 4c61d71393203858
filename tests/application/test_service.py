"""Tests for the notification service: validation, scheduling and preferences."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from notifyhub.application.use_cases.notifications import (
    ChannelSelection,
    DeliveryDispatcher,
    NotificationService,
    NotifyCommand,
    update_preferences,
)
from notifyhub.domain.exceptions import ChannelDeliveryError, NotificationValidationError

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeChannel:
    def __init__(self, name: str, *, fail: bool = False):
        self.name = name
        self.fail = fail
        self.sent: list[str] = []

    def send(self, notification) -> None:
        if self.fail:
            raise ChannelDeliveryError(self.name, "unavailable")
        self.sent.append(notification.id)


@pytest.fixture()
def channels():
    return {name: FakeChannel(name) for name in ("email", "push", "in_app")}


@pytest.fixture()
def service(notification_repository, preferences_repository, channels):
    clock = lambda: NOW  # noqa: E731
    dispatcher = DeliveryDispatcher(notification_repository, channels.values(), clock=clock)
    return NotificationService(
        notification_repository, preferences_repository, dispatcher, clock=clock
    )


def _command(**overrides) -> NotifyCommand:
    values = {
        "recipient_id": "user-1",
        "title": "Hi",
        "message": "Test",
        "channels": ChannelSelection(in_app=True, email=False, push=False),
    }
    values.update(overrides)
    return NotifyCommand(**values)


def test_notify_without_deliver_at_dispatches_immediately(service, notification_repository, channels):
    notification = service.notify(_command())

    assert notification.id
    assert notification.status == "delivered"
    assert channels["in_app"].sent == [notification.id]
    stored = notification_repository.get(notification.id)
    assert stored.channels["in_app"].status in ("sent", "failed")
    assert stored.channels["email"].status == "not_applicable"


def test_notify_with_future_deliver_at_is_scheduled(service, notification_repository, channels):
    notification = service.notify(_command(deliver_at=NOW + timedelta(hours=2)))

    assert notification.status == "scheduled"
    assert notification.deliver_at == NOW + timedelta(hours=2)
    assert channels["in_app"].sent == []
    assert notification_repository.get(notification.id).channels["in_app"].status == "pending"


def test_notify_with_past_deliver_at_dispatches_now(service, channels):
    notification = service.notify(_command(deliver_at=NOW - timedelta(minutes=5)))

    assert notification.status == "delivered"
    assert channels["in_app"].sent == [notification.id]


def test_notify_strips_text(service):
    notification = service.notify(_command(title="  Hi  ", message="\tTest\n"))

    assert notification.title == "Hi"
    assert notification.message == "Test"


@pytest.mark.parametrize(
    "overrides",
    [
        {"recipient_id": " "},
        {"title": ""},
        {"message": "   "},
        {"title": "x" * 201},
        {"message": "x" * 1001},
        {"type": "celebration"},
        {"priority": "critical"},
        {"channels": ChannelSelection(email=False, push=False, in_app=False)},
    ],
)
def test_notify_rejects_invalid_commands(service, notification_repository, overrides):
    with pytest.raises(NotificationValidationError):
        service.notify(_command(**overrides))

    assert notification_repository.list_for_user("user-1") == []


def test_email_opt_out_disables_channel(service, preferences_repository, channels):
    update_preferences(preferences_repository, user_id="user-1", email_enabled=False)

    notification = service.notify(
        _command(channels=ChannelSelection(email=True, push=False, in_app=True))
    )

    assert notification.channels["email"].enabled is False
    assert notification.channels["email"].status == "not_applicable"
    assert channels["email"].sent == []
    assert notification.status == "delivered"


def test_push_requires_opt_in(service, preferences_repository, channels):
    only_push = ChannelSelection(email=False, push=True, in_app=False)

    first = service.notify(_command(channels=only_push))
    assert first.channels["push"].enabled is False
    assert first.status == "failed"
    assert first.is_read is True
    assert channels["push"].sent == []

    update_preferences(preferences_repository, user_id="user-1", push_enabled=True)
    second = service.notify(_command(channels=only_push))
    assert second.channels["push"].status == "sent"
    assert channels["push"].sent == [second.id]


def test_failed_channel_yields_partial(notification_repository, preferences_repository):
    channels = [FakeChannel("email", fail=True), FakeChannel("in_app")]
    dispatcher = DeliveryDispatcher(notification_repository, channels, clock=lambda: NOW)
    service = NotificationService(
        notification_repository, preferences_repository, dispatcher, clock=lambda: NOW
    )

    notification = service.notify(
        _command(channels=ChannelSelection(email=True, push=False, in_app=True))
    )

    assert notification.status == "partial"


def test_quiet_hours_defer_immediate_notification(
    notification_repository, preferences_repository, channels
):
    update_preferences(
        preferences_repository,
        user_id="user-1",
        quiet_hours_enabled=True,
        quiet_hours_start="22:00",
        quiet_hours_end="08:00",
    )
    late_evening = datetime(2024, 6, 1, 23, 0, tzinfo=timezone.utc)
    dispatcher = DeliveryDispatcher(
        notification_repository, channels.values(), clock=lambda: late_evening
    )
    service = NotificationService(
        notification_repository, preferences_repository, dispatcher, clock=lambda: late_evening
    )

    notification = service.notify(_command())

    assert notification.status == "scheduled"
    assert notification.deliver_at == datetime(2024, 6, 2, 8, 0, tzinfo=timezone.utc)
    assert channels["in_app"].sent == []


def test_dispatch_due_delivers_each_notification_once(service, channels):
    scheduled = service.notify(_command(deliver_at=NOW + timedelta(minutes=30)))
    later = NOW + timedelta(hours=1)

    assert service.dispatch_due(now=later) == 1
    assert service.dispatch_due(now=later) == 0
    assert channels["in_app"].sent == [scheduled.id]


def test_dispatch_due_ignores_future_notifications(service, channels):
    service.notify(_command(deliver_at=NOW + timedelta(days=1)))

    assert service.dispatch_due(now=NOW + timedelta(hours=1)) == 0
    assert channels["in_app"].sent == []


def test_broadcast_notifies_each_distinct_recipient(service, notification_repository):
    created = service.broadcast(["user-1", "user-2", "user-1", ""], _command())

    assert sorted(n.user_id for n in created) == ["user-1", "user-2"]
    assert len(notification_repository.list_for_user("user-2")) == 1


def test_broadcast_requires_recipients(service):
    with pytest.raises(NotificationValidationError):
        service.broadcast([], _command())


def test_update_preferences_validates_clock_values(preferences_repository):
    with pytest.raises(NotificationValidationError):
        update_preferences(preferences_repository, user_id="user-1", quiet_hours_start="25:00")

    saved = update_preferences(
        preferences_repository, user_id="user-1", quiet_hours_start="21:30"
    )
    assert saved.quiet_hours_start == "21:30"
    assert saved.quiet_hours_end == "08:00"


def test_disabled_category_stores_notification_as_read(
    service, preferences_repository, notification_repository, channels
):
    update_preferences(
        preferences_repository, user_id="user-1", categories={"updates": False}
    )

    notification = service.notify(_command(type="info"))

    assert notification.status == "failed"
    assert notification.is_read is True
    assert notification.category == "updates"
    assert all(d.status == "not_applicable" for d in notification.channels.values())
    assert channels["in_app"].sent == []
    assert notification_repository.count_unread("user-1") == 0


def test_explicit_category_overrides_type(service, preferences_repository, channels):
    # marketing is off by default
    muted = service.notify(_command(category="marketing"))
    assert muted.is_read is True

    update_preferences(preferences_repository, user_id="user-1", categories={"marketing": True})
    delivered = service.notify(_command(category="marketing"))
    assert delivered.status == "delivered"
    assert channels["in_app"].sent == [delivered.id]


def test_success_notifications_are_never_muted(service, preferences_repository, channels):
    update_preferences(
        preferences_repository,
        user_id="user-1",
        categories={name: False for name in ("security", "updates", "system")},
    )

    notification = service.notify_success("user-1", "Saved", "Your changes were saved")

    assert notification.status == "delivered"
    assert notification.type == "success"
    assert channels["in_app"].sent == [notification.id]


def test_in_app_opt_out_masks_in_app_channel(service, preferences_repository, channels):
    update_preferences(
        preferences_repository, user_id="user-1", email_enabled=True, in_app_enabled=False
    )

    notification = service.notify(
        _command(channels=ChannelSelection(email=True, push=False, in_app=True))
    )

    assert notification.channels["in_app"].status == "not_applicable"
    assert notification.channels["email"].status == "sent"
    assert channels["in_app"].sent == []


def test_notify_error_and_security_alert_use_every_channel(
    service, preferences_repository, channels
):
    update_preferences(preferences_repository, user_id="user-1", push_enabled=True)

    error = service.notify_error("user-1", "Import failed", "Row 3 is invalid", {"row": 3})
    alert = service.notify_security_alert("user-1", "New login", "A new device signed in")

    assert (error.type, error.priority, error.data) == ("error", "high", {"row": 3})
    assert (alert.type, alert.priority) == ("warning", "urgent")
    assert channels["push"].sent == [error.id, alert.id]
    assert channels["email"].sent == [error.id, alert.id]


def test_action_label_and_expiry_are_stored(service, notification_repository):
    notification = service.notify(
        _command(
            action_url="/reports/1",
            action_label="  Open report ",
            expires_at=NOW + timedelta(days=1),
        )
    )

    stored = notification_repository.get(notification.id)
    assert stored.action_label == "Open report"
    assert stored.expires_at == NOW + timedelta(days=1)


@pytest.mark.parametrize(
    "overrides",
    [
        {"expires_at": NOW - timedelta(minutes=1)},
        {"deliver_at": NOW + timedelta(hours=2), "expires_at": NOW + timedelta(hours=1)},
        {"action_label": "x" * 51},
        {"category": "gossip"},
    ],
)
def test_notify_rejects_invalid_extras(service, overrides):
    with pytest.raises(NotificationValidationError):
        service.notify(_command(**overrides))


def test_notify_uses_callers_now_for_scheduling(
    notification_repository, preferences_repository, channels
):
    later = NOW + timedelta(seconds=1)
    dispatcher = DeliveryDispatcher(notification_repository, channels.values(), clock=lambda: later)
    service = NotificationService(
        notification_repository, preferences_repository, dispatcher, clock=lambda: later
    )

    # deliverAt was in the future when the caller checked it, but not any more.
    notification = service.notify(_command(deliver_at=NOW + timedelta(milliseconds=5)), now=NOW)

    assert notification.status == "scheduled"
    assert channels["in_app"].sent == []


def test_dispatch_due_skips_expired_notifications(service, notification_repository, channels):
    scheduled = service.notify(
        _command(deliver_at=NOW + timedelta(minutes=10), expires_at=NOW + timedelta(minutes=20))
    )

    assert service.dispatch_due(now=NOW + timedelta(minutes=30)) == 0
    assert channels["in_app"].sent == []
    assert notification_repository.get(scheduled.id).status == "failed"


def test_dispatch_due_continues_after_a_failing_notification(
    notification_repository, preferences_repository, monkeypatch
):
    dispatcher = DeliveryDispatcher(
        notification_repository, [FakeChannel("in_app")], clock=lambda: NOW
    )
    service = NotificationService(
        notification_repository, preferences_repository, dispatcher, clock=lambda: NOW
    )
    first = service.notify(_command(deliver_at=NOW + timedelta(minutes=1)))
    second = service.notify(_command(deliver_at=NOW + timedelta(minutes=2)))

    original = dispatcher.dispatch

    def flaky_dispatch(notification):
        if notification.id == first.id:
            raise RuntimeError("boom")
        return original(notification)

    monkeypatch.setattr(dispatcher, "dispatch", flaky_dispatch)

    assert service.dispatch_due(now=NOW + timedelta(minutes=5)) == 1
    assert notification_repository.get(first.id).status == "failed"
    assert notification_repository.get(second.id).status == "delivered"


def test_update_preferences_rejects_unknown_category_and_timezone(preferences_repository):
    with pytest.raises(NotificationValidationError):
        update_preferences(preferences_repository, user_id="user-1", categories={"sms": True})
    with pytest.raises(NotificationValidationError):
        update_preferences(
            preferences_repository, user_id="user-1", quiet_hours_timezone="Nowhere/City"
        )

    saved = update_preferences(
        preferences_repository, user_id="user-1", quiet_hours_timezone="Asia/Tokyo"
    )
    assert saved.quiet_hours_timezone == "Asia/Tokyo"
    cleared = update_preferences(preferences_repository, user_id="user-1", quiet_hours_timezone="")
    assert cleared.quiet_hours_timezone is None
