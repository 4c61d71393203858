"""Tests for the channel senders used by the dispatcher."""

from __future__ import annotations

import pytest

from notifyhub.domain.entities import Notification, PushSubscription, Recipient
from notifyhub.domain.exceptions import ChannelDeliveryError
from notifyhub.infrastructure.channels import EmailChannel, InAppChannel, PushChannel
from notifyhub.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationPublisher,
)


def _notification(user_id: str = "user-1") -> Notification:
    return Notification(id="n1", user_id=user_id, title="Hi", message="Test")


def test_email_channel_requires_known_address(recipient_repository) -> None:
    channel = EmailChannel(recipient_repository, sender=lambda *args, **kwargs: True)

    with pytest.raises(ChannelDeliveryError) as excinfo:
        channel.send(_notification())

    assert excinfo.value.channel == "email"
    assert "No email address" in excinfo.value.reason


def test_email_channel_sends_to_directory_address(recipient_repository) -> None:
    recipient_repository.sync(Recipient(id="user-1", email="ada@example.com", name="Ada"))
    calls = []

    def sender(notification, recipient, *, recipient_name=None):
        calls.append((notification.id, recipient, recipient_name))
        return True

    EmailChannel(recipient_repository, sender=sender).send(_notification())

    assert calls == [("n1", "ada@example.com", "Ada")]


def test_email_channel_reports_provider_rejection(recipient_repository) -> None:
    recipient_repository.sync(Recipient(id="user-1", email="ada@example.com"))
    channel = EmailChannel(recipient_repository, sender=lambda *args, **kwargs: False)

    with pytest.raises(ChannelDeliveryError):
        channel.send(_notification())


class _Gateway:
    def __init__(self, accepted: set[str]):
        self.accepted = accepted
        self.tokens: list[str] = []

    def send(self, subscription, notification) -> bool:
        self.tokens.append(subscription.token)
        return subscription.token in self.accepted


def test_push_channel_without_subscriptions(push_subscription_repository) -> None:
    with pytest.raises(ChannelDeliveryError) as excinfo:
        PushChannel(push_subscription_repository, _Gateway(set())).send(_notification())

    assert excinfo.value.channel == "push"


def test_push_channel_succeeds_when_any_device_accepts(push_subscription_repository) -> None:
    for token in ("device-a", "device-b"):
        push_subscription_repository.register(
            PushSubscription(id=None, user_id="user-1", token=token)
        )
    gateway = _Gateway({"device-b"})

    PushChannel(push_subscription_repository, gateway).send(_notification())

    assert gateway.tokens == ["device-a", "device-b"]


def test_push_channel_fails_when_no_device_accepts(push_subscription_repository) -> None:
    push_subscription_repository.register(
        PushSubscription(id=None, user_id="user-1", token="device-a")
    )

    with pytest.raises(ChannelDeliveryError) as excinfo:
        PushChannel(push_subscription_repository, _Gateway(set())).send(_notification())

    assert "none of 1" in excinfo.value.reason


def test_in_app_channel_succeeds_without_live_connection() -> None:
    publisher = NotificationPublisher(NotificationConnectionManager())

    InAppChannel(publisher).send(_notification())

    assert publisher.dispatch(_notification()) is False
