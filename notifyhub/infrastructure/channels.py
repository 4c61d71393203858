"""Channel senders used by the delivery dispatcher.

Each sender hands one notification to its transport and raises
:class:`ChannelDeliveryError` when the hand-over did not happen.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from notifyhub.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    Notification,
)
from notifyhub.domain.exceptions import ChannelDeliveryError
from notifyhub.infrastructure.email import send_notification_email
from notifyhub.infrastructure.notifications import NotificationPublisher
from notifyhub.infrastructure.push import PushGatewayClient
from notifyhub.infrastructure.repositories import (
    PushSubscriptionRepository,
    RecipientRepository,
)

logger = logging.getLogger(__name__)


class EmailChannel:
    """Email the notification to the address known for its recipient."""

    name = CHANNEL_EMAIL

    def __init__(
        self,
        recipients: RecipientRepository,
        *,
        sender: Callable[..., bool] = send_notification_email,
    ) -> None:
        self._recipients = recipients
        self._sender = sender

    def send(self, notification: Notification) -> None:
        recipient = self._recipients.get(notification.user_id)
        if recipient is None or not recipient.email:
            raise ChannelDeliveryError(self.name, "No email address known for recipient")
        if not self._sender(notification, recipient.email, recipient_name=recipient.name):
            raise ChannelDeliveryError(self.name, "Email provider did not accept the message")


class PushChannel:
    """Send the notification to every device the recipient registered."""

    name = CHANNEL_PUSH

    def __init__(
        self, subscriptions: PushSubscriptionRepository, gateway: PushGatewayClient
    ) -> None:
        self._subscriptions = subscriptions
        self._gateway = gateway

    def send(self, notification: Notification) -> None:
        subscriptions = self._subscriptions.list_for_user(notification.user_id)
        if not subscriptions:
            raise ChannelDeliveryError(self.name, "Recipient has no push subscriptions")
        accepted = sum(
            1 for subscription in subscriptions if self._gateway.send(subscription, notification)
        )
        if not accepted:
            raise ChannelDeliveryError(
                self.name, f"Push gateway accepted none of {len(subscriptions)} devices"
            )
        logger.debug(
            "Push for notification %s accepted by %s/%s devices",
            notification.id,
            accepted,
            len(subscriptions),
        )


class InAppChannel:
    """The stored record is the inbox entry; live sessions get a realtime copy."""

    name = CHANNEL_IN_APP

    def __init__(self, publisher: NotificationPublisher) -> None:
        self._publisher = publisher

    def send(self, notification: Notification) -> None:
        if not self._publisher.dispatch(notification):
            logger.debug(
                "User %s has no live connection; notification %s waits in the inbox",
                notification.user_id,
                notification.id,
            )


__all__ = ["EmailChannel", "PushChannel", "InAppChannel"]
