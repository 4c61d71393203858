"""Fan a stored notification out to its delivery channels."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Protocol

from notifyhub.domain.entities import (
    CHANNEL_STATUS_FAILED,
    CHANNEL_STATUS_SENT,
    ChannelDelivery,
    Notification,
    aggregate_delivery_status,
)
from notifyhub.domain.exceptions import ChannelDeliveryError
from notifyhub.infrastructure.repositories import NotificationRepository
from notifyhub.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class DeliveryChannel(Protocol):
    """Transport able to hand a notification to one channel."""

    name: str

    def send(self, notification: Notification) -> None:
        """Deliver ``notification`` or raise :class:`ChannelDeliveryError`."""


class DeliveryDispatcher:
    """Deliver a notification on each enabled channel and record the outcome.

    Channels are attempted independently: a failure on one channel neither
    stops the others nor rolls back those already sent, and nothing is retried
    here. Disabled channels keep ``not_applicable`` and do not count towards
    the aggregate status.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        channels: Iterable[DeliveryChannel],
        *,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._repository = repository
        self._channels = {channel.name: channel for channel in channels}
        self._clock = clock

    def dispatch(self, notification: Notification) -> Notification:
        if notification.id is None:
            raise ValueError("Only stored notifications can be dispatched")

        for channel in notification.enabled_channels():
            outcome = self._deliver(channel, notification)
            notification.channels[channel] = outcome
            self._repository.record_channel_outcome(
                notification.id,
                channel,
                status=outcome.status,
                at=outcome.updated_at,
                error=outcome.error,
            )

        status = aggregate_delivery_status(notification.channels.values())
        self._repository.set_status(notification.id, status)
        notification.status = status
        logger.info("Notification %s dispatched with status %s", notification.id, status)
        return notification

    def _deliver(self, channel: str, notification: Notification) -> ChannelDelivery:
        sender = self._channels.get(channel)
        if sender is None:
            logger.warning("No sender configured for channel %s", channel)
            return self._failed(f"No sender configured for channel '{channel}'")

        try:
            sender.send(notification)
        except ChannelDeliveryError as exc:
            logger.warning(
                "Channel %s failed for notification %s: %s",
                channel,
                notification.id,
                exc.reason,
            )
            return self._failed(exc.reason)
        except Exception as exc:
            logger.exception(
                "Unexpected error delivering notification %s on %s", notification.id, channel
            )
            return self._failed(f"Unexpected {type(exc).__name__} while sending")
        return ChannelDelivery(enabled=True, status=CHANNEL_STATUS_SENT, updated_at=self._clock())

    def _failed(self, reason: str) -> ChannelDelivery:
        return ChannelDelivery(
            enabled=True,
            status=CHANNEL_STATUS_FAILED,
            updated_at=self._clock(),
            error=reason,
        )


__all__ = ["DeliveryChannel", "DeliveryDispatcher"]
