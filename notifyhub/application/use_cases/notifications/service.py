"""Create notifications and hand them to the dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from typing import Any

from notifyhub.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    CHANNELS,
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_STATUS_DISPATCHING,
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_SCHEDULED,
    NOTIFICATION_TYPES,
    ChannelDelivery,
    Notification,
    NotificationPreferences,
    category_for_type,
)
from notifyhub.domain.exceptions import NotificationValidationError
from notifyhub.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
)
from notifyhub.utils import ensure_app_timezone, now_in_app_timezone

from .commands import ChannelSelection, NotifyCommand
from .dispatcher import DeliveryDispatcher
from .quiet_hours import is_quiet_time, quiet_window_end

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_MESSAGE_LENGTH = 1000
MAX_ACTION_LABEL_LENGTH = 50


class NotificationService:
    """Entry point for producing notifications.

    ``notify`` stores the notification first and then either leaves it
    ``scheduled`` for a later ``dispatch_due`` run or dispatches it right away.
    Notifications the recipient has muted (a disabled category, or every
    requested channel switched off) are stored already read and never sent.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        preferences: NotificationPreferencesRepository,
        dispatcher: DeliveryDispatcher,
        *,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._repository = repository
        self._preferences = preferences
        self._dispatcher = dispatcher
        self._clock = clock

    def notify(self, command: NotifyCommand, *, now: datetime | None = None) -> Notification:
        """Store and deliver ``command``.

        ``now`` lets a caller that already compared ``deliver_at`` against the
        clock reuse that same instant for the scheduling decision.
        """

        recipient_id = (command.recipient_id or "").strip()
        title = (command.title or "").strip()
        message = (command.message or "").strip()
        action_label = (command.action_label or "").strip() or None
        _validate(recipient_id, title, message, action_label, command)

        now = ensure_app_timezone(now) or self._clock()
        deliver_at = ensure_app_timezone(command.deliver_at)
        expires_at = ensure_app_timezone(command.expires_at)
        if expires_at is not None and expires_at <= max(deliver_at or now, now):
            raise NotificationValidationError("expiresAt must be after the delivery time")

        preferences = self._preferences.get(recipient_id)
        category = command.category or category_for_type(command.type)
        channels = _requested_channels(command.channels, preferences)
        notification = Notification(
            id=None,
            user_id=recipient_id,
            title=title,
            message=message,
            type=command.type,
            priority=command.priority,
            channels=channels,
            status=NOTIFICATION_STATUS_DISPATCHING,
            data=dict(command.data or {}),
            action_url=command.action_url or None,
            action_label=action_label,
            category=category,
            deliver_at=deliver_at,
            expires_at=expires_at,
            created_at=now,
        )

        if not preferences.allows_category(category) or not any(
            delivery.enabled for delivery in channels.values()
        ):
            return self._store_muted(notification, now)

        if deliver_at is None and is_quiet_time(preferences, now):
            notification.deliver_at = quiet_window_end(preferences, now)
            logger.info(
                "Quiet hours active for user %s; deferring notification until %s",
                recipient_id,
                notification.deliver_at.isoformat(),
            )

        scheduled = notification.deliver_at is not None and notification.deliver_at > now
        if scheduled:
            notification.status = NOTIFICATION_STATUS_SCHEDULED
        stored = self._repository.create(notification)
        if scheduled:
            logger.info(
                "Notification %s scheduled for %s", stored.id, stored.deliver_at.isoformat()
            )
            return stored
        return self._dispatcher.dispatch(stored)

    def notify_success(
        self, user_id: str, title: str, message: str, action_url: str | None = None
    ) -> Notification:
        """In-app confirmation; ``success`` notifications are never muted."""

        return self.notify(
            NotifyCommand(
                recipient_id=user_id,
                title=title,
                message=message,
                type="success",
                priority="medium",
                channels=ChannelSelection(in_app=True),
                action_url=action_url,
            )
        )

    def notify_error(
        self, user_id: str, title: str, message: str, data: dict[str, Any] | None = None
    ) -> Notification:
        return self.notify(
            NotifyCommand(
                recipient_id=user_id,
                title=title,
                message=message,
                type="error",
                priority="high",
                channels=ChannelSelection(email=True, push=True, in_app=True),
                data=dict(data or {}),
            )
        )

    def notify_security_alert(self, user_id: str, title: str, message: str) -> Notification:
        return self.notify(
            NotifyCommand(
                recipient_id=user_id,
                title=title,
                message=message,
                type="warning",
                priority="urgent",
                channels=ChannelSelection(email=True, push=True, in_app=True),
            )
        )

    def broadcast(
        self, recipient_ids: Iterable[str], command: NotifyCommand
    ) -> list[Notification]:
        """Send the same notification to every distinct recipient."""

        unique_ids = list(dict.fromkeys(rid for rid in recipient_ids if rid))
        if not unique_ids:
            raise NotificationValidationError("At least one recipient is required")
        return [
            self.notify(replace(command, recipient_id=recipient_id))
            for recipient_id in unique_ids
        ]

    def dispatch_due(self, now: datetime | None = None, *, limit: int = 100) -> int:
        """Dispatch scheduled notifications whose delivery time has arrived.

        Each notification is claimed before dispatch so overlapping runs never
        deliver it twice. Expired notifications are closed as ``failed``
        without being sent. A notification whose dispatch raises is marked
        ``failed`` and the rest of the batch still runs. Returns the number of
        notifications dispatched here.
        """

        moment = now or self._clock()
        dispatched = 0
        for notification_id in self._repository.list_due_ids(moment, limit=limit):
            if not self._repository.claim_for_dispatch(notification_id):
                logger.debug("Notification %s already claimed", notification_id)
                continue
            try:
                notification = self._repository.get(notification_id)
                if notification is None:
                    continue
                if notification.is_expired(moment):
                    logger.info("Notification %s expired before delivery", notification_id)
                    self._repository.set_status(notification_id, NOTIFICATION_STATUS_FAILED)
                    continue
                self._dispatcher.dispatch(notification)
            except Exception:
                logger.exception("Dispatch of notification %s failed", notification_id)
                self._close_failed(notification_id)
                continue
            dispatched += 1
        if dispatched:
            logger.info("Dispatched %s scheduled notifications", dispatched)
        return dispatched

    def _store_muted(self, notification: Notification, now: datetime) -> Notification:
        notification.channels = {
            channel: ChannelDelivery.requested(False) for channel in CHANNELS
        }
        notification.status = NOTIFICATION_STATUS_FAILED
        notification.read_at = now
        stored = self._repository.create(notification)
        logger.info(
            "Notification %s for user %s muted by preferences; stored as read",
            stored.id,
            stored.user_id,
        )
        return stored

    def _close_failed(self, notification_id: str) -> None:
        try:
            self._repository.set_status(notification_id, NOTIFICATION_STATUS_FAILED)
        except Exception:
            logger.exception("Could not mark notification %s as failed", notification_id)


def _validate(
    recipient_id: str,
    title: str,
    message: str,
    action_label: str | None,
    command: NotifyCommand,
) -> None:
    if not recipient_id:
        raise NotificationValidationError("recipientId is required")
    if not title:
        raise NotificationValidationError("title is required")
    if not message:
        raise NotificationValidationError("message is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise NotificationValidationError(
            f"title must be at most {MAX_TITLE_LENGTH} characters"
        )
    if len(message) > MAX_MESSAGE_LENGTH:
        raise NotificationValidationError(
            f"message must be at most {MAX_MESSAGE_LENGTH} characters"
        )
    if action_label is not None and len(action_label) > MAX_ACTION_LABEL_LENGTH:
        raise NotificationValidationError(
            f"actionLabel must be at most {MAX_ACTION_LABEL_LENGTH} characters"
        )
    if command.type not in NOTIFICATION_TYPES:
        raise NotificationValidationError(f"Unknown notification type '{command.type}'")
    if command.priority not in NOTIFICATION_PRIORITIES:
        raise NotificationValidationError(f"Unknown priority '{command.priority}'")
    if command.category is not None and command.category not in NOTIFICATION_CATEGORIES:
        raise NotificationValidationError(f"Unknown category '{command.category}'")
    if not command.channels.any_enabled():
        raise NotificationValidationError("At least one delivery channel must be enabled")


def _requested_channels(
    selection: ChannelSelection, preferences: NotificationPreferences
) -> dict[str, ChannelDelivery]:
    requested = selection.as_dict()
    if not preferences.email_enabled:
        requested[CHANNEL_EMAIL] = False
    if not preferences.push_enabled:
        requested[CHANNEL_PUSH] = False
    if not preferences.in_app_enabled:
        requested[CHANNEL_IN_APP] = False
    return {channel: ChannelDelivery.requested(requested[channel]) for channel in CHANNELS}


__all__ = [
    "MAX_ACTION_LABEL_LENGTH",
    "MAX_MESSAGE_LENGTH",
    "MAX_TITLE_LENGTH",
    "NotificationService",
]
