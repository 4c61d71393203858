"""Persistence helpers for notification entities."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    CHANNELS,
    NOTIFICATION_STATUS_DISPATCHING,
    NOTIFICATION_STATUS_SCHEDULED,
    ChannelDelivery,
    Notification,
)
from notifyhub.infrastructure.models import NotificationModel
from notifyhub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

_ERROR_MAX_LENGTH = 500


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects.

    The repository is built once per process around a session factory and
    opens a short-lived session for every operation. Mutations that depend on
    the current row state (ownership, read state, dispatch claims) are issued
    as a single conditional ``UPDATE`` so concurrent requests cannot lose
    updates.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel(id=notification.id or uuid.uuid4().hex)
        self._apply_entity_to_model(model, notification)
        with self._session_factory() as session:
            session.add(model)
            session.commit()
            session.refresh(model)
            return self._to_entity(model)

    def get(self, notification_id: str) -> Notification | None:
        with self._session_factory() as session:
            model = session.get(NotificationModel, notification_id)
            return self._to_entity(model) if model else None

    def get_for_user(self, notification_id: str, user_id: str) -> Notification | None:
        """Return the notification only when it belongs to ``user_id``."""

        with self._session_factory() as session:
            model = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
                .one_or_none()
            )
            return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        *,
        limit: int | None = 50,
        offset: int = 0,
        unread_only: bool = False,
        notification_type: str | None = None,
        status: str | None = None,
        include_expired: bool = False,
    ) -> Sequence[Notification]:
        """Return the user's notifications, newest first.

        Notifications past their ``expires_at`` are left out unless
        ``include_expired`` is set.
        """

        with self._session_factory() as session:
            query = session.query(NotificationModel).filter(
                NotificationModel.user_id == user_id
            )
            if not include_expired:
                query = query.filter(_not_expired())
            if unread_only:
                query = query.filter(NotificationModel.read_at.is_(None))
            if notification_type:
                query = query.filter(NotificationModel.type == notification_type)
            if status:
                query = query.filter(NotificationModel.status == status)
            query = query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [self._to_entity(model) for model in query.all()]

    def count_unread(self, user_id: str) -> int:
        with self._session_factory() as session:
            count = (
                session.query(func.count(NotificationModel.id))
                .filter(
                    NotificationModel.user_id == user_id,
                    NotificationModel.read_at.is_(None),
                    _not_expired(),
                )
                .scalar()
            )
            return int(count or 0)

    def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """Mark one notification as read for its owner.

        Returns ``False`` when the notification does not exist or belongs to
        someone else. An already read notification keeps its first ``read_at``
        and still reports ``True``.
        """

        read_at = ensure_app_naive_datetime(now_in_app_timezone())
        with self._session_factory() as session:
            updated = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                    NotificationModel.read_at.is_(None),
                )
                .update({NotificationModel.read_at: read_at}, synchronize_session=False)
            )
            session.commit()
            if updated:
                return True
            owned = (
                session.query(NotificationModel.id)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
                .first()
            )
            return owned is not None

    def bulk_mark_as_read(self, notification_ids: Iterable[str], user_id: str) -> int:
        """Mark every unread notification in ``notification_ids`` owned by ``user_id``.

        Unknown and foreign identifiers are skipped. Returns the number of
        notifications that transitioned to read.
        """

        ids = list(dict.fromkeys(nid for nid in notification_ids if nid))
        if not ids:
            return 0
        read_at = ensure_app_naive_datetime(now_in_app_timezone())
        with self._session_factory() as session:
            updated = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.id.in_(ids),
                    NotificationModel.user_id == user_id,
                    NotificationModel.read_at.is_(None),
                )
                .update({NotificationModel.read_at: read_at}, synchronize_session=False)
            )
            session.commit()
            return int(updated)

    def mark_all_as_read(self, user_id: str) -> int:
        read_at = ensure_app_naive_datetime(now_in_app_timezone())
        with self._session_factory() as session:
            updated = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.user_id == user_id,
                    NotificationModel.read_at.is_(None),
                )
                .update({NotificationModel.read_at: read_at}, synchronize_session=False)
            )
            session.commit()
            return int(updated)

    def delete(self, notification_id: str, user_id: str) -> bool:
        with self._session_factory() as session:
            deleted = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.user_id == user_id,
                )
                .delete(synchronize_session=False)
            )
            session.commit()
            return bool(deleted)

    def delete_read_older_than(self, cutoff: datetime) -> int:
        """Remove read notifications created before ``cutoff``."""

        with self._session_factory() as session:
            deleted = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.read_at.is_not(None),
                    NotificationModel.created_at < ensure_app_naive_datetime(cutoff),
                )
                .delete(synchronize_session=False)
            )
            session.commit()
            return int(deleted)

    def delete_expired(self, now: datetime) -> int:
        """Remove notifications whose ``expires_at`` is at or before ``now``."""

        with self._session_factory() as session:
            deleted = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.expires_at.is_not(None),
                    NotificationModel.expires_at <= ensure_app_naive_datetime(now),
                )
                .delete(synchronize_session=False)
            )
            session.commit()
            return int(deleted)

    def list_due_ids(self, now: datetime, *, limit: int = 100) -> list[str]:
        """Return scheduled notifications whose delivery time has arrived."""

        with self._session_factory() as session:
            rows = (
                session.query(NotificationModel.id)
                .filter(
                    NotificationModel.status == NOTIFICATION_STATUS_SCHEDULED,
                    NotificationModel.deliver_at <= ensure_app_naive_datetime(now),
                )
                .order_by(NotificationModel.deliver_at.asc(), NotificationModel.id.asc())
                .limit(limit)
                .all()
            )
            return [row.id for row in rows]

    def claim_for_dispatch(self, notification_id: str) -> bool:
        """Move a scheduled notification to ``dispatching``.

        Only one caller can win the claim for a given notification.
        """

        with self._session_factory() as session:
            updated = (
                session.query(NotificationModel)
                .filter(
                    NotificationModel.id == notification_id,
                    NotificationModel.status == NOTIFICATION_STATUS_SCHEDULED,
                )
                .update(
                    {NotificationModel.status: NOTIFICATION_STATUS_DISPATCHING},
                    synchronize_session=False,
                )
            )
            session.commit()
            return updated == 1

    def record_channel_outcome(
        self,
        notification_id: str,
        channel: str,
        *,
        status: str,
        at: datetime,
        error: str | None = None,
    ) -> None:
        if channel not in CHANNELS:
            raise ValueError(f"Unknown delivery channel '{channel}'")
        values = {
            getattr(NotificationModel, f"{channel}_status"): status,
            getattr(NotificationModel, f"{channel}_updated_at"): ensure_app_naive_datetime(at),
            getattr(NotificationModel, f"{channel}_error"): (
                error[:_ERROR_MAX_LENGTH] if error else None
            ),
        }
        with self._session_factory() as session:
            session.query(NotificationModel).filter(
                NotificationModel.id == notification_id
            ).update(values, synchronize_session=False)
            session.commit()

    def set_status(self, notification_id: str, status: str) -> None:
        with self._session_factory() as session:
            session.query(NotificationModel).filter(
                NotificationModel.id == notification_id
            ).update({NotificationModel.status: status}, synchronize_session=False)
            session.commit()

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.user_id = notification.user_id
        model.title = notification.title
        model.message = notification.message
        model.type = notification.type
        model.priority = notification.priority
        model.status = notification.status
        model.data = notification.data or {}
        model.action_url = notification.action_url
        model.action_label = notification.action_label
        model.category = notification.category
        model.deliver_at = ensure_app_naive_datetime(notification.deliver_at)
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)
        model.read_at = ensure_app_naive_datetime(notification.read_at)
        for channel in CHANNELS:
            delivery = notification.channels.get(channel) or ChannelDelivery(enabled=False)
            setattr(model, f"{channel}_enabled", delivery.enabled)
            setattr(model, f"{channel}_status", delivery.status)
            setattr(
                model,
                f"{channel}_updated_at",
                ensure_app_naive_datetime(delivery.updated_at),
            )
            setattr(model, f"{channel}_error", delivery.error)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        channels = {
            channel: ChannelDelivery(
                enabled=bool(getattr(model, f"{channel}_enabled")),
                status=getattr(model, f"{channel}_status"),
                updated_at=ensure_app_timezone(getattr(model, f"{channel}_updated_at")),
                error=getattr(model, f"{channel}_error"),
            )
            for channel in CHANNELS
        }
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=model.type,
            priority=model.priority,
            channels=channels,
            status=model.status,
            data=model.data or {},
            action_url=model.action_url,
            action_label=model.action_label,
            category=model.category,
            deliver_at=ensure_app_timezone(model.deliver_at),
            expires_at=ensure_app_timezone(model.expires_at),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
        )


def _not_expired():
    return or_(
        NotificationModel.expires_at.is_(None),
        NotificationModel.expires_at > ensure_app_naive_datetime(now_in_app_timezone()),
    )


__all__ = ["NotificationRepository"]
