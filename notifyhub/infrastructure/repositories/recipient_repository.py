"""Persistence layer for recipients and their push subscriptions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from sqlalchemy.orm import Session

from notifyhub.domain.entities import PushSubscription, Recipient
from notifyhub.infrastructure.database import update_or_insert
from notifyhub.infrastructure.models import PushSubscriptionModel, RecipientModel
from notifyhub.utils import ensure_app_timezone

logger = logging.getLogger(__name__)


class RecipientRepository:
    """Keep the recipient directory used to address emails."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, recipient_id: str) -> Recipient | None:
        with self._session_factory() as session:
            model = session.get(RecipientModel, recipient_id)
            return self._to_entity(model) if model else None

    def sync(self, recipient: Recipient) -> Recipient:
        """Insert ``recipient`` or refresh its contact details when they changed."""

        with self._session_factory() as session:
            model = session.get(RecipientModel, recipient.id)
            if model is not None and model.email == recipient.email and model.name == recipient.name:
                return self._to_entity(model)
            update_or_insert(
                session,
                RecipientModel,
                [RecipientModel.id == recipient.id],
                {"email": recipient.email, "name": recipient.name},
                identity={"id": recipient.id},
            )
        return Recipient(id=recipient.id, email=recipient.email, name=recipient.name)

    @staticmethod
    def _to_entity(model: RecipientModel) -> Recipient:
        return Recipient(id=model.id, email=model.email, name=model.name)


class PushSubscriptionRepository:
    """Provide CRUD operations for :class:`PushSubscription` objects."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        with self._session_factory() as session:
            query = (
                session.query(PushSubscriptionModel)
                .filter(PushSubscriptionModel.user_id == user_id)
                .order_by(PushSubscriptionModel.id.asc())
            )
            return [self._to_entity(model) for model in query.all()]

    def register(self, subscription: PushSubscription) -> PushSubscription:
        """Store ``subscription`` for its user.

        A device token belongs to whoever registered it last: registering a
        token already held by another user moves it to the new user, so a
        device that changes accounts stops receiving the old account's pushes.
        """

        with self._session_factory() as session:
            previous_owner = (
                session.query(PushSubscriptionModel.user_id)
                .filter(PushSubscriptionModel.token == subscription.token)
                .scalar()
            )
            update_or_insert(
                session,
                PushSubscriptionModel,
                [PushSubscriptionModel.token == subscription.token],
                {"user_id": subscription.user_id, "platform": subscription.platform},
                identity={"token": subscription.token},
            )
            if previous_owner is not None and previous_owner != subscription.user_id:
                logger.info(
                    "Push token moved from user %s to user %s",
                    previous_owner,
                    subscription.user_id,
                )
            model = (
                session.query(PushSubscriptionModel)
                .filter(PushSubscriptionModel.token == subscription.token)
                .one()
            )
            return self._to_entity(model)

    def remove(self, token: str, *, user_id: str) -> bool:
        with self._session_factory() as session:
            deleted = (
                session.query(PushSubscriptionModel)
                .filter(
                    PushSubscriptionModel.token == token,
                    PushSubscriptionModel.user_id == user_id,
                )
                .delete(synchronize_session=False)
            )
            session.commit()
            return bool(deleted)

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            token=model.token,
            platform=model.platform,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["RecipientRepository", "PushSubscriptionRepository"]
