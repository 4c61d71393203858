"""Build the long-lived objects the API and the scheduler share."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from notifyhub.application.use_cases.notifications import (
    DeliveryChannel,
    DeliveryDispatcher,
    NotificationService,
)
from notifyhub.config import Settings
from notifyhub.infrastructure.channels import EmailChannel, InAppChannel, PushChannel
from notifyhub.infrastructure.database import create_database_engine, create_session_factory
from notifyhub.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationPublisher,
)
from notifyhub.infrastructure.push import PushGatewayClient
from notifyhub.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
    PushSubscriptionRepository,
    RecipientRepository,
)


@dataclass
class AppServices:
    """Everything a request handler may need, created once per process."""

    engine: Engine
    session_factory: sessionmaker[Session]
    notifications: NotificationRepository
    preferences: NotificationPreferencesRepository
    recipients: RecipientRepository
    push_subscriptions: PushSubscriptionRepository
    connections: NotificationConnectionManager
    publisher: NotificationPublisher
    dispatcher: DeliveryDispatcher
    service: NotificationService


def build_services(
    settings: Settings,
    *,
    engine: Engine | None = None,
    channels: Iterable[DeliveryChannel] | None = None,
) -> AppServices:
    """Wire repositories, channel senders and the notification service.

    ``channels`` replaces the default email/push/in-app senders, which is how
    tests plug in fakes.
    """

    engine = engine or create_database_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    notifications = NotificationRepository(session_factory)
    preferences = NotificationPreferencesRepository(session_factory)
    recipients = RecipientRepository(session_factory)
    push_subscriptions = PushSubscriptionRepository(session_factory)

    connections = NotificationConnectionManager()
    publisher = NotificationPublisher(connections)

    if channels is None:
        gateway = PushGatewayClient(
            settings.push_gateway_url,
            api_key=settings.push_gateway_api_key,
            timeout=settings.push_gateway_timeout,
        )
        channels = (
            EmailChannel(recipients),
            PushChannel(push_subscriptions, gateway),
            InAppChannel(publisher),
        )

    dispatcher = DeliveryDispatcher(notifications, channels)
    service = NotificationService(notifications, preferences, dispatcher)

    return AppServices(
        engine=engine,
        session_factory=session_factory,
        notifications=notifications,
        preferences=preferences,
        recipients=recipients,
        push_subscriptions=push_subscriptions,
        connections=connections,
        publisher=publisher,
        dispatcher=dispatcher,
        service=service,
    )


__all__ = ["AppServices", "build_services"]
