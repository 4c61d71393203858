"""FastAPI dependency utilities."""

import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notifyhub.application.use_cases.notifications import NotificationService
from notifyhub.bootstrap import AppServices
from notifyhub.domain.entities import Recipient
from notifyhub.infrastructure.notifications import NotificationPublisher
from notifyhub.infrastructure.repositories import (
    NotificationPreferencesRepository,
    NotificationRepository,
    PushSubscriptionRepository,
    RecipientRepository,
)
from notifyhub.infrastructure.security import recipient_from_token


bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def resolve_recipient(token: str, services: AppServices) -> Recipient:
    """Return the caller identified by ``token`` and refresh the directory entry."""

    try:
        recipient = recipient_from_token(token)
    except ValueError as exc:
        raise _unauthorized("Invalid or expired token") from exc

    if recipient.email:
        services.recipients.sync(recipient)
    return recipient


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    services: AppServices = Depends(get_services),
) -> Recipient:
    """Return the authenticated caller from the bearer token."""

    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized")
    return resolve_recipient(credentials.credentials, services)


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = uuid.uuid4().hex
        request.state.request_id = request_id
    return request_id


def get_notification_service(services: AppServices = Depends(get_services)) -> NotificationService:
    return services.service


def get_notification_repository(
    services: AppServices = Depends(get_services),
) -> NotificationRepository:
    return services.notifications


def get_preferences_repository(
    services: AppServices = Depends(get_services),
) -> NotificationPreferencesRepository:
    return services.preferences


def get_recipient_repository(
    services: AppServices = Depends(get_services),
) -> RecipientRepository:
    return services.recipients


def get_push_subscription_repository(
    services: AppServices = Depends(get_services),
) -> PushSubscriptionRepository:
    return services.push_subscriptions


def get_publisher(services: AppServices = Depends(get_services)) -> NotificationPublisher:
    return services.publisher


__all__ = [
    "bearer_scheme",
    "get_current_user",
    "get_notification_repository",
    "get_notification_service",
    "get_preferences_repository",
    "get_publisher",
    "get_push_subscription_repository",
    "get_recipient_repository",
    "get_request_id",
    "get_services",
    "resolve_recipient",
]
