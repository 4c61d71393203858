"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from notifyhub.application.use_cases.notifications import (
    ChannelSelection,
    NotificationService,
    NotifyCommand,
)
from notifyhub.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_PUSH,
    NOTIFICATION_STATUSES,
    NOTIFICATION_TYPES,
    ChannelDelivery,
    Notification,
    Recipient,
)
from notifyhub.domain.exceptions import NotificationValidationError
from notifyhub.infrastructure.notifications import (
    EVENT_BULK_READ,
    EVENT_DELETED,
    EVENT_READ,
    NotificationPublisher,
    serialize_notification,
)
from notifyhub.infrastructure.repositories import NotificationRepository
from notifyhub.interfaces.api.dependencies import (
    get_current_user,
    get_notification_repository,
    get_notification_service,
    get_publisher,
    get_request_id,
    resolve_recipient,
)
from notifyhub.interfaces.api.schemas import (
    ChannelFlags,
    ChannelStatusRead,
    DeliveryStatusRead,
    DeliveryStatusResponse,
    MarkReadResponse,
    NotificationBulkReadRequest,
    NotificationCreate,
    NotificationDeletedResponse,
    NotificationListResponse,
    NotificationRead,
    NotificationResponse,
    NotificationSchedule,
    Pagination,
    ScheduledNotificationResponse,
    UnreadCountResponse,
    UpdatedCountResponse,
)
from notifyhub.utils import isoformat_or_none, now_in_app_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

NOT_FOUND_MESSAGE = "Notification not found"
FORBIDDEN_MESSAGE = "You do not have access to this notification"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        priority=notification.priority,
        status=notification.status,
        channels=ChannelFlags(
            email=notification.channels[CHANNEL_EMAIL].enabled,
            push=notification.channels[CHANNEL_PUSH].enabled,
            in_app=notification.channels[CHANNEL_IN_APP].enabled,
        ),
        data=notification.data or {},
        action_url=notification.action_url,
        action_label=notification.action_label,
        category=notification.category,
        deliver_at=notification.deliver_at,
        expires_at=notification.expires_at,
        read_at=notification.read_at,
        created_at=notification.created_at,
        is_read=notification.is_read,
    )


def _channel_to_schema(delivery: ChannelDelivery) -> ChannelStatusRead:
    return ChannelStatusRead(
        enabled=delivery.enabled,
        status=delivery.status,
        updated_at=delivery.updated_at,
        error=delivery.error,
    )


def _build_command(payload: NotificationCreate, current_user: Recipient) -> NotifyCommand:
    recipient_id = (payload.recipient_id or "").strip() or current_user.id
    if recipient_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Notifications can only be created for the authenticated user",
        )
    return NotifyCommand(
        recipient_id=recipient_id,
        title=payload.title,
        message=payload.message,
        type=payload.type,
        priority=payload.priority,
        channels=ChannelSelection(
            email=payload.channels.email,
            push=payload.channels.push,
            in_app=payload.channels.in_app,
        ),
        deliver_at=payload.deliver_at,
        data=payload.data,
        action_url=payload.action_url,
        action_label=payload.action_label,
        expires_at=payload.expires_at,
        category=payload.category,
    )


def _notify(
    service: NotificationService, command: NotifyCommand, *, now: datetime | None = None
) -> Notification:
    try:
        return service.notify(command, now=now)
    except NotificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread: bool = Query(False),
    notification_type: str | None = Query(None, alias="type"),
    notification_status: str | None = Query(None, alias="status"),
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    request_id: str = Depends(get_request_id),
) -> NotificationListResponse:
    """Return the caller's notifications, newest first."""

    if notification_type and notification_type not in NOTIFICATION_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown notification type '{notification_type}'",
        )
    if notification_status and notification_status not in NOTIFICATION_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown notification status '{notification_status}'",
        )

    notifications = repository.list_for_user(
        current_user.id,
        limit=limit + 1,
        offset=offset,
        unread_only=unread,
        notification_type=notification_type,
        status=notification_status,
    )
    has_more = len(notifications) > limit
    return NotificationListResponse(
        notifications=[_notification_to_schema(n) for n in notifications[:limit]],
        unread_count=repository.count_unread(current_user.id),
        pagination=Pagination(limit=limit, offset=offset, has_more=has_more),
        request_id=request_id,
    )


@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    current_user: Recipient = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
    request_id: str = Depends(get_request_id),
) -> NotificationResponse:
    """Create a notification and deliver it now or at ``deliverAt``."""

    notification = _notify(service, _build_command(payload, current_user))
    return NotificationResponse(
        notification=_notification_to_schema(notification), request_id=request_id
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    request_id: str = Depends(get_request_id),
) -> UnreadCountResponse:
    return UnreadCountResponse(
        count=repository.count_unread(current_user.id), request_id=request_id
    )


@router.put("/bulk/read", response_model=UpdatedCountResponse)
def bulk_mark_as_read(
    payload: NotificationBulkReadRequest,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    publisher: NotificationPublisher = Depends(get_publisher),
    request_id: str = Depends(get_request_id),
) -> UpdatedCountResponse:
    """Mark the caller's notifications in ``ids`` as read; others are skipped."""

    ids = payload.unique_ids()
    if not ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ids must contain at least one notification id",
        )
    updated = repository.bulk_mark_as_read(ids, current_user.id)
    if updated:
        publisher.publish(
            current_user.id, event_type=EVENT_BULK_READ, payload={"ids": ids, "updated": updated}
        )
    return UpdatedCountResponse(updated=updated, request_id=request_id)


@router.put("/read-all", response_model=UpdatedCountResponse)
def mark_all_as_read(
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    publisher: NotificationPublisher = Depends(get_publisher),
    request_id: str = Depends(get_request_id),
) -> UpdatedCountResponse:
    updated = repository.mark_all_as_read(current_user.id)
    if updated:
        publisher.publish(
            current_user.id, event_type=EVENT_BULK_READ, payload={"all": True, "updated": updated}
        )
    return UpdatedCountResponse(updated=updated, request_id=request_id)


@router.post(
    "/schedule",
    response_model=ScheduledNotificationResponse,
    status_code=status.HTTP_201_CREATED,
)
def schedule_notification(
    payload: NotificationSchedule,
    current_user: Recipient = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
    request_id: str = Depends(get_request_id),
) -> ScheduledNotificationResponse:
    """Store a notification that will be dispatched at ``deliverAt``."""

    deliver_at = payload.deliver_at
    if deliver_at.tzinfo is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="deliverAt must include a timezone offset",
        )
    now = now_in_app_timezone()
    if deliver_at <= now:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="deliverAt must be in the future",
        )

    notification = _notify(service, _build_command(payload, current_user), now=now)
    return ScheduledNotificationResponse(
        id=notification.id or "",
        deliver_at=notification.deliver_at or deliver_at,
        status=notification.status,
        request_id=request_id,
    )


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    services = websocket.app.state.services
    try:
        user = resolve_recipient(token, services)
    except HTTPException:
        await websocket.close(code=1008)
        return

    repository: NotificationRepository = services.notifications
    pending = repository.list_for_user(user.id, unread_only=True)

    await services.connections.connect(user.id, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    valid_ids = [nid for nid in ids if isinstance(nid, str)]
                    updated = repository.bulk_mark_as_read(valid_ids, user.id)
                    await websocket.send_json({"type": "ack", "data": {"updated": updated}})
                continue
    except WebSocketDisconnect:
        services.connections.disconnect(user.id, websocket)
    except Exception:
        services.connections.disconnect(user.id, websocket)
        raise


@router.get("/{notification_id}", response_model=NotificationResponse)
def get_notification(
    notification_id: str,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    request_id: str = Depends(get_request_id),
) -> NotificationResponse:
    notification = repository.get_for_user(notification_id, current_user.id)
    if notification is None:
        raise _not_found()
    return NotificationResponse(
        notification=_notification_to_schema(notification), request_id=request_id
    )


@router.get("/{notification_id}/delivery-status", response_model=DeliveryStatusResponse)
def get_delivery_status(
    notification_id: str,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    request_id: str = Depends(get_request_id),
) -> DeliveryStatusResponse:
    """Return the per-channel delivery state of one of the caller's notifications."""

    notification = repository.get_for_user(notification_id, current_user.id)
    if notification is None:
        raise _not_found()
    return DeliveryStatusResponse(
        notification_id=notification.id or notification_id,
        status=notification.status,
        delivery_status=DeliveryStatusRead(
            email=_channel_to_schema(notification.channels[CHANNEL_EMAIL]),
            push=_channel_to_schema(notification.channels[CHANNEL_PUSH]),
            in_app=_channel_to_schema(notification.channels[CHANNEL_IN_APP]),
        ),
        read_at=notification.read_at,
        request_id=request_id,
    )


@router.put("/{notification_id}/read", response_model=MarkReadResponse)
def mark_as_read(
    notification_id: str,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    publisher: NotificationPublisher = Depends(get_publisher),
    request_id: str = Depends(get_request_id),
) -> MarkReadResponse:
    """Mark one notification as read; repeating the call keeps the first ``readAt``."""

    notification_id = notification_id.strip()
    if not notification_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Notification id is required"
        )

    existing = repository.get(notification_id)
    if existing is None:
        raise _not_found()
    if existing.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_MESSAGE)

    if not repository.mark_as_read(notification_id, current_user.id):
        raise _not_found()

    updated = repository.get_for_user(notification_id, current_user.id)
    if updated is None:
        raise _not_found()
    if not existing.is_read:
        publisher.publish(
            current_user.id,
            event_type=EVENT_READ,
            payload={"id": updated.id, "readAt": isoformat_or_none(updated.read_at)},
        )
    return MarkReadResponse(
        notification_id=updated.id or notification_id,
        read_at=updated.read_at,
        request_id=request_id,
    )


@router.delete("/{notification_id}", response_model=NotificationDeletedResponse)
def delete_notification(
    notification_id: str,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationRepository = Depends(get_notification_repository),
    publisher: NotificationPublisher = Depends(get_publisher),
    request_id: str = Depends(get_request_id),
) -> NotificationDeletedResponse:
    if not repository.delete(notification_id, current_user.id):
        raise _not_found()
    publisher.publish(
        current_user.id, event_type=EVENT_DELETED, payload={"id": notification_id}
    )
    return NotificationDeletedResponse(notification_id=notification_id, request_id=request_id)


__all__ = ["router"]
