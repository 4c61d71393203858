"""Endpoints for registering device tokens used by the push channel."""

from fastapi import APIRouter, Depends, HTTPException, status

from notifyhub.domain.entities import PushSubscription, Recipient
from notifyhub.infrastructure.repositories import PushSubscriptionRepository
from notifyhub.interfaces.api.dependencies import (
    get_current_user,
    get_push_subscription_repository,
    get_request_id,
)
from notifyhub.interfaces.api.schemas import (
    PushSubscriptionCreate,
    PushSubscriptionDeletedResponse,
    PushSubscriptionRead,
    PushSubscriptionResponse,
)

router = APIRouter(prefix="/notifications/push-subscriptions", tags=["notifications"])


@router.post("", response_model=PushSubscriptionResponse, status_code=status.HTTP_201_CREATED)
def register_push_subscription(
    payload: PushSubscriptionCreate,
    current_user: Recipient = Depends(get_current_user),
    repository: PushSubscriptionRepository = Depends(get_push_subscription_repository),
    request_id: str = Depends(get_request_id),
) -> PushSubscriptionResponse:
    subscription = repository.register(
        PushSubscription(
            id=None,
            user_id=current_user.id,
            token=payload.token,
            platform=payload.platform,
        )
    )
    return PushSubscriptionResponse(
        subscription=PushSubscriptionRead(
            id=subscription.id,
            token=subscription.token,
            platform=subscription.platform,
            created_at=subscription.created_at,
        ),
        request_id=request_id,
    )


@router.delete("/{token}", response_model=PushSubscriptionDeletedResponse)
def remove_push_subscription(
    token: str,
    current_user: Recipient = Depends(get_current_user),
    repository: PushSubscriptionRepository = Depends(get_push_subscription_repository),
    request_id: str = Depends(get_request_id),
) -> PushSubscriptionDeletedResponse:
    if not repository.remove(token, user_id=current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Push subscription not found"
        )
    return PushSubscriptionDeletedResponse(token=token, request_id=request_id)
