"""Endpoints for reading and updating notification preferences."""

from fastapi import APIRouter, Depends, HTTPException, status

from notifyhub.application.use_cases.notifications import update_preferences
from notifyhub.domain.entities import NotificationPreferences, Recipient
from notifyhub.domain.exceptions import NotificationValidationError
from notifyhub.infrastructure.repositories import NotificationPreferencesRepository
from notifyhub.interfaces.api.dependencies import (
    get_current_user,
    get_preferences_repository,
    get_request_id,
)
from notifyhub.interfaces.api.schemas import (
    CategoryPreferences,
    PreferencesRead,
    PreferencesResponse,
    PreferencesUpdate,
)

router = APIRouter(prefix="/notifications/preferences", tags=["notifications"])


def _to_schema(preferences: NotificationPreferences) -> PreferencesRead:
    return PreferencesRead(
        email_enabled=preferences.email_enabled,
        push_enabled=preferences.push_enabled,
        in_app_enabled=preferences.in_app_enabled,
        categories=CategoryPreferences(**preferences.categories()),
        quiet_hours_enabled=preferences.quiet_hours_enabled,
        quiet_hours_start=preferences.quiet_hours_start,
        quiet_hours_end=preferences.quiet_hours_end,
        quiet_hours_timezone=preferences.quiet_hours_timezone,
        updated_at=preferences.updated_at,
    )


@router.get("", response_model=PreferencesResponse)
def get_preferences(
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationPreferencesRepository = Depends(get_preferences_repository),
    request_id: str = Depends(get_request_id),
) -> PreferencesResponse:
    """Return the caller's preferences, falling back to the defaults."""

    return PreferencesResponse(
        preferences=_to_schema(repository.get(current_user.id)), request_id=request_id
    )


@router.patch("", response_model=PreferencesResponse)
@router.put("", response_model=PreferencesResponse)
def patch_preferences(
    payload: PreferencesUpdate,
    current_user: Recipient = Depends(get_current_user),
    repository: NotificationPreferencesRepository = Depends(get_preferences_repository),
    request_id: str = Depends(get_request_id),
) -> PreferencesResponse:
    """Update the given preferences; ``PUT`` is accepted as an alias."""

    if not payload.model_fields_set:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No preference fields provided",
        )
    categories = (
        payload.categories.model_dump(exclude_none=True) if payload.categories else None
    )
    try:
        preferences = update_preferences(
            repository,
            user_id=current_user.id,
            email_enabled=payload.email_enabled,
            push_enabled=payload.push_enabled,
            in_app_enabled=payload.in_app_enabled,
            categories=categories,
            quiet_hours_enabled=payload.quiet_hours_enabled,
            quiet_hours_start=payload.quiet_hours_start,
            quiet_hours_end=payload.quiet_hours_end,
            quiet_hours_timezone=payload.quiet_hours_timezone,
        )
    except NotificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PreferencesResponse(preferences=_to_schema(preferences), request_id=request_id)
