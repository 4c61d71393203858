from fastapi import FastAPI

from .notifications import router as notifications_router
from .preferences import router as preferences_router
from .push_subscriptions import router as push_subscriptions_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application.

    The fixed ``/notifications/...`` prefixes must be registered before the
    notifications router so they are not captured by ``/{notification_id}``.
    """

    app.include_router(preferences_router)
    app.include_router(push_subscriptions_router)
    app.include_router(notifications_router)
