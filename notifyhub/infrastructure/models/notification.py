"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, JSON, String, Text

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for user notifications.

    Each delivery channel owns four columns (``<channel>_enabled``,
    ``<channel>_status``, ``<channel>_updated_at`` and ``<channel>_error``) so a
    single ``UPDATE`` can record one channel's outcome.
    """

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
        Index("ix_notification_status_deliver_at", "status", "deliver_at"),
    )

    id = Column(String(32), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")
    priority = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    action_url = Column(String(500), nullable=True)
    action_label = Column(String(50), nullable=True)
    category = Column(String(20), nullable=True)

    email_enabled = Column(Boolean, nullable=False, default=False)
    email_status = Column(String(20), nullable=False)
    email_updated_at = Column(DateTime(), nullable=True)
    email_error = Column(String(500), nullable=True)

    push_enabled = Column(Boolean, nullable=False, default=False)
    push_status = Column(String(20), nullable=False)
    push_updated_at = Column(DateTime(), nullable=True)
    push_error = Column(String(500), nullable=True)

    in_app_enabled = Column(Boolean, nullable=False, default=False)
    in_app_status = Column(String(20), nullable=False)
    in_app_updated_at = Column(DateTime(), nullable=True)
    in_app_error = Column(String(500), nullable=True)

    deliver_at = Column(DateTime(), nullable=True)
    expires_at = Column(DateTime(), nullable=True)
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
