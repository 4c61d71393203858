"""SQLAlchemy models for recipients and their push devices."""

from sqlalchemy import Column, DateTime, Integer, String

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_in_app_naive_datetime


class RecipientModel(Base):
    """Directory of known recipients, refreshed from token claims."""

    __tablename__ = "recipient"

    id = Column(String(64), primary_key=True)
    email = Column(String(320), nullable=True)
    name = Column(String(200), nullable=True)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


class PushSubscriptionModel(Base):
    """Device token registered for push delivery."""

    __tablename__ = "push_subscription"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    token = Column(String(512), nullable=False, unique=True)
    platform = Column(String(20), nullable=False, default="web")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["RecipientModel", "PushSubscriptionModel"]
