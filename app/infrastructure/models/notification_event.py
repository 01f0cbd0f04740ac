"""SQLAlchemy model for queued notification events."""

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationEventModel(Base):
    """Database representation of a domain event awaiting notification."""

    __tablename__ = "notification_events"
    __table_args__ = (
        Index("ix_notification_events_status_created", "status", "created_at"),
    )

    id = Column(String(36), primary_key=True)
    event_type = Column(String(80), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default="pending")
    retry_count = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    processed_at = Column(DateTime(), nullable=True)
    updated_at = Column(
        DateTime(),
        nullable=True,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["NotificationEventModel"]
