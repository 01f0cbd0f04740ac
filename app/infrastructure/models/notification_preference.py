"""SQLAlchemy model for per-user notification preferences."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class NotificationPreferenceModel(Base):
    """Channel switches chosen by a user."""

    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String(36), ForeignKey("profiles.id"), nullable=False, unique=True, index=True
    )
    email_enabled = Column(Boolean, nullable=False, default=True)
    sms_enabled = Column(Boolean, nullable=False, default=False)
    push_enabled = Column(Boolean, nullable=False, default=True)
    type_preferences = Column(JSON, nullable=True)
    email_address = Column(String(120), nullable=True)
    phone_number = Column(String(32), nullable=True)

    user = relationship("ProfileModel", lazy="joined")


__all__ = ["NotificationPreferenceModel"]
