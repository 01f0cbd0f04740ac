"""SQLAlchemy model for user profiles."""

from sqlalchemy import Boolean, Column, String

from app.infrastructure.database import Base


class ProfileModel(Base):
    """Database representation of a platform user and its contact data."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), nullable=True, index=True)
    role = Column(String(50), nullable=True)
    name = Column(String(120), nullable=False)
    email = Column(String(120), nullable=True, index=True)
    phone_number = Column(String(32), nullable=True)
    push_token = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


__all__ = ["ProfileModel"]
