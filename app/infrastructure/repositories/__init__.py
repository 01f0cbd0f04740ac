"""Repository implementations for infrastructure layer."""

from .notification_event_repository import NotificationEventRepository
from .notification_preference_repository import NotificationPreferenceRepository
from .notification_repository import NotificationRepository
from .profile_repository import ProfileRepository

__all__ = [
    "NotificationEventRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "ProfileRepository",
]
