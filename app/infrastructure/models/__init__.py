"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .notification_event import NotificationEventModel
from .notification_preference import NotificationPreferenceModel
from .profile import ProfileModel

__all__ = [
    "NotificationModel",
    "NotificationEventModel",
    "NotificationPreferenceModel",
    "ProfileModel",
]
