"""Domain entities exposed by the application."""

from .delivery import (
    BulkEntry,
    ChannelResult,
    DeliveryResult,
    DispatchResult,
    OutboundMessage,
)
from .notification import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    CHANNEL_SMS,
    CHANNELS,
    NOTIFICATION_TYPE_BOOKING,
    NOTIFICATION_TYPE_INCIDENT,
    NOTIFICATION_TYPE_INVOICE,
    NOTIFICATION_TYPE_SYSTEM,
    NOTIFICATION_TYPE_TASK,
    Notification,
    NotificationContent,
    NotificationRecord,
    Recipient,
)
from .notification_event import (
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_FAILED,
    EVENT_STATUS_PENDING,
    EVENT_STATUS_PROCESSING,
    EVENT_STATUSES,
    PROCESSED_STATUS_SKIPPED,
    NotificationEvent,
    ProcessedEvent,
)
from .profile import (
    COMPANY_ADMIN_ROLES,
    PROFILE_ROLE_ADMIN,
    PROFILE_ROLE_OWNER,
    Contact,
    NotificationPreference,
    Profile,
)

__all__ = [
    "BulkEntry",
    "ChannelResult",
    "DeliveryResult",
    "DispatchResult",
    "OutboundMessage",
    "CHANNEL_EMAIL",
    "CHANNEL_PUSH",
    "CHANNEL_SMS",
    "CHANNELS",
    "NOTIFICATION_TYPE_BOOKING",
    "NOTIFICATION_TYPE_INCIDENT",
    "NOTIFICATION_TYPE_INVOICE",
    "NOTIFICATION_TYPE_SYSTEM",
    "NOTIFICATION_TYPE_TASK",
    "Notification",
    "NotificationContent",
    "NotificationRecord",
    "Recipient",
    "EVENT_STATUS_COMPLETED",
    "EVENT_STATUS_FAILED",
    "EVENT_STATUS_PENDING",
    "EVENT_STATUS_PROCESSING",
    "EVENT_STATUSES",
    "PROCESSED_STATUS_SKIPPED",
    "NotificationEvent",
    "ProcessedEvent",
    "COMPANY_ADMIN_ROLES",
    "PROFILE_ROLE_ADMIN",
    "PROFILE_ROLE_OWNER",
    "Contact",
    "NotificationPreference",
    "Profile",
]
