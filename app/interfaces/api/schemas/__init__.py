from .notification_event import (
    NotificationEventRead,
    ProcessBatchResponse,
    ProcessedEventRead,
)

__all__ = [
    "NotificationEventRead",
    "ProcessBatchResponse",
    "ProcessedEventRead",
]
