"""Domain level exceptions raised by the notification use cases."""

from __future__ import annotations


class NotificationEventNotFoundError(LookupError):
    """Raised when a notification event id does not exist in the store."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


__all__ = ["NotificationEventNotFoundError"]
