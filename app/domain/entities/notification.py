"""Domain entities describing notifications derived from events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CHANNEL_EMAIL = "email"
CHANNEL_PUSH = "push"
CHANNEL_SMS = "sms"

CHANNELS = (CHANNEL_EMAIL, CHANNEL_PUSH, CHANNEL_SMS)

NOTIFICATION_TYPE_BOOKING = "booking"
NOTIFICATION_TYPE_INVOICE = "invoice"
NOTIFICATION_TYPE_TASK = "task"
NOTIFICATION_TYPE_INCIDENT = "incident"
NOTIFICATION_TYPE_SYSTEM = "system"


@dataclass(frozen=True)
class Recipient:
    """User identity that must be notified about an event."""

    user_id: str
    role: str | None = None


@dataclass(frozen=True)
class NotificationContent:
    """Human readable content built for a single recipient."""

    title: str
    message: str
    type: str


@dataclass
class Notification:
    """Per-recipient delivery intent produced from an event."""

    user_id: str
    channels: list[str]
    title: str
    message: str
    type: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class NotificationRecord:
    """In-app copy of a dispatched notification."""

    id: int | None
    user_id: str
    type: str
    channel: str
    title: str
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    sent_at: datetime | None = None
    delivered_at: datetime | None = None
    failed_at: datetime | None = None
    error_message: str | None = None
    read_at: datetime | None = None


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_PUSH",
    "CHANNEL_SMS",
    "CHANNELS",
    "NOTIFICATION_TYPE_BOOKING",
    "NOTIFICATION_TYPE_INVOICE",
    "NOTIFICATION_TYPE_TASK",
    "NOTIFICATION_TYPE_INCIDENT",
    "NOTIFICATION_TYPE_SYSTEM",
    "Notification",
    "NotificationContent",
    "NotificationRecord",
    "Recipient",
]
