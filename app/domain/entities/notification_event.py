"""Domain entity representing a durable notification event."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

EVENT_STATUS_PENDING = "pending"
EVENT_STATUS_PROCESSING = "processing"
EVENT_STATUS_COMPLETED = "completed"
EVENT_STATUS_FAILED = "failed"

EVENT_STATUSES = (
    EVENT_STATUS_PENDING,
    EVENT_STATUS_PROCESSING,
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_FAILED,
)

# Reported when another worker already holds the claim; never stored.
PROCESSED_STATUS_SKIPPED = "skipped"


@dataclass
class NotificationEvent:
    """Record of a domain occurrence that may require notifying users."""

    id: str | None
    event_type: str
    entity_type: str
    entity_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    status: str = EVENT_STATUS_PENDING
    retry_count: int = 0
    error_message: str | None = None
    created_at: datetime | None = None
    processed_at: datetime | None = None
    updated_at: datetime | None = None

    def is_completed(self) -> bool:
        return self.status == EVENT_STATUS_COMPLETED

    def is_dead_lettered(self, max_retries: int) -> bool:
        """Return ``True`` when an unfinished event exhausted its retries.

        The retry count decides, whatever the status: such an event can never
        be claimed again.
        """

        return not self.is_completed() and self.retry_count >= max_retries

    def resolution_payload(self) -> dict[str, Any]:
        """Return the payload enriched with the event envelope fields.

        Producers usually repeat ``eventType``/``entityType``/``entityId``
        inside the payload; the columns fill them in when they do not.
        """

        payload = dict(self.payload or {})
        payload.setdefault("eventType", self.event_type)
        payload.setdefault("entityType", self.entity_type)
        payload.setdefault("entityId", self.entity_id)
        return payload


@dataclass
class ProcessedEvent:
    """Outcome reported for one event handled by the processor."""

    id: str
    event_type: str
    entity_type: str
    entity_id: str
    status: str
    error: str | None = None


__all__ = [
    "EVENT_STATUS_PENDING",
    "EVENT_STATUS_PROCESSING",
    "EVENT_STATUS_COMPLETED",
    "EVENT_STATUS_FAILED",
    "EVENT_STATUSES",
    "PROCESSED_STATUS_SKIPPED",
    "NotificationEvent",
    "ProcessedEvent",
]
