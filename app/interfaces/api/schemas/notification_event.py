"""Pydantic models describing notification events and processing outcomes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ProcessedEventRead(BaseModel):
    """Outcome of processing one notification event."""

    id: str
    event_type: str
    entity_type: str
    entity_id: str
    status: str
    error: str | None = None


class ProcessBatchResponse(BaseModel):
    """Summary returned after a scheduler run."""

    processed: int = Field(..., description="Number of events handled in the batch")
    completed: int
    failed: int
    skipped: int
    dead_lettered: int | None = Field(
        default=None, description="Events that ran out of retries and will not be picked up again"
    )
    results: list[ProcessedEventRead] = Field(default_factory=list)


class NotificationEventRead(BaseModel):
    """Stored notification event as exposed to operators."""

    id: str
    event_type: str
    entity_type: str
    entity_id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    status: str
    retry_count: int
    error_message: str | None = None
    created_at: datetime | None = None
    processed_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["NotificationEventRead", "ProcessBatchResponse", "ProcessedEventRead"]
