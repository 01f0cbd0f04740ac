"""Endpoints triggering and inspecting notification event processing."""

from __future__ import annotations

from anyio import to_thread
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.application.use_cases.notifications import (
    NotificationPipeline,
    count_dead_lettered_events,
    get_notification_event,
    process_notification_event,
    process_pending_events,
)
from app.domain.entities import (
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_FAILED,
    PROCESSED_STATUS_SKIPPED,
    NotificationEvent,
    ProcessedEvent,
)
from app.domain.exceptions import NotificationEventNotFoundError
from app.interfaces.api.dependencies import get_pipeline, verify_cron_secret
from app.interfaces.api.schemas import (
    NotificationEventRead,
    ProcessBatchResponse,
    ProcessedEventRead,
)

router = APIRouter(
    prefix="/notification-events",
    tags=["notification-events"],
    dependencies=[Depends(verify_cron_secret)],
)


def _processed_to_schema(result: ProcessedEvent) -> ProcessedEventRead:
    return ProcessedEventRead(
        id=result.id,
        event_type=result.event_type,
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        status=result.status,
        error=result.error,
    )


def _event_to_schema(event: NotificationEvent) -> NotificationEventRead:
    return NotificationEventRead(
        id=event.id or "",
        event_type=event.event_type,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        payload=event.payload or {},
        status=event.status,
        retry_count=event.retry_count,
        error_message=event.error_message,
        created_at=event.created_at,
        processed_at=event.processed_at,
        updated_at=event.updated_at,
    )


def _load_event(pipeline: NotificationPipeline, event_id: str) -> NotificationEvent:
    try:
        return get_notification_event(pipeline, event_id)
    except NotificationEventNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.post("/process", response_model=ProcessBatchResponse)
async def process_batch(
    batch_size: int | None = Query(default=None, ge=1, le=500),
    pipeline: NotificationPipeline = Depends(get_pipeline),
) -> ProcessBatchResponse:
    """Run one scheduler batch over the eligible events."""

    results = await process_pending_events(pipeline, batch_size)
    return ProcessBatchResponse(
        processed=len(results),
        completed=sum(1 for result in results if result.status == EVENT_STATUS_COMPLETED),
        failed=sum(1 for result in results if result.status == EVENT_STATUS_FAILED),
        skipped=sum(1 for result in results if result.status == PROCESSED_STATUS_SKIPPED),
        dead_lettered=await count_dead_lettered_events(pipeline),
        results=[_processed_to_schema(result) for result in results],
    )


@router.post("/{event_id}/process", response_model=ProcessedEventRead)
async def process_event(
    event_id: str,
    pipeline: NotificationPipeline = Depends(get_pipeline),
) -> ProcessedEventRead:
    """Process a single event immediately."""

    await to_thread.run_sync(_load_event, pipeline, event_id)
    result = await process_notification_event(pipeline, event_id)
    return _processed_to_schema(result)


@router.get("/{event_id}", response_model=NotificationEventRead)
def read_event(
    event_id: str,
    pipeline: NotificationPipeline = Depends(get_pipeline),
) -> NotificationEventRead:
    """Return the stored state of ``event_id``."""

    return _event_to_schema(_load_event(pipeline, event_id))
