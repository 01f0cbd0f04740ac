"""Process a batch of eligible notification events."""

from __future__ import annotations

import asyncio
import logging

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import ProcessedEvent
from app.infrastructure.repositories import NotificationEventRepository

from .pipeline import NotificationPipeline
from .process_event import process_notification_event

logger = logging.getLogger(__name__)


def _eligible_event_ids(pipeline: NotificationPipeline, batch_size: int) -> list[str]:
    settings = pipeline.settings
    with pipeline.session_factory() as session:
        return NotificationEventRepository(session).list_eligible_ids(
            batch_size,
            max_retries=settings.notification_max_retries,
            include_failed=settings.notification_retry_failed_events,
        )


async def process_pending_events(
    pipeline: NotificationPipeline, batch_size: int | None = None
) -> list[ProcessedEvent]:
    """Process up to ``batch_size`` eligible events, oldest first.

    Events run concurrently, at most ``notification_max_concurrent_events`` at
    a time. Results keep the selection order. Failing to read the store yields
    an empty list.
    """

    settings = pipeline.settings
    limit = batch_size if batch_size is not None else settings.notification_batch_size
    if limit <= 0:
        return []

    try:
        event_ids = await to_thread.run_sync(_eligible_event_ids, pipeline, limit)
    except SQLAlchemyError:
        logger.exception("Could not load pending notification events")
        return []

    if not event_ids:
        return []

    logger.info("Processing %d notification events", len(event_ids))
    semaphore = asyncio.Semaphore(settings.notification_max_concurrent_events)

    async def _process(event_id: str) -> ProcessedEvent:
        async with semaphore:
            return await process_notification_event(pipeline, event_id)

    return list(await asyncio.gather(*(_process(event_id) for event_id in event_ids)))


def _dead_lettered(pipeline: NotificationPipeline) -> int:
    with pipeline.session_factory() as session:
        return NotificationEventRepository(session).count_dead_lettered(
            max_retries=pipeline.settings.notification_max_retries
        )


async def count_dead_lettered_events(pipeline: NotificationPipeline) -> int | None:
    """Return how many events will never be retried, or ``None`` on store errors."""

    try:
        return await to_thread.run_sync(_dead_lettered, pipeline)
    except SQLAlchemyError:
        logger.exception("Could not count dead-lettered notification events")
        return None


__all__ = ["count_dead_lettered_events", "process_pending_events"]
