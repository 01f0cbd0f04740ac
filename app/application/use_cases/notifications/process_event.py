"""Drive one notification event through its status lifecycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import (
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_FAILED,
    PROCESSED_STATUS_SKIPPED,
    DispatchResult,
    Notification,
    NotificationEvent,
    ProcessedEvent,
    Recipient,
)
from app.domain.exceptions import NotificationEventNotFoundError
from app.infrastructure.repositories import (
    NotificationEventRepository,
    ProfileRepository,
)

from .content import build_content
from .pipeline import NotificationPipeline
from .recipients import resolve_recipients

logger = logging.getLogger(__name__)

RETRY_LIMIT_REACHED = "Retry limit reached"
ALREADY_CLAIMED = "Event is already being processed"


def get_notification_event(
    pipeline: NotificationPipeline, event_id: str
) -> NotificationEvent:
    """Return the stored event or raise :class:`NotificationEventNotFoundError`."""

    with pipeline.session_factory() as session:
        event = NotificationEventRepository(session).get(event_id)
    if event is None:
        raise NotificationEventNotFoundError(event_id)
    return event


def _outcome(
    event: NotificationEvent, status: str, error: str | None = None
) -> ProcessedEvent:
    return ProcessedEvent(
        id=event.id or "",
        event_type=event.event_type,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        status=status,
        error=error,
    )


def _unknown_outcome(event_id: str, error: str) -> ProcessedEvent:
    return ProcessedEvent(
        id=event_id,
        event_type="unknown",
        entity_type="unknown",
        entity_id="",
        status=EVENT_STATUS_FAILED,
        error=error,
    )


def _claim(
    pipeline: NotificationPipeline, event_id: str
) -> tuple[NotificationEvent, bool, list[Recipient]]:
    """Load ``event_id``, try to claim it and resolve its recipients.

    Recipients are only resolved when the claim succeeded.
    """

    max_retries = pipeline.settings.notification_max_retries
    with pipeline.session_factory() as session:
        repository = NotificationEventRepository(session)
        event = repository.get(event_id)
        if event is None:
            raise NotificationEventNotFoundError(event_id)
        if event.is_completed() or event.is_dead_lettered(max_retries):
            return event, False, []
        if not repository.claim(event_id, max_retries=max_retries):
            return event, False, []
        recipients = resolve_recipients(
            event.resolution_payload(), directory=ProfileRepository(session)
        )
    return event, True, recipients


def _mark_completed(pipeline: NotificationPipeline, event_id: str) -> None:
    with pipeline.session_factory() as session:
        if not NotificationEventRepository(session).mark_completed(event_id):
            logger.warning("Event %s left processing before completion", event_id)


def _mark_failed(pipeline: NotificationPipeline, event_id: str, error: str) -> None:
    with pipeline.session_factory() as session:
        NotificationEventRepository(session).mark_failed(event_id, error)


def _build_notifications(
    pipeline: NotificationPipeline,
    payload: dict[str, Any],
    recipients: list[Recipient],
) -> list[Notification]:
    settings = pipeline.settings
    metadata = {
        "eventType": payload.get("eventType"),
        "entityType": payload.get("entityType"),
        "entityId": payload.get("entityId"),
    }
    notifications: list[Notification] = []
    for recipient in recipients:
        content = build_content(
            payload,
            recipient.user_id,
            occupancy_threshold=settings.notification_occupancy_threshold,
        )
        if content is None:
            continue
        notifications.append(
            Notification(
                user_id=recipient.user_id,
                channels=list(settings.notification_channels),
                title=content.title,
                message=content.message,
                type=content.type,
                metadata=dict(metadata),
            )
        )
    return notifications


async def _dispatch_all(
    pipeline: NotificationPipeline, notifications: list[Notification]
) -> list[DispatchResult]:
    return list(
        await asyncio.gather(
            *(pipeline.dispatcher.dispatch(notification) for notification in notifications)
        )
    )


async def process_notification_event(
    pipeline: NotificationPipeline, event_id: str
) -> ProcessedEvent:
    """Process the event ``event_id`` and report its outcome.

    A completed event is returned untouched so redelivery never notifies
    twice. Store access runs in worker threads so the event loop keeps
    serving other events meanwhile. The event fails as a whole, with its retry
    count bumped, as soon as one recipient could not be reached. This coroutine
    never raises.
    """

    try:
        event, claimed, recipients = await to_thread.run_sync(_claim, pipeline, event_id)
        if event.is_completed():
            return _outcome(event, EVENT_STATUS_COMPLETED)
        if event.is_dead_lettered(pipeline.settings.notification_max_retries):
            logger.info("Event %s exhausted its retries", event_id)
            return _outcome(event, EVENT_STATUS_FAILED, RETRY_LIMIT_REACHED)
        if not claimed:
            logger.info("Event %s is claimed by another worker; skipping", event_id)
            return _outcome(event, PROCESSED_STATUS_SKIPPED, ALREADY_CLAIMED)

        if not recipients:
            logger.info("Event %s (%s) has no recipients", event_id, event.event_type)
            await to_thread.run_sync(_mark_completed, pipeline, event_id)
            return _outcome(event, EVENT_STATUS_COMPLETED)

        notifications = _build_notifications(
            pipeline, event.resolution_payload(), recipients
        )
        dispatches = await _dispatch_all(pipeline, notifications)

        failures = [dispatch for dispatch in dispatches if not dispatch.success]
        if failures:
            error_message = "; ".join(dispatch.error or "" for dispatch in failures)
            logger.warning(
                "Event %s failed for %d of %d recipients: %s",
                event_id,
                len(failures),
                len(dispatches),
                error_message,
            )
            await to_thread.run_sync(_mark_failed, pipeline, event_id, error_message)
            return _outcome(event, EVENT_STATUS_FAILED, error_message)

        await to_thread.run_sync(_mark_completed, pipeline, event_id)
        logger.info(
            "Event %s (%s) notified %d recipients",
            event_id,
            event.event_type,
            len(dispatches),
        )
        return _outcome(event, EVENT_STATUS_COMPLETED)
    except NotificationEventNotFoundError as exc:
        logger.warning("%s", exc)
        return _unknown_outcome(event_id, str(exc))
    except Exception as exc:
        logger.exception("Unexpected error while processing event %s", event_id)
        error_message = str(exc) or exc.__class__.__name__
        try:
            await to_thread.run_sync(_mark_failed, pipeline, event_id, error_message)
        except SQLAlchemyError:
            logger.exception("Could not record the failure of event %s", event_id)
        return _unknown_outcome(event_id, error_message)


__all__ = [
    "ALREADY_CLAIMED",
    "RETRY_LIMIT_REACHED",
    "get_notification_event",
    "process_notification_event",
]
