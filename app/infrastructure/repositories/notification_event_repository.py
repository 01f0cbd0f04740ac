"""Persistence helpers for notification events."""

from __future__ import annotations

import uuid

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.domain.entities import (
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_FAILED,
    EVENT_STATUS_PENDING,
    EVENT_STATUS_PROCESSING,
    NotificationEvent,
)
from app.infrastructure.models import NotificationEventModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationEventRepository:
    """Read and transition :class:`NotificationEvent` records.

    Every status change is a conditional ``UPDATE`` so that concurrent
    schedulers never move an event backwards through its lifecycle.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, event: NotificationEvent) -> NotificationEvent:
        """Enqueue ``event`` as a new pending record."""

        model = NotificationEventModel(
            id=event.id or str(uuid.uuid4()),
            event_type=event.event_type,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            payload=event.payload or {},
            status=EVENT_STATUS_PENDING,
            retry_count=0,
            error_message=None,
            created_at=ensure_app_naive_datetime(event.created_at)
            or now_in_app_naive_datetime(),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, event_id: str) -> NotificationEvent | None:
        model = self.session.get(
            NotificationEventModel, event_id, populate_existing=True
        )
        return self._to_entity(model) if model else None

    def claim(self, event_id: str, *, max_retries: int) -> bool:
        """Atomically move an eligible event into ``processing``.

        Returns ``False`` when another worker holds the event or when it is no
        longer eligible (completed or out of retries).
        """

        statement = (
            update(NotificationEventModel)
            .where(NotificationEventModel.id == event_id)
            .where(
                NotificationEventModel.status.in_(
                    (EVENT_STATUS_PENDING, EVENT_STATUS_FAILED)
                )
            )
            .where(NotificationEventModel.retry_count < max_retries)
            .values(status=EVENT_STATUS_PROCESSING, updated_at=now_in_app_naive_datetime())
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def mark_completed(self, event_id: str) -> bool:
        now = now_in_app_naive_datetime()
        statement = (
            update(NotificationEventModel)
            .where(NotificationEventModel.id == event_id)
            .where(NotificationEventModel.status == EVENT_STATUS_PROCESSING)
            .values(
                status=EVENT_STATUS_COMPLETED,
                processed_at=now,
                updated_at=now,
                error_message=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def mark_failed(self, event_id: str, error_message: str) -> bool:
        """Record a failed attempt and bump the retry counter by one."""

        statement = (
            update(NotificationEventModel)
            .where(NotificationEventModel.id == event_id)
            .where(NotificationEventModel.status != EVENT_STATUS_COMPLETED)
            .values(
                status=EVENT_STATUS_FAILED,
                error_message=error_message,
                retry_count=NotificationEventModel.retry_count + 1,
                updated_at=now_in_app_naive_datetime(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount == 1

    def list_eligible_ids(
        self,
        limit: int,
        *,
        max_retries: int,
        include_failed: bool = True,
    ) -> list[str]:
        """Return ids of events that may be claimed, oldest first."""

        statuses = [EVENT_STATUS_PENDING]
        if include_failed:
            statuses.append(EVENT_STATUS_FAILED)
        query = (
            self.session.query(NotificationEventModel.id)
            .filter(NotificationEventModel.status.in_(statuses))
            .filter(NotificationEventModel.retry_count < max_retries)
            .order_by(
                NotificationEventModel.created_at.asc(), NotificationEventModel.id.asc()
            )
            .limit(limit)
        )
        return [event_id for (event_id,) in query.all()]

    def count_dead_lettered(self, *, max_retries: int) -> int:
        """Count unfinished events that ran out of retries."""

        return (
            self.session.query(NotificationEventModel)
            .filter(NotificationEventModel.status != EVENT_STATUS_COMPLETED)
            .filter(NotificationEventModel.retry_count >= max_retries)
            .count()
        )

    @staticmethod
    def _to_entity(model: NotificationEventModel) -> NotificationEvent:
        return NotificationEvent(
            id=model.id,
            event_type=model.event_type,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            payload=model.payload or {},
            status=model.status,
            retry_count=model.retry_count or 0,
            error_message=model.error_message,
            created_at=ensure_app_timezone(model.created_at),
            processed_at=ensure_app_timezone(model.processed_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationEventRepository"]
