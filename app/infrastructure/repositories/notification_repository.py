"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import ChannelResult, NotificationRecord
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`NotificationRecord` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        user_id: str,
        *,
        limit: int | None = 50,
    ) -> Sequence[NotificationRecord]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.user_id == user_id)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, record: NotificationRecord) -> NotificationRecord:
        model = NotificationModel()
        self._apply_entity_to_model(model, record)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def record_delivery(
        self, notification_id: int, results: Iterable[ChannelResult]
    ) -> NotificationRecord:
        """Stamp the delivery outcome of every channel on the stored row."""

        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)

        now = now_in_app_naive_datetime()
        metadata = dict(model.metadata_ or {})
        errors: list[str] = []
        delivered = False
        for result in results:
            if result.success:
                delivered = True
                metadata[result.channel] = {
                    "messageId": result.message_id,
                    "provider": result.provider,
                }
            else:
                errors.append(f"{result.channel}: {result.error}")
                metadata[result.channel] = {"error": result.error}

        model.sent_at = now
        model.metadata_ = metadata
        if delivered:
            model.delivered_at = now
        else:
            model.failed_at = now
        model.error_message = "; ".join(errors) or None
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, record: NotificationRecord
    ) -> None:
        model.created_at = ensure_app_naive_datetime(
            record.created_at
        ) or now_in_app_naive_datetime()
        model.user_id = record.user_id
        model.type = record.type
        model.channel = record.channel
        model.title = record.title
        model.message = record.message
        model.metadata_ = record.metadata or {}
        model.read_at = ensure_app_naive_datetime(record.read_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            channel=model.channel,
            title=model.title,
            message=model.message,
            metadata=model.metadata_ or {},
            created_at=ensure_app_timezone(model.created_at),
            sent_at=ensure_app_timezone(model.sent_at),
            delivered_at=ensure_app_timezone(model.delivered_at),
            failed_at=ensure_app_timezone(model.failed_at),
            error_message=model.error_message,
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["NotificationRepository"]
