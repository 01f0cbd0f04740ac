"""Contact and preference lookups used while dispatching notifications."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol

from sqlalchemy.orm import Session

from app.domain.entities import (
    ChannelResult,
    Contact,
    Notification,
    NotificationPreference,
    NotificationRecord,
)
from app.infrastructure.repositories import (
    NotificationPreferenceRepository,
    NotificationRepository,
    ProfileRepository,
)

SessionFactory = Callable[[], Session]


class ContactDirectory(Protocol):
    """Resolve where and how a user may be reached."""

    def get_contact(self, user_id: str) -> Contact | None:
        ...

    def get_preferences(self, user_id: str) -> NotificationPreference:
        ...


class NotificationRecorder(Protocol):
    """Keep an in-app copy of dispatched notifications."""

    def record(self, notification: Notification, channels: list[str]) -> int | None:
        ...

    def record_delivery(self, record_id: int, results: Iterable[ChannelResult]) -> None:
        ...


class SqlAlchemyContactDirectory:
    """Read contacts and preferences with a short-lived session per lookup."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def get_contact(self, user_id: str) -> Contact | None:
        with self._session_factory() as session:
            return ProfileRepository(session).get_contact(user_id)

    def get_preferences(self, user_id: str) -> NotificationPreference:
        with self._session_factory() as session:
            return NotificationPreferenceRepository(session).get_for_user(user_id)


class SqlAlchemyNotificationRecorder:
    """Persist notification rows through :class:`NotificationRepository`."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def record(self, notification: Notification, channels: list[str]) -> int | None:
        record = NotificationRecord(
            id=None,
            user_id=notification.user_id,
            type=notification.type,
            channel=channels[0] if channels else "email",
            title=notification.title,
            message=notification.message,
            metadata=dict(notification.metadata or {}),
        )
        with self._session_factory() as session:
            return NotificationRepository(session).create(record).id

    def record_delivery(self, record_id: int, results: Iterable[ChannelResult]) -> None:
        with self._session_factory() as session:
            NotificationRepository(session).record_delivery(record_id, results)


__all__ = [
    "ContactDirectory",
    "NotificationRecorder",
    "SessionFactory",
    "SqlAlchemyContactDirectory",
    "SqlAlchemyNotificationRecorder",
]
