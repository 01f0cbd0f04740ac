"""Shared fixtures for the notification pipeline tests."""

from __future__ import annotations

import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

# Ensure the project root (which contains the ``app`` package) is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# ``app.infrastructure.database`` builds its engine at import time
os.environ["DATABASE_URL"] = "sqlite://"

from app.application.use_cases.notifications import NotificationPipeline  # noqa: E402
from app.config import Settings  # noqa: E402
from app.domain.entities import (  # noqa: E402
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    DeliveryResult,
    NotificationEvent,
    NotificationPreference,
    OutboundMessage,
    Profile,
)
from app.infrastructure.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    initialize_database,
)
from app.infrastructure.notifications import (  # noqa: E402
    NotificationDispatcher,
    SqlAlchemyContactDirectory,
    SqlAlchemyNotificationRecorder,
)
from app.infrastructure.repositories import (  # noqa: E402
    NotificationEventRepository,
    NotificationPreferenceRepository,
    ProfileRepository,
)

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class FakeProvider:
    """In-memory channel provider recording every send."""

    def __init__(
        self,
        name: str = "fake",
        *,
        fail_for: tuple[str, ...] = (),
        error: str = "provider rejected the message",
        raises: Exception | None = None,
        delay: float | None = None,
    ) -> None:
        self.name = name
        self.fail_for = set(fail_for)
        self.error = error
        self.raises = raises
        self.delay = delay
        self.sent: list[tuple[str, OutboundMessage]] = []

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        self.sent.append((destination, message))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if destination in self.fail_for:
            return DeliveryResult.failure(self.error, provider=self.name, destination=destination)
        return DeliveryResult(
            success=True,
            message_id=f"{self.name}-{len(self.sent)}",
            provider=self.name,
            destination=destination,
        )

    async def send_bulk(self, entries) -> list[DeliveryResult]:
        return [await self.send(entry.to, entry.message) for entry in entries]

    @property
    def destinations(self) -> list[str]:
        return [destination for destination, _ in self.sent]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Return a factory building settings that ignore the local ``.env``."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {"database_url": "sqlite://"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def session_factory(tmp_path: Path):
    """Session factory bound to a fresh SQLite database file."""

    engine = build_engine(f"sqlite:///{tmp_path / 'notifications.db'}")
    initialize_database(bind=engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def add_event(session_factory) -> Callable[..., str]:
    """Insert a pending event and return its id."""

    counter = {"value": 0}

    def _add(event_type: str, payload: dict[str, Any] | None = None, **fields: Any) -> str:
        counter["value"] += 1
        entity_type = fields.pop("entity_type", event_type.split(".")[0])
        entity_id = fields.pop("entity_id", f"{entity_type}-{counter['value']}")
        created_at = fields.pop(
            "created_at", BASE_TIME + timedelta(minutes=counter["value"])
        )
        event = NotificationEvent(
            id=fields.pop("id", None),
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            payload={"eventType": event_type, **(payload or {})},
            created_at=created_at,
        )
        with session_factory() as session:
            return NotificationEventRepository(session).add(event).id

    return _add


@pytest.fixture
def get_event(session_factory) -> Callable[[str], NotificationEvent | None]:
    def _get(event_id: str) -> NotificationEvent | None:
        with session_factory() as session:
            return NotificationEventRepository(session).get(event_id)

    return _get


@pytest.fixture
def add_profile(session_factory) -> Callable[..., Profile]:
    """Insert a reachable profile; contact fields default from the id."""

    def _add(user_id: str, *, preference: NotificationPreference | None = None, **fields: Any) -> Profile:
        profile = Profile(
            id=user_id,
            name=fields.pop("name", user_id.title()),
            email=fields.pop("email", f"{user_id}@example.com"),
            phone_number=fields.pop("phone_number", None),
            push_token=fields.pop("push_token", f"ExponentPushToken[{user_id}]"),
            company_id=fields.pop("company_id", None),
            role=fields.pop("role", None),
            is_active=fields.pop("is_active", True),
        )
        with session_factory() as session:
            saved = ProfileRepository(session).add(profile)
            if preference is not None:
                NotificationPreferenceRepository(session).save(preference)
        return saved

    return _add


@pytest.fixture
def email_provider() -> FakeProvider:
    return FakeProvider("fake-email")


@pytest.fixture
def push_provider() -> FakeProvider:
    return FakeProvider("fake-push")


@pytest.fixture
def make_pipeline(make_settings, session_factory, email_provider, push_provider):
    """Build a pipeline over the test database using fake providers."""

    def _make(providers: dict[str, list] | None = None, **settings_overrides: Any) -> NotificationPipeline:
        settings = make_settings(**settings_overrides)
        if providers is None:
            providers = {CHANNEL_EMAIL: [email_provider], CHANNEL_PUSH: [push_provider]}
        dispatcher = NotificationDispatcher(
            providers,
            directory=SqlAlchemyContactDirectory(session_factory),
            recorder=SqlAlchemyNotificationRecorder(session_factory),
            timeout_seconds=settings.provider_timeout_seconds,
        )
        return NotificationPipeline(
            settings=settings,
            session_factory=session_factory,
            dispatcher=dispatcher,
        )

    return _make


@pytest.fixture
def pipeline(make_pipeline) -> NotificationPipeline:
    return make_pipeline()
