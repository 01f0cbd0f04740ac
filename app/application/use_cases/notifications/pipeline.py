"""Collaborators shared by the event processor and the batch scheduler."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from app.config import Settings, get_settings
from app.infrastructure.database import (
    SessionLocal,
    build_session_factory,
    engine_from_settings,
    settings as default_settings,
)
from app.infrastructure.notifications import (
    NotificationDispatcher,
    SessionFactory,
    build_dispatcher,
)


@dataclass
class NotificationPipeline:
    """Settings, store access and dispatcher used to process events."""

    settings: Settings
    session_factory: SessionFactory
    dispatcher: NotificationDispatcher


def build_pipeline(
    settings: Settings | None = None,
    *,
    session_factory: SessionFactory | None = None,
    client: httpx.AsyncClient | None = None,
) -> NotificationPipeline:
    """Create a pipeline, selecting channel providers once from ``settings``."""

    settings = settings or get_settings()
    if session_factory is None:
        if settings.database_url == default_settings.database_url:
            session_factory = SessionLocal
        else:
            session_factory = build_session_factory(engine_from_settings(settings))
    return NotificationPipeline(
        settings=settings,
        session_factory=session_factory,
        dispatcher=build_dispatcher(settings, session_factory, client=client),
    )


__all__ = ["NotificationPipeline", "build_pipeline"]
