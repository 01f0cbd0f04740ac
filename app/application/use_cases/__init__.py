"""Aggregate application use cases."""

from .notifications import (
    build_pipeline,
    process_notification_event,
    process_pending_events,
)

__all__ = [
    "build_pipeline",
    "process_notification_event",
    "process_pending_events",
]
