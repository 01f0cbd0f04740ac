"""Use cases turning notification events into delivered notifications."""

from .content import CONTENT_TABLE, build_content
from .pipeline import NotificationPipeline, build_pipeline
from .process_event import get_notification_event, process_notification_event
from .process_pending import count_dead_lettered_events, process_pending_events
from .recipients import RECIPIENT_RULES, resolve_recipients

__all__ = [
    "CONTENT_TABLE",
    "build_content",
    "count_dead_lettered_events",
    "NotificationPipeline",
    "build_pipeline",
    "get_notification_event",
    "process_notification_event",
    "process_pending_events",
    "RECIPIENT_RULES",
    "resolve_recipients",
]
