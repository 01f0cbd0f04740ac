"""Static notification content for each supported event type."""

from __future__ import annotations

import math
from typing import Any, Mapping

from app.domain.entities import (
    NOTIFICATION_TYPE_BOOKING,
    NOTIFICATION_TYPE_INVOICE,
    NOTIFICATION_TYPE_SYSTEM,
    NotificationContent,
)

DEFAULT_OCCUPANCY_THRESHOLD = 90
OCCUPANCY_EVENT_TYPE = "warehouse.occupancy.updated"

CONTENT_TABLE: dict[str, NotificationContent] = {
    "booking.requested": NotificationContent(
        title="New Booking Request",
        message="You have received a new booking request",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.proposal.created": NotificationContent(
        title="Price Proposal Received",
        message="A price proposal has been created for your booking request",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.proposal.accepted": NotificationContent(
        title="Proposal Accepted",
        message="Your price proposal has been accepted",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.proposal.rejected": NotificationContent(
        title="Proposal Rejected",
        message="Your price proposal has been rejected",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.approved": NotificationContent(
        title="Booking Approved",
        message="Your booking request has been approved",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.rejected": NotificationContent(
        title="Booking Rejected",
        message="Your booking request has been rejected",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "booking.modified": NotificationContent(
        title="Booking Modified",
        message="A booking modification has been requested",
        type=NOTIFICATION_TYPE_BOOKING,
    ),
    "invoice.generated": NotificationContent(
        title="New Invoice Generated",
        message="A new invoice has been generated for your booking",
        type=NOTIFICATION_TYPE_INVOICE,
    ),
    "invoice.paid": NotificationContent(
        title="Invoice Paid",
        message="Your invoice has been paid",
        type=NOTIFICATION_TYPE_INVOICE,
    ),
    "invoice.overdue": NotificationContent(
        title="Invoice Overdue",
        message="Your invoice is overdue. Please make payment as soon as possible.",
        type=NOTIFICATION_TYPE_INVOICE,
    ),
    "team.member.invited": NotificationContent(
        title="Team Member Invited",
        message="A team member invitation has been sent",
        type=NOTIFICATION_TYPE_SYSTEM,
    ),
    "team.member.joined": NotificationContent(
        title="Team Member Joined",
        message="A new team member has joined your company",
        type=NOTIFICATION_TYPE_SYSTEM,
    ),
}


def _as_percent(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        percent = float(value)
    except (TypeError, ValueError):
        return None
    return percent if math.isfinite(percent) else None


def _format_percent(value: float) -> str:
    return str(int(value)) if value.is_integer() else f"{value:g}"


def _occupancy_content(
    payload: Mapping[str, Any], threshold: float
) -> NotificationContent | None:
    percent = _as_percent(payload.get("occupancyPercent"))
    if percent is None or percent < threshold:
        return None
    return NotificationContent(
        title="High Warehouse Occupancy",
        message=f"Warehouse occupancy is at {_format_percent(percent)}%",
        type=NOTIFICATION_TYPE_SYSTEM,
    )


def build_content(
    payload: Mapping[str, Any],
    recipient_user_id: str,
    *,
    occupancy_threshold: float = DEFAULT_OCCUPANCY_THRESHOLD,
) -> NotificationContent | None:
    """Return the content ``recipient_user_id`` should receive, or ``None``.

    ``None`` suppresses the notification for this recipient: the event type is
    unknown, or an occupancy update stays below ``occupancy_threshold``.
    """

    event_type = str(payload.get("eventType") or "")
    if event_type == OCCUPANCY_EVENT_TYPE:
        return _occupancy_content(payload, occupancy_threshold)
    return CONTENT_TABLE.get(event_type)


__all__ = [
    "CONTENT_TABLE",
    "DEFAULT_OCCUPANCY_THRESHOLD",
    "build_content",
]
