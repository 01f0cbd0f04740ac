"""Tests for the static notification content table."""

from __future__ import annotations

import pytest

from app.application.use_cases.notifications import build_content
from app.domain.entities import NotificationContent


@pytest.mark.parametrize(
    ("event_type", "title", "notification_type"),
    [
        ("booking.requested", "New Booking Request", "booking"),
        ("booking.proposal.created", "Price Proposal Received", "booking"),
        ("booking.proposal.accepted", "Proposal Accepted", "booking"),
        ("booking.proposal.rejected", "Proposal Rejected", "booking"),
        ("booking.rejected", "Booking Rejected", "booking"),
        ("booking.modified", "Booking Modified", "booking"),
        ("invoice.generated", "New Invoice Generated", "invoice"),
        ("invoice.paid", "Invoice Paid", "invoice"),
        ("invoice.overdue", "Invoice Overdue", "invoice"),
        ("team.member.invited", "Team Member Invited", "system"),
        ("team.member.joined", "Team Member Joined", "system"),
    ],
)
def test_known_event_types_have_fixed_content(event_type, title, notification_type) -> None:
    content = build_content({"eventType": event_type}, "user-1")

    assert content is not None
    assert content.title == title
    assert content.type == notification_type
    assert content.message


def test_booking_approved_content() -> None:
    assert build_content({"eventType": "booking.approved"}, "cust-1") == NotificationContent(
        title="Booking Approved",
        message="Your booking request has been approved",
        type="booking",
    )


def test_unknown_event_type_is_suppressed() -> None:
    assert build_content({"eventType": "booking.teleported"}, "user-1") is None


@pytest.mark.parametrize(
    ("percent", "expected"),
    [(90, "Warehouse occupancy is at 90%"), (97.5, "Warehouse occupancy is at 97.5%"), ("93", "Warehouse occupancy is at 93%")],
)
def test_occupancy_at_or_above_threshold_alerts_the_owner(percent, expected) -> None:
    content = build_content(
        {"eventType": "warehouse.occupancy.updated", "occupancyPercent": percent}, "owner-1"
    )

    assert content is not None
    assert content.title == "High Warehouse Occupancy"
    assert content.message == expected
    assert content.type == "system"


@pytest.mark.parametrize("percent", [0, 42, 89.99, None, "n/a"])
def test_occupancy_below_threshold_is_suppressed(percent) -> None:
    payload = {"eventType": "warehouse.occupancy.updated", "occupancyPercent": percent}

    assert build_content(payload, "owner-1") is None


def test_occupancy_threshold_is_configurable() -> None:
    payload = {"eventType": "warehouse.occupancy.updated", "occupancyPercent": 75}

    assert build_content(payload, "owner-1", occupancy_threshold=70) is not None
    assert build_content(payload, "owner-1", occupancy_threshold=80) is None


@pytest.mark.parametrize("percent", ["NaN", "inf", float("inf"), float("nan"), "-inf"])
def test_non_finite_occupancy_is_suppressed(percent) -> None:
    payload = {"eventType": "warehouse.occupancy.updated", "occupancyPercent": percent}

    assert build_content(payload, "owner-1") is None
