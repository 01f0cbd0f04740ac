"""Tests for the channel agnostic notification dispatcher."""

from __future__ import annotations

import pytest

from app.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    CHANNEL_SMS,
    Contact,
    Notification,
    NotificationPreference,
)
from app.infrastructure.notifications import NotificationDispatcher

from conftest import FakeProvider


class MemoryDirectory:
    def __init__(self, contacts=None, preferences=None) -> None:
        self.contacts = {contact.user_id: contact for contact in contacts or []}
        self.preferences = {preference.user_id: preference for preference in preferences or []}

    def get_contact(self, user_id):
        return self.contacts.get(user_id)

    def get_preferences(self, user_id):
        return self.preferences.get(user_id) or NotificationPreference(user_id=user_id)


class MemoryRecorder:
    def __init__(self) -> None:
        self.records: list[tuple[str, list[str]]] = []
        self.deliveries: dict[int, list] = {}

    def record(self, notification, channels):
        self.records.append((notification.user_id, list(channels)))
        return len(self.records)

    def record_delivery(self, record_id, results):
        self.deliveries[record_id] = list(results)


CONTACT = Contact(
    user_id="user-1",
    name="Ayse",
    email="ayse@example.com",
    phone="+905321234567",
    push_token="ExponentPushToken[ayse]",
)


def _notification(channels=(CHANNEL_EMAIL, CHANNEL_PUSH), notification_type="booking") -> Notification:
    return Notification(
        user_id="user-1",
        channels=list(channels),
        title="Booking Approved",
        message="Your booking request has been approved",
        type=notification_type,
        metadata={"eventType": "booking.approved", "entityId": "booking-1"},
    )


@pytest.mark.anyio
async def test_dispatch_delivers_on_every_requested_channel() -> None:
    email, push = FakeProvider("email"), FakeProvider("push")
    recorder = MemoryRecorder()
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [email], CHANNEL_PUSH: [push]},
        directory=MemoryDirectory([CONTACT]),
        recorder=recorder,
    )

    result = await dispatcher.dispatch(_notification())

    assert result.success is True
    assert result.error is None
    assert email.destinations == ["ayse@example.com"]
    assert push.destinations == ["ExponentPushToken[ayse]"]
    assert push.sent[0][1].data == {"eventType": "booking.approved", "entityId": "booking-1"}
    assert recorder.records == [("user-1", [CHANNEL_EMAIL, CHANNEL_PUSH])]
    assert [channel.success for channel in recorder.deliveries[1]] == [True, True]


@pytest.mark.anyio
async def test_dispatch_succeeds_when_at_least_one_channel_delivers() -> None:
    email = FakeProvider("email", fail_for=("ayse@example.com",), error="mailbox full")
    push = FakeProvider("push")
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [email], CHANNEL_PUSH: [push]},
        directory=MemoryDirectory([CONTACT]),
    )

    result = await dispatcher.dispatch(_notification())

    assert result.success is True
    assert [(channel.channel, channel.success, channel.error) for channel in result.results] == [
        (CHANNEL_EMAIL, False, "mailbox full"),
        (CHANNEL_PUSH, True, None),
    ]


@pytest.mark.anyio
async def test_dispatch_fails_when_no_channel_delivers() -> None:
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [FakeProvider("email", fail_for=("ayse@example.com",), error="bounced")]},
        directory=MemoryDirectory([CONTACT]),
    )

    result = await dispatcher.dispatch(_notification())

    assert result.success is False
    assert result.error == "user user-1: email: bounced, push: Push provider not configured"


@pytest.mark.anyio
async def test_missing_destinations_fail_with_typed_reasons() -> None:
    providers = {
        CHANNEL_EMAIL: [FakeProvider("email")],
        CHANNEL_PUSH: [FakeProvider("push")],
        CHANNEL_SMS: [FakeProvider("sms")],
    }
    preference = NotificationPreference(user_id="user-1", sms_enabled=True)
    dispatcher = NotificationDispatcher(providers, directory=MemoryDirectory(preferences=[preference]))

    result = await dispatcher.dispatch(
        _notification(channels=(CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_PUSH), notification_type="incident")
    )

    assert result.success is False
    assert {channel.channel: channel.error for channel in result.results} == {
        CHANNEL_EMAIL: "User email not found",
        CHANNEL_SMS: "User phone number not found",
        CHANNEL_PUSH: "User push subscription not found",
    }
    assert all(not provider.sent for channel in providers.values() for provider in channel)


@pytest.mark.anyio
async def test_disabled_sms_channel_short_circuits_without_provider_call() -> None:
    preference = NotificationPreference(user_id="user-1", sms_enabled=True)
    dispatcher = NotificationDispatcher(
        {CHANNEL_SMS: []},
        directory=MemoryDirectory([CONTACT], [preference]),
    )

    result = await dispatcher.dispatch(_notification(channels=(CHANNEL_SMS,), notification_type="incident"))

    assert result.success is False
    assert result.results[0].error == "SMS provider not configured"
    assert dispatcher.enabled_channels() == []


@pytest.mark.anyio
async def test_preferences_filter_channels_and_can_skip_the_user() -> None:
    email, push = FakeProvider("email"), FakeProvider("push")
    preference = NotificationPreference(user_id="user-1", email_enabled=False, push_enabled=False)
    recorder = MemoryRecorder()
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [email], CHANNEL_PUSH: [push]},
        directory=MemoryDirectory([CONTACT], [preference]),
        recorder=recorder,
    )

    result = await dispatcher.dispatch(_notification())

    assert result.skipped is True
    assert result.success is True
    assert result.skipped_reason == "No enabled notification channels for user"
    assert email.sent == [] and push.sent == []
    assert recorder.records == []


@pytest.mark.anyio
async def test_type_preferences_switch_off_single_channels() -> None:
    email, push = FakeProvider("email"), FakeProvider("push")
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [email], CHANNEL_PUSH: [push]},
        directory=MemoryDirectory([CONTACT]),
    )

    result = await dispatcher.dispatch(_notification(notification_type="task"))

    assert result.success is True
    assert [channel.channel for channel in result.results] == [CHANNEL_PUSH]
    assert email.sent == []


@pytest.mark.anyio
async def test_next_provider_is_tried_after_a_failure() -> None:
    primary = FakeProvider("primary", fail_for=("+905321234567",), error="Insufficient balance")
    fallback = FakeProvider("fallback")
    preference = NotificationPreference(user_id="user-1", sms_enabled=True)
    dispatcher = NotificationDispatcher(
        {CHANNEL_SMS: [primary, fallback]},
        directory=MemoryDirectory([CONTACT], [preference]),
    )

    result = await dispatcher.dispatch(_notification(channels=(CHANNEL_SMS,), notification_type="incident"))

    assert result.success is True
    assert result.results[0].provider == "fallback"
    assert primary.destinations == fallback.destinations == ["+905321234567"]


@pytest.mark.anyio
async def test_provider_timeouts_and_exceptions_become_failures() -> None:
    slow = FakeProvider("slow", delay=1)
    broken = FakeProvider("broken", raises=RuntimeError("socket closed"))
    dispatcher = NotificationDispatcher(
        {CHANNEL_EMAIL: [slow], CHANNEL_PUSH: [broken]},
        directory=MemoryDirectory([CONTACT]),
        timeout_seconds=0.05,
    )

    result = await dispatcher.dispatch(_notification())

    assert result.success is False
    assert {channel.channel: channel.error for channel in result.results} == {
        CHANNEL_EMAIL: "Request timed out",
        CHANNEL_PUSH: "socket closed",
    }


@pytest.mark.anyio
async def test_directory_errors_are_reported_not_raised() -> None:
    class BrokenDirectory(MemoryDirectory):
        def get_preferences(self, user_id):
            raise RuntimeError("database unavailable")

    dispatcher = NotificationDispatcher({CHANNEL_EMAIL: [FakeProvider()]}, directory=BrokenDirectory())

    result = await dispatcher.dispatch(_notification())

    assert result.success is False
    assert result.error == "user user-1: database unavailable"
