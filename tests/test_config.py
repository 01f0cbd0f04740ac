"""Tests for settings validation and provider selection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import get_settings, reset_settings_cache
from app.domain.entities import CHANNEL_EMAIL, CHANNEL_PUSH, CHANNEL_SMS
from app.infrastructure.notifications import (
    NetGSMProvider,
    PushGatewayProvider,
    SendGridEmailProvider,
    build_providers,
)


def test_defaults(settings) -> None:
    assert settings.notification_batch_size == 10
    assert settings.notification_max_retries == 3
    assert settings.notification_occupancy_threshold == 90
    assert settings.notification_channels == ["email", "push"]
    assert settings.netgsm_header == "TALYA SMART"
    assert settings.netgsm_configured is False
    assert settings.twilio_configured is False


def test_sendgrid_values_must_be_provided_together(make_settings) -> None:
    with pytest.raises(ValidationError):
        make_settings(sendgrid_api_key="SG.fake")


def test_sendgrid_sender_must_be_an_email(make_settings) -> None:
    with pytest.raises(ValidationError):
        make_settings(sendgrid_api_key="SG.fake", sendgrid_sender="not-an-address")


def test_netgsm_values_must_be_provided_together(make_settings) -> None:
    with pytest.raises(ValidationError):
        make_settings(netgsm_username="user")


def test_settings_are_read_from_the_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTIFICATION_BATCH_SIZE", "25")
    monkeypatch.setenv("NOTIFICATION_CHANNELS", '["email", "sms", "push"]')
    reset_settings_cache()
    try:
        settings = get_settings()
        assert settings.notification_batch_size == 25
        assert settings.notification_channels == ["email", "sms", "push"]
    finally:
        monkeypatch.undo()
        reset_settings_cache()


def test_build_providers_only_enables_configured_channels(make_settings) -> None:
    assert build_providers(make_settings()) == {}

    providers = build_providers(
        make_settings(
            sendgrid_api_key="SG.fake",
            sendgrid_sender="alerts@example.com",
            netgsm_username="user",
            netgsm_password="secret",
            push_gateway_url="https://push.test/send",
        )
    )

    assert set(providers) == {CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_PUSH}
    assert isinstance(providers[CHANNEL_EMAIL][0], SendGridEmailProvider)
    assert isinstance(providers[CHANNEL_SMS][0], NetGSMProvider)
    assert isinstance(providers[CHANNEL_PUSH][0], PushGatewayProvider)
