"""Build the notification dispatcher from application settings."""

from __future__ import annotations

import logging

import httpx

from app.config import Settings
from app.domain.entities import CHANNEL_EMAIL, CHANNEL_PUSH, CHANNEL_SMS

from .base import ChannelProvider
from .directory import (
    SessionFactory,
    SqlAlchemyContactDirectory,
    SqlAlchemyNotificationRecorder,
)
from .dispatcher import NotificationDispatcher
from .email import SendGridEmailProvider
from .push import PushGatewayProvider
from .sms import create_sms_provider

logger = logging.getLogger(__name__)


def build_providers(
    settings: Settings, *, client: httpx.AsyncClient | None = None
) -> dict[str, list[ChannelProvider]]:
    """Return the ordered providers for every channel that can deliver."""

    providers: dict[str, list[ChannelProvider]] = {}

    if settings.sendgrid_api_key and settings.sendgrid_sender:
        providers[CHANNEL_EMAIL] = [
            SendGridEmailProvider(
                settings.sendgrid_api_key,
                settings.sendgrid_sender,
                sender_name=settings.sendgrid_sender_name,
            )
        ]
    else:
        logger.warning("SendGrid not configured. Email notifications will be disabled.")

    sms_provider = create_sms_provider(settings, client=client)
    if sms_provider is not None:
        providers[CHANNEL_SMS] = [sms_provider]

    if settings.push_gateway_url:
        providers[CHANNEL_PUSH] = [
            PushGatewayProvider(
                settings.push_gateway_url,
                access_token=settings.push_gateway_access_token,
                timeout=settings.provider_timeout_seconds,
                client=client,
            )
        ]
    else:
        logger.warning("Push gateway not configured. Push notifications will be disabled.")

    return providers


def build_dispatcher(
    settings: Settings,
    session_factory: SessionFactory,
    *,
    client: httpx.AsyncClient | None = None,
) -> NotificationDispatcher:
    """Wire providers, the contact directory and the recorder together."""

    recorder = (
        SqlAlchemyNotificationRecorder(session_factory)
        if settings.notification_persist_records
        else None
    )
    return NotificationDispatcher(
        build_providers(settings, client=client),
        directory=SqlAlchemyContactDirectory(session_factory),
        recorder=recorder,
        timeout_seconds=settings.provider_timeout_seconds,
    )


__all__ = ["build_dispatcher", "build_providers"]
