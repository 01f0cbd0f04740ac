"""Channel agnostic dispatcher fanning a notification out to providers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Awaitable, TypeVar

from anyio import to_thread

from app.domain.entities import (
    ChannelResult,
    Contact,
    DeliveryResult,
    DispatchResult,
    Notification,
    OutboundMessage,
)

from .base import ChannelProvider, describe_exception
from .directory import ContactDirectory, NotificationRecorder

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CHANNEL_LABELS = {"email": "Email", "sms": "SMS", "push": "Push"}
_MISSING_DESTINATION = {
    "email": "User email not found",
    "sms": "User phone number not found",
    "push": "User push subscription not found",
}


def _channel_label(channel: str) -> str:
    return _CHANNEL_LABELS.get(channel, channel.capitalize())


class NotificationDispatcher:
    """Deliver notifications through the providers configured per channel.

    ``providers`` maps a channel name to an ordered sequence of providers; the
    next provider is only tried when the previous one failed. A channel with no
    providers is disabled and fails without any network call.
    """

    def __init__(
        self,
        providers: Mapping[str, Sequence[ChannelProvider]],
        *,
        directory: ContactDirectory,
        recorder: NotificationRecorder | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._providers = {
            channel: tuple(channel_providers)
            for channel, channel_providers in providers.items()
            if channel_providers
        }
        self._directory = directory
        self._recorder = recorder
        self._timeout_seconds = timeout_seconds

    def enabled_channels(self) -> list[str]:
        return sorted(self._providers)

    def providers_for(self, channel: str) -> tuple[ChannelProvider, ...]:
        return self._providers.get(channel, ())

    async def dispatch(self, notification: Notification) -> DispatchResult:
        """Send ``notification`` on every channel the recipient allows.

        Directory and recorder calls hit the database, so they run in worker
        threads.
        """

        user_id = notification.user_id
        results: list[ChannelResult] = []
        try:
            preferences = await to_thread.run_sync(self._directory.get_preferences, user_id)
            channels = preferences.enabled_channels(
                list(notification.channels), notification.type
            )
            if not channels:
                logger.info(
                    "No enabled notification channels for user %s (%s)",
                    user_id,
                    notification.type,
                )
                return DispatchResult(
                    user_id=user_id,
                    skipped_reason="No enabled notification channels for user",
                )

            contact = await to_thread.run_sync(self._directory.get_contact, user_id)
            if contact is None:
                contact = Contact(user_id=user_id)
            record_id = None
            if self._recorder is not None:
                record_id = await to_thread.run_sync(self._recorder.record, notification, channels)
            message = OutboundMessage(
                title=notification.title,
                body=notification.message,
                data=dict(notification.metadata or {}),
            )
            results = list(
                await asyncio.gather(
                    *(self._deliver(channel, contact, message) for channel in channels)
                )
            )
            if self._recorder is not None and record_id is not None:
                await to_thread.run_sync(self._recorder.record_delivery, record_id, results)
        except Exception as exc:
            logger.exception("Dispatch to user %s failed unexpectedly", user_id)
            return DispatchResult(
                user_id=user_id, results=results, error_detail=describe_exception(exc)
            )

        failed = [result for result in results if not result.success]
        if failed:
            logger.warning(
                "Notification for user %s failed on %s",
                user_id,
                ", ".join(f"{result.channel} ({result.error})" for result in failed),
            )
        return DispatchResult(user_id=user_id, results=results)

    async def _deliver(
        self, channel: str, contact: Contact, message: OutboundMessage
    ) -> ChannelResult:
        providers = self.providers_for(channel)
        if not providers:
            return ChannelResult(
                channel=channel,
                success=False,
                error=f"{_channel_label(channel)} provider not configured",
            )

        destination = contact.destination_for(channel)
        if not destination:
            return ChannelResult(
                channel=channel,
                success=False,
                error=_MISSING_DESTINATION.get(channel, "Destination not found"),
            )

        errors: list[str] = []
        for provider in providers:
            result = await self._send(provider, destination, message)
            if result.success:
                return ChannelResult(
                    channel=channel,
                    success=True,
                    message_id=result.message_id,
                    provider=provider.name,
                )
            errors.append(result.error or "delivery failed")

        return ChannelResult(
            channel=channel,
            success=False,
            error="; ".join(errors),
            provider=providers[-1].name,
        )

    async def _send(
        self, provider: ChannelProvider, destination: str, message: OutboundMessage
    ) -> DeliveryResult:
        try:
            return await self._bounded(provider.send(destination, message))
        except Exception as exc:
            logger.warning("Provider %s failed: %s", provider.name, describe_exception(exc))
            return DeliveryResult.failure(
                describe_exception(exc), provider=provider.name, destination=destination
            )

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self._timeout_seconds)


__all__ = ["NotificationDispatcher"]
