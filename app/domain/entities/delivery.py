"""Value objects returned by channel providers and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OutboundMessage:
    """Channel independent message handed to a provider."""

    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BulkEntry:
    """Single ``destination``/``message`` pair of a bulk send."""

    to: str
    message: OutboundMessage


@dataclass
class DeliveryResult:
    """Result of one provider delivery attempt."""

    success: bool
    message_id: str | None = None
    error: str | None = None
    provider: str | None = None
    destination: str | None = None

    @classmethod
    def failure(
        cls, error: str, *, provider: str | None = None, destination: str | None = None
    ) -> "DeliveryResult":
        return cls(success=False, error=error, provider=provider, destination=destination)


@dataclass
class ChannelResult:
    """Outcome of delivering a notification through one channel."""

    channel: str
    success: bool
    message_id: str | None = None
    error: str | None = None
    provider: str | None = None


@dataclass
class DispatchResult:
    """Aggregated per-channel outcome for one notification."""

    user_id: str
    results: list[ChannelResult] = field(default_factory=list)
    skipped_reason: str | None = None
    error_detail: str | None = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def success(self) -> bool:
        """A dispatch succeeds when skipped or when any channel delivered."""

        if self.error_detail is not None:
            return False
        if self.skipped:
            return True
        return any(result.success for result in self.results)

    @property
    def error(self) -> str | None:
        if self.success:
            return None
        messages = [
            f"{result.channel}: {result.error or 'delivery failed'}"
            for result in self.results
            if not result.success
        ]
        if self.error_detail:
            messages.insert(0, self.error_detail)
        if not messages:
            messages.append("No channel delivered the notification")
        return f"user {self.user_id}: " + ", ".join(messages)


__all__ = [
    "BulkEntry",
    "ChannelResult",
    "DeliveryResult",
    "DispatchResult",
    "OutboundMessage",
]
