"""Provider protocol shared by every delivery channel."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol, Sequence, runtime_checkable

import httpx

from app.domain.entities import BulkEntry, DeliveryResult, OutboundMessage


@runtime_checkable
class ChannelProvider(Protocol):
    """Capability that delivers one message through one third-party service.

    Implementations report failures through :class:`DeliveryResult` and must
    never let an exception escape ``send``/``send_bulk``.
    """

    name: str

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        ...

    async def send_bulk(self, entries: Sequence[BulkEntry]) -> list[DeliveryResult]:
        ...


class FanOutBulkMixin:
    """Fallback ``send_bulk`` issuing one ``send`` per entry concurrently."""

    async def send_bulk(self, entries: Sequence[BulkEntry]) -> list[DeliveryResult]:
        if not entries:
            return []
        return list(
            await asyncio.gather(
                *(self.send(entry.to, entry.message) for entry in entries)  # type: ignore[attr-defined]
            )
        )


class HTTPProviderMixin:
    """Share an injected :class:`httpx.AsyncClient` or open one per call."""

    _client: httpx.AsyncClient | None = None
    _timeout: float = 10.0

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client


def describe_exception(exc: BaseException) -> str:
    """Return a short message for ``exc`` suitable for error columns."""

    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return "Request timed out"
    text = str(exc).strip()
    return text or exc.__class__.__name__


def response_error_text(response: httpx.Response, *, limit: int = 300) -> str:
    """Return a trimmed body for error messages."""

    try:
        text = response.text.strip()
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return response.reason_phrase or ""
    return text[:limit]


__all__ = [
    "ChannelProvider",
    "FanOutBulkMixin",
    "HTTPProviderMixin",
    "describe_exception",
    "response_error_text",
]
