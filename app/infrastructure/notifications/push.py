"""Push channel provider for Expo-compatible push gateways."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from app.domain.entities import BulkEntry, DeliveryResult, OutboundMessage

from .base import HTTPProviderMixin, describe_exception, response_error_text

logger = logging.getLogger(__name__)

# Gateways reject batches above this size.
MAX_PUSH_BATCH = 100


class PushGatewayProvider(HTTPProviderMixin):
    """Deliver push tickets to device tokens through a JSON gateway."""

    name = "push-gateway"

    def __init__(
        self,
        gateway_url: str | None,
        *,
        access_token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._gateway_url = gateway_url or ""
        self._access_token = access_token
        self._timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self._gateway_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    @staticmethod
    def _ticket(token: str, message: OutboundMessage) -> dict[str, Any]:
        return {
            "to": token,
            "title": message.title,
            "body": message.body,
            "data": message.data or {},
            "sound": "default",
        }

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        results = await self.send_bulk([BulkEntry(to=destination, message=message)])
        return results[0]

    async def send_bulk(self, entries: Sequence[BulkEntry]) -> list[DeliveryResult]:
        if not entries:
            return []
        if not self.configured:
            return self._fail_all(entries, "Push provider not configured")

        results: list[DeliveryResult] = []
        for start in range(0, len(entries), MAX_PUSH_BATCH):
            chunk = list(entries[start : start + MAX_PUSH_BATCH])
            results.extend(await self._send_chunk(chunk))
        return results

    async def _send_chunk(self, entries: list[BulkEntry]) -> list[DeliveryResult]:
        payload = [self._ticket(entry.to, entry.message) for entry in entries]
        try:
            async with self._http_client() as client:
                response = await client.post(
                    self._gateway_url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.warning("Push gateway request failed: %s", describe_exception(exc))
            return self._fail_all(
                entries, f"Push gateway request failed: {describe_exception(exc)}"
            )
        except Exception as exc:  # pragma: no cover - unexpected provider failure
            logger.exception("Unexpected push gateway failure")
            return self._fail_all(entries, describe_exception(exc))

        if not response.is_success:
            return self._fail_all(
                entries,
                f"Push gateway error: {response.status_code} - {response_error_text(response)}",
            )

        try:
            body = response.json()
        except ValueError:
            return self._fail_all(entries, "Push gateway returned an invalid response")

        tickets = body.get("data") if isinstance(body, dict) else None
        if isinstance(tickets, dict):
            tickets = [tickets]
        if not isinstance(tickets, list) or len(tickets) != len(entries):
            return self._fail_all(entries, "Push gateway returned an unexpected ticket list")

        return [self._ticket_result(entry, ticket) for entry, ticket in zip(entries, tickets)]

    def _ticket_result(self, entry: BulkEntry, ticket: Any) -> DeliveryResult:
        if isinstance(ticket, dict) and ticket.get("status") == "ok":
            ticket_id = ticket.get("id")
            return DeliveryResult(
                success=True,
                message_id=str(ticket_id) if ticket_id is not None else None,
                provider=self.name,
                destination=entry.to,
            )
        reason = "Push ticket rejected"
        if isinstance(ticket, dict):
            details = ticket.get("details") or {}
            error_code = details.get("error") if isinstance(details, dict) else None
            reason = ticket.get("message") or error_code or reason
        return DeliveryResult.failure(str(reason), provider=self.name, destination=entry.to)

    def _fail_all(self, entries: Sequence[BulkEntry], error: str) -> list[DeliveryResult]:
        return [
            DeliveryResult.failure(error, provider=self.name, destination=entry.to)
            for entry in entries
        ]


__all__ = ["MAX_PUSH_BATCH", "PushGatewayProvider"]
