"""Tests for the Expo-compatible push provider."""

from __future__ import annotations

import json

import httpx
import pytest

from app.domain.entities import BulkEntry, OutboundMessage
from app.infrastructure.notifications import PushGatewayProvider
from app.infrastructure.notifications.push import MAX_PUSH_BATCH

GATEWAY_URL = "https://push.test/--/api/v2/push/send"
MESSAGE = OutboundMessage(
    title="New Booking Request",
    body="You have received a new booking request",
    data={"eventType": "booking.requested", "entityId": "booking-1"},
)


def _provider(handler, **kwargs) -> PushGatewayProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PushGatewayProvider(GATEWAY_URL, client=client, **kwargs)


@pytest.mark.anyio
async def test_push_send_posts_ticket_and_reads_id() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"data": [{"status": "ok", "id": "ticket-1"}]})

    result = await _provider(handler, access_token="push-secret").send(
        "ExponentPushToken[abc]", MESSAGE
    )

    assert result.success is True
    assert result.message_id == "ticket-1"
    assert result.provider == "push-gateway"
    request = captured[0]
    assert request.headers["Authorization"] == "Bearer push-secret"
    assert json.loads(request.content) == [
        {
            "to": "ExponentPushToken[abc]",
            "title": "New Booking Request",
            "body": "You have received a new booking request",
            "data": {"eventType": "booking.requested", "entityId": "booking-1"},
            "sound": "default",
        }
    ]


@pytest.mark.anyio
async def test_push_rejected_ticket_fails_with_gateway_reason() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "status": "error",
                        "message": "\"ExponentPushToken[gone]\" is not a registered push notification recipient",
                        "details": {"error": "DeviceNotRegistered"},
                    }
                ]
            },
        )

    result = await _provider(handler).send("ExponentPushToken[gone]", MESSAGE)

    assert result.success is False
    assert "not a registered push notification recipient" in (result.error or "")


@pytest.mark.anyio
async def test_push_unexpected_ticket_status_fails_closed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"status": "pending"}]})

    result = await _provider(handler).send("ExponentPushToken[abc]", MESSAGE)

    assert result.success is False
    assert result.error == "Push ticket rejected"


@pytest.mark.anyio
async def test_push_gateway_http_error_fails_every_entry() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal error")

    results = await _provider(handler).send_bulk(
        [BulkEntry(to="token-1", message=MESSAGE), BulkEntry(to="token-2", message=MESSAGE)]
    )

    assert [result.success for result in results] == [False, False]
    assert results[0].error == "Push gateway error: 500 - internal error"


@pytest.mark.anyio
async def test_push_bulk_is_split_into_gateway_sized_chunks() -> None:
    chunk_sizes: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        tickets = json.loads(request.content)
        chunk_sizes.append(len(tickets))
        return httpx.Response(
            200, json={"data": [{"status": "ok", "id": ticket["to"]} for ticket in tickets]}
        )

    entries = [BulkEntry(to=f"token-{index}", message=MESSAGE) for index in range(MAX_PUSH_BATCH + 5)]
    results = await _provider(handler).send_bulk(entries)

    assert chunk_sizes == [MAX_PUSH_BATCH, 5]
    assert [result.message_id for result in results] == [entry.to for entry in entries]


@pytest.mark.anyio
async def test_push_without_gateway_is_disabled() -> None:
    provider = PushGatewayProvider(None)

    result = await provider.send("token-1", MESSAGE)

    assert provider.configured is False
    assert result.success is False
    assert result.error == "Push provider not configured"
