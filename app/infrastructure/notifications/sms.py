"""SMS channel providers: NetGSM (primary) and Twilio (fallback)."""

from __future__ import annotations

import logging
import re
from typing import Any, Sequence

import httpx

from app.config import Settings
from app.domain.entities import BulkEntry, DeliveryResult, OutboundMessage

from .base import (
    FanOutBulkMixin,
    HTTPProviderMixin,
    describe_exception,
    response_error_text,
)

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")

NETGSM_SUCCESS_CODE = "00"
NETGSM_ERROR_MESSAGES: dict[str, str] = {
    "00": "Success",
    "01": "Invalid username or password",
    "02": "Insufficient balance",
    "20": "Invalid message header",
    "30": "Invalid phone number",
    "40": "Message header not defined",
    "50": "System error",
    "51": "Invalid encoding",
    "70": "Invalid parameters",
    "85": "Invalid phone number format",
}


def sms_text(message: OutboundMessage) -> str:
    """Flatten a notification into the text of a single SMS."""

    if not message.title:
        return message.body
    return f"{message.title}\n\n{message.body}"


def format_netgsm_phone_number(phone: str) -> str:
    """Return ``phone`` as NetGSM expects it: ``5XXXXXXXXX``.

    Non-digits, the ``90`` country code and the trunk prefix ``0`` are removed.
    """

    cleaned = _NON_DIGITS.sub("", phone or "")
    if cleaned.startswith("90"):
        cleaned = cleaned[2:]
    if cleaned.startswith("0"):
        cleaned = cleaned[1:]
    return cleaned


def format_e164_phone_number(phone: str) -> str:
    """Return ``phone`` in the ``+<country><number>`` form used by Twilio."""

    raw = (phone or "").strip()
    digits = _NON_DIGITS.sub("", raw)
    if raw.startswith("00"):
        digits = digits[2:]
    return f"+{digits}" if digits else ""


def _normalize_netgsm_code(code: Any) -> str | None:
    if code is None or isinstance(code, bool):
        return None
    if isinstance(code, int):
        return f"{code:02d}"
    return str(code).strip()


def netgsm_error_message(code: Any) -> str:
    normalized = _normalize_netgsm_code(code)
    return NETGSM_ERROR_MESSAGES.get(normalized or "", "Unknown error")


class NetGSMProvider(HTTPProviderMixin):
    """Primary SMS provider for the Turkish market (NetGSM REST v2)."""

    name = "netgsm"

    def __init__(
        self,
        username: str | None,
        password: str | None,
        *,
        header: str = "TALYA SMART",
        api_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._username = username or ""
        self._password = password or ""
        self._header = header
        self._api_url = api_url
        self._timeout = timeout
        self._client = client
        if not self.configured:
            logger.warning(
                "NetGSM credentials not configured. SMS notifications will be disabled."
            )

    @property
    def configured(self) -> bool:
        return bool(self._username and self._password)

    @staticmethod
    def format_phone_number(phone: str) -> str:
        return format_netgsm_phone_number(phone)

    def _payload(self, messages: list[dict[str, str]], sender: str | None) -> dict[str, Any]:
        return {
            "msgheader": sender or self._header,
            "encoding": "TR",
            "iysfilter": "",
            "partnercode": "",
            "messages": messages,
        }

    async def _submit(
        self, messages: list[dict[str, str]], sender: str | None
    ) -> tuple[bool, str | None, str | None]:
        """Post ``messages`` and return ``(success, message_id, error)``."""

        try:
            async with self._http_client() as client:
                response = await client.post(
                    self._api_url,
                    json=self._payload(messages, sender),
                    auth=(self._username, self._password),
                    timeout=self._timeout,
                )
        except httpx.HTTPError as exc:
            logger.warning("NetGSM request failed: %s", describe_exception(exc))
            return False, None, f"NetGSM request failed: {describe_exception(exc)}"

        if not response.is_success:
            return (
                False,
                None,
                f"NetGSM API error: {response.status_code} - {response_error_text(response)}",
            )

        try:
            data = response.json()
        except ValueError:
            return False, None, "NetGSM API returned an invalid response"
        if not isinstance(data, dict):
            return False, None, "NetGSM API returned an invalid response"

        code = data.get("code")
        if _normalize_netgsm_code(code) != NETGSM_SUCCESS_CODE:
            return (
                False,
                None,
                f"NetGSM error code: {code} - {netgsm_error_message(code)}",
            )

        message_id = data.get("bulkid") or data.get("jobid") or data.get("jobID")
        return True, str(message_id) if message_id is not None else None, None

    async def send(
        self,
        destination: str,
        message: OutboundMessage,
        *,
        sender: str | None = None,
    ) -> DeliveryResult:
        if not self.configured:
            return DeliveryResult.failure(
                "NetGSM credentials not configured", provider=self.name, destination=destination
            )
        try:
            success, message_id, error = await self._submit(
                [{"msg": sms_text(message), "no": self.format_phone_number(destination)}],
                sender,
            )
        except Exception as exc:  # pragma: no cover - unexpected provider failure
            logger.exception("Unexpected NetGSM failure")
            return DeliveryResult.failure(
                describe_exception(exc), provider=self.name, destination=destination
            )
        return DeliveryResult(
            success=success,
            message_id=message_id,
            error=error,
            provider=self.name,
            destination=destination,
        )

    async def send_bulk(
        self,
        entries: Sequence[BulkEntry],
        *,
        sender: str | None = None,
    ) -> list[DeliveryResult]:
        """Send every entry in one request; the outcome applies to all of them."""

        if not entries:
            return []
        if not self.configured:
            return [
                DeliveryResult.failure(
                    "NetGSM credentials not configured",
                    provider=self.name,
                    destination=entry.to,
                )
                for entry in entries
            ]
        messages = [
            {"msg": sms_text(entry.message), "no": self.format_phone_number(entry.to)}
            for entry in entries
        ]
        try:
            success, message_id, error = await self._submit(messages, sender)
        except Exception as exc:  # pragma: no cover - unexpected provider failure
            logger.exception("Unexpected NetGSM bulk failure")
            success, message_id, error = False, None, describe_exception(exc)
        return [
            DeliveryResult(
                success=success,
                message_id=message_id,
                error=error,
                provider=self.name,
                destination=entry.to,
            )
            for entry in entries
        ]


class TwilioSMSProvider(HTTPProviderMixin, FanOutBulkMixin):
    """Fallback SMS provider using the Twilio Messages API."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
        *,
        api_base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._account_sid = account_sid or ""
        self._auth_token = auth_token or ""
        self._from_number = from_number or ""
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        if not self.configured:
            logger.warning(
                "Twilio credentials not configured. SMS notifications will be disabled."
            )

    @property
    def configured(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_number)

    @staticmethod
    def format_phone_number(phone: str) -> str:
        return format_e164_phone_number(phone)

    @property
    def _messages_url(self) -> str:
        return f"{self._api_base_url}/Accounts/{self._account_sid}/Messages.json"

    async def send(
        self,
        destination: str,
        message: OutboundMessage,
        *,
        sender: str | None = None,
    ) -> DeliveryResult:
        if not self.configured:
            return DeliveryResult.failure(
                "Twilio credentials not configured", provider=self.name, destination=destination
            )

        form = {
            "To": self.format_phone_number(destination),
            "From": sender or self._from_number,
            "Body": sms_text(message),
        }
        try:
            async with self._http_client() as client:
                response = await client.post(
                    self._messages_url,
                    data=form,
                    auth=(self._account_sid, self._auth_token),
                    timeout=self._timeout,
                )
            if not response.is_success:
                return DeliveryResult.failure(
                    f"Twilio API error: {self._error_detail(response)}",
                    provider=self.name,
                    destination=destination,
                )
            data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Twilio request failed: %s", describe_exception(exc))
            return DeliveryResult.failure(
                f"Twilio request failed: {describe_exception(exc)}",
                provider=self.name,
                destination=destination,
            )
        except ValueError:
            return DeliveryResult.failure(
                "Twilio API returned an invalid response",
                provider=self.name,
                destination=destination,
            )
        except Exception as exc:  # pragma: no cover - unexpected provider failure
            logger.exception("Unexpected Twilio failure")
            return DeliveryResult.failure(
                describe_exception(exc), provider=self.name, destination=destination
            )

        sid = data.get("sid") if isinstance(data, dict) else None
        if not sid:
            return DeliveryResult.failure(
                "Twilio API response did not include a message sid",
                provider=self.name,
                destination=destination,
            )
        return DeliveryResult(
            success=True, message_id=str(sid), provider=self.name, destination=destination
        )

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return response.reason_phrase or str(response.status_code)


def create_sms_provider(
    settings: Settings, *, client: httpx.AsyncClient | None = None
) -> NetGSMProvider | TwilioSMSProvider | None:
    """Select the SMS provider once, based on which credentials are present.

    NetGSM wins when its username and password exist, Twilio is used when its
    account sid, token and number exist, otherwise the channel is disabled.
    """

    if settings.netgsm_configured:
        return NetGSMProvider(
            settings.netgsm_username,
            settings.netgsm_password,
            header=settings.netgsm_header,
            api_url=settings.netgsm_api_url,
            timeout=settings.provider_timeout_seconds,
            client=client,
        )

    if settings.twilio_configured:
        return TwilioSMSProvider(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            settings.twilio_phone_number,
            api_base_url=settings.twilio_api_base_url,
            timeout=settings.provider_timeout_seconds,
            client=client,
        )

    logger.warning("No SMS provider configured")
    return None


__all__ = [
    "NETGSM_ERROR_MESSAGES",
    "NetGSMProvider",
    "TwilioSMSProvider",
    "create_sms_provider",
    "format_e164_phone_number",
    "format_netgsm_phone_number",
    "netgsm_error_message",
    "sms_text",
]
