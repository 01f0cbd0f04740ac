"""Email channel provider delivering notifications via SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.domain.entities import DeliveryResult, OutboundMessage

from .base import FanOutBulkMixin

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        try:
            return "; ".join(str(item) for item in parsed)
        except TypeError:
            return None

    return None


def _describe_sendgrid_exception(exc: Exception) -> str:
    """Log a SendGrid API error and return the reason stored on the event."""

    status_code = getattr(exc, "status_code", None)
    body = getattr(exc, "body", None)
    details = _extract_sendgrid_error_details(body)

    if status_code and details:
        logger.error(
            "SendGrid API request failed with status %s: %s", status_code, details
        )
        return f"SendGrid API error: {status_code} {details}"
    if status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
        return f"SendGrid API error: {status_code}"
    if details:
        logger.error("SendGrid API request failed: %s", details)
        return f"SendGrid API error: {details}"
    logger.exception("Error sending email via SendGrid: %s", exc)
    return f"SendGrid request failed: {exc.__class__.__name__}"


def _describe_unsuccessful_response(response: Any) -> str:
    """Log details from an unsuccessful SendGrid response object."""

    status_code = getattr(response, "status_code", None)
    body = getattr(response, "body", None)
    details = _extract_sendgrid_error_details(body)

    if details:
        logger.error(
            "SendGrid API responded with status %s: %s", status_code, details
        )
        return f"SendGrid API error: {status_code} {details}"
    logger.error("SendGrid API responded with status %s", status_code)
    return f"SendGrid API error: {status_code}"


def _message_id(response: Any) -> str | None:
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return headers.get("X-Message-Id") or headers.get("x-message-id")
    except AttributeError:
        return None


def render_email_html(message: OutboundMessage) -> str:
    """Wrap the plain notification text in a minimal HTML body."""

    paragraphs = "".join(
        f"<p>{html.escape(line)}</p>" for line in message.body.splitlines() if line.strip()
    )
    return f"<h2>{html.escape(message.title)}</h2>{paragraphs}"


class SendGridEmailProvider(FanOutBulkMixin):
    """Send notification emails using the configured SendGrid credentials."""

    name = "sendgrid"

    def __init__(
        self,
        api_key: str | None,
        sender: str | None,
        *,
        sender_name: str | None = None,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._sender_name = sender_name

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def _build_mail(self, recipient: str, message: OutboundMessage) -> Mail:
        from_email: Any = self._sender
        if self._sender_name:
            from_email = (self._sender, self._sender_name)
        return Mail(
            from_email=from_email,
            to_emails=recipient,
            subject=message.title,
            html_content=render_email_html(message),
            plain_text_content=message.body,
        )

    def _deliver(self, recipient: str, message: OutboundMessage) -> DeliveryResult:
        if not self.configured:
            logger.info("SendGrid configuration incomplete; skipping email delivery")
            return DeliveryResult.failure(
                "SendGrid API key not configured", provider=self.name, destination=recipient
            )

        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(self._build_mail(recipient, message))
        except Exception as exc:  # network failures depend on environment
            return DeliveryResult.failure(
                _describe_sendgrid_exception(exc), provider=self.name, destination=recipient
            )

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            return DeliveryResult.failure(
                _describe_unsuccessful_response(response),
                provider=self.name,
                destination=recipient,
            )

        return DeliveryResult(
            success=True,
            message_id=_message_id(response),
            provider=self.name,
            destination=recipient,
        )

    async def send(self, destination: str, message: OutboundMessage) -> DeliveryResult:
        """Send ``message`` to ``destination`` without blocking the event loop."""

        return await to_thread.run_sync(self._deliver, destination, message)


__all__ = ["SendGridEmailProvider", "render_email_html"]
