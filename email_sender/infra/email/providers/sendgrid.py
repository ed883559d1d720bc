"""SendGrid email sender.

SendGrid API v3 sender with:
- Async HTTP using httpx
- API key authentication
- Click, open and subscription tracking toggles
- Sandbox mode
- Base64 attachments

Usage:
    sender = SendGridEmailSender(get_sendgrid_settings())
    result = await sender.send_email(message, renderer)
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any

import httpx

from email_sender.infra.email.exceptions import (
    EmailConfigurationError,
    EmailTransmissionError,
    EmailValidationError,
)

from .base import BaseEmailSender, EmailDeliveryResult

if TYPE_CHECKING:
    from email_sender.core.settings.email import SendGridSettings
    from email_sender.infra.email.providers.base import ResolvedBody
    from email_sender.infra.email.schemas import EmailAddress, EmailMessage

logger = logging.getLogger(__name__)


def _address_payload(address: EmailAddress) -> dict[str, str]:
    data = {"email": address.email}
    if address.name:
        data["name"] = address.name
    return data


class SendGridEmailSender(BaseEmailSender):
    """SendGrid email sender using API v3.

    Example:
        settings = SendGridSettings(
            api_key="SG.xxx...",
            default_from_email="sender@example.com",
        )
        sender = SendGridEmailSender(settings)
        result = await sender.send_email(message)
    """

    SEND_ENDPOINT = "/mail/send"

    def __init__(
        self,
        settings: SendGridSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize SendGrid sender.

        Args:
            settings: SendGrid settings with API key
            client: Optional shared HTTP client; a short-lived client is
                opened per send otherwise

        Raises:
            EmailConfigurationError: If API key is missing
        """
        super().__init__(settings)

        if settings.api_key is None or not settings.api_key.get_secret_value().strip():
            msg = "SendGrid sender requires api_key"
            raise EmailConfigurationError(
                msg,
                provider=self.provider_name,
                missing_fields=["api_key"],
            )

        self._sendgrid_settings = settings
        self._api_key = settings.api_key.get_secret_value()
        self._base_url = settings.api_endpoint.rstrip("/")
        self._client = client

        logger.info(
            "SendGrid sender initialized",
            extra={
                "base_url": self._base_url,
                "sandbox_mode": settings.sandbox_mode,
            },
        )

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "sendgrid"

    def build_payload(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> dict[str, Any]:
        """Build SendGrid API payload.

        Args:
            message: Email message
            sender: Resolved sender address
            body: Resolved body content

        Returns:
            Dict payload for SendGrid API

        Raises:
            EmailValidationError: If the body has no text or HTML content
        """
        settings = self._sendgrid_settings

        personalization: dict[str, Any] = {
            "to": [_address_payload(address) for address in message.to],
        }
        if message.cc:
            personalization["cc"] = [_address_payload(address) for address in message.cc]
        if message.bcc:
            personalization["bcc"] = [_address_payload(address) for address in message.bcc]

        payload: dict[str, Any] = {
            "personalizations": [personalization],
            "from": _address_payload(sender),
            "subject": message.subject,
        }

        # SendGrid requires text/plain before text/html
        content_parts: list[dict[str, str]] = []
        text = body.text
        if text:
            content_parts.append({"type": "text/plain", "value": text})
        if body.is_html and body.content:
            content_parts.append({"type": "text/html", "value": body.content})
        if not content_parts:
            msg = "SendGrid requires a non-empty body"
            raise EmailValidationError(msg, provider=self.provider_name, field="body")
        payload["content"] = content_parts

        if message.attachments:
            payload["attachments"] = [
                {
                    "content": base64.b64encode(attachment.content).decode("ascii"),
                    "filename": attachment.file_name,
                    "type": attachment.content_type,
                    "disposition": "attachment",
                }
                for attachment in message.attachments
            ]

        payload["tracking_settings"] = {
            "click_tracking": {
                "enable": settings.enable_click_tracking,
                "enable_text": settings.enable_click_tracking,
            },
            "open_tracking": {"enable": settings.enable_open_tracking},
            "subscription_tracking": {"enable": settings.enable_subscription_tracking},
        }

        if settings.sandbox_mode:
            payload["mail_settings"] = {"sandbox_mode": {"enable": True}}

        return payload

    async def _do_send(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> EmailDeliveryResult:
        """Send email via SendGrid API.

        Args:
            message: Email message to send
            sender: Resolved sender address
            body: Resolved body content

        Returns:
            EmailDeliveryResult with SendGrid message ID
        """
        payload = self.build_payload(message, sender, body)

        try:
            response = await self._post(payload)
        except httpx.TimeoutException as e:
            msg = "SendGrid API timeout"
            raise EmailTransmissionError(
                msg, provider=self.provider_name, error_code="TIMEOUT", cause=e
            ) from e
        except httpx.HTTPError as e:
            msg = f"SendGrid HTTP error: {e}"
            raise EmailTransmissionError(
                msg, provider=self.provider_name, error_code="HTTP_ERROR", cause=e
            ) from e

        if not response.is_success:
            msg = f"SendGrid API error ({response.status_code}): {self._error_detail(response)}"
            raise EmailTransmissionError(
                msg,
                provider=self.provider_name,
                status_code=response.status_code,
                error_code=self._classify_http_error(response.status_code),
            )

        request_id = response.headers.get("X-Request-Id")
        return EmailDeliveryResult(
            message_id=response.headers.get("X-Message-Id", f"sg-{request_id or 'unknown'}"),
            provider=self.provider_name,
            recipients_accepted=message.all_recipients,
            metadata={
                "request_id": request_id,
                "status_code": response.status_code,
                "sandbox_mode": self._sendgrid_settings.sandbox_mode,
            },
        )

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self._base_url}{self.SEND_ENDPOINT}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        timeout = self._sendgrid_settings.timeout

        if self._client is not None:
            return await self._client.post(url, json=payload, headers=headers, timeout=timeout)

        async with httpx.AsyncClient() as client:
            return await client.post(url, json=payload, headers=headers, timeout=timeout)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Extract SendGrid's error messages from a failed response."""
        try:
            error_json = response.json()
        except ValueError:
            return response.text

        if isinstance(error_json, dict) and "errors" in error_json:
            return "; ".join(
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in error_json["errors"]
            )
        return response.text

    @staticmethod
    def _classify_http_error(status_code: int) -> str:
        """Classify HTTP status code into error code.

        Args:
            status_code: HTTP status code

        Returns:
            Error code string
        """
        if status_code == 401:
            return "AUTH_FAILED"
        if status_code == 403:
            return "FORBIDDEN"
        if status_code == 429:
            return "RATE_LIMITED"
        if status_code == 400:
            return "BAD_REQUEST"
        if status_code >= 500:
            return "SERVER_ERROR"
        return "API_ERROR"


__all__ = ["SendGridEmailSender"]
