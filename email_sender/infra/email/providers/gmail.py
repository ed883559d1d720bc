"""Gmail API sender using a Google service account.

The message is serialized as a raw RFC 822 document, base64url-encoded with
the padding stripped, and submitted through ``users.messages.send``. The
Google API client is synchronous, so the call runs in a worker thread.
httplib2 connections are not thread-safe; each send executes on its own
authorized transport.

Usage:
    sender = GmailEmailSender(get_gmail_settings())
    result = await sender.send_email(message, renderer)
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import TYPE_CHECKING, Any

from google.auth import exceptions as google_auth_exceptions
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
import httplib2

from email_sender.infra.email.exceptions import (
    EmailConfigurationError,
    EmailTransmissionError,
)
from email_sender.infra.email.mime import build_mime_message

from .base import BaseEmailSender, EmailDeliveryResult

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

    from email_sender.core.settings.email import GmailSettings
    from email_sender.infra.email.providers.base import ResolvedBody
    from email_sender.infra.email.schemas import EmailAddress, EmailMessage

logger = logging.getLogger(__name__)

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"
GMAIL_USER_ID = "me"


def encode_raw_message(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding (Gmail ``raw`` field)."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


class GmailEmailSender(BaseEmailSender):
    """Gmail API email sender.

    Example:
        settings = GmailSettings(
            credentials_path="/secrets/service-account.json",
            impersonate_email="noreply@example.com",
            default_from_email="noreply@example.com",
        )
        sender = GmailEmailSender(settings)
        result = await sender.send_email(message)
    """

    def __init__(
        self,
        settings: GmailSettings,
        *,
        service: Any | None = None,
        credentials: Credentials | None = None,
    ) -> None:
        """Initialize Gmail sender.

        Args:
            settings: Gmail settings with service account credentials
            service: Optional pre-built Gmail API resource
            credentials: Credentials used to authorize each request's
                transport; loaded from settings when no service is given

        Raises:
            EmailConfigurationError: If credentials are missing or invalid
        """
        super().__init__(settings)
        self._gmail_settings = settings

        if service is None:
            credentials = self._load_credentials()
            service = self._create_service(credentials)
        self._service = service
        self._credentials = credentials

        logger.info(
            "Gmail sender initialized",
            extra={
                "impersonate_email": settings.impersonate_email,
                "application_name": settings.application_name,
            },
        )

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "gmail"

    def _load_credentials(self) -> Credentials:
        """Load scoped (and optionally delegated) service account credentials."""
        settings = self._gmail_settings
        if not settings.has_credentials:
            msg = "Gmail sender requires credentials_json or credentials_path"
            raise EmailConfigurationError(
                msg,
                provider=self.provider_name,
                missing_fields=["credentials_json", "credentials_path"],
            )

        try:
            if settings.credentials_json is not None:
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(settings.credentials_json.get_secret_value()),
                    scopes=[GMAIL_SEND_SCOPE],
                )
            else:
                credentials = service_account.Credentials.from_service_account_file(
                    str(settings.credentials_path),
                    scopes=[GMAIL_SEND_SCOPE],
                )
        except (ValueError, OSError) as e:
            msg = f"Failed to load Gmail credentials: {e}"
            raise EmailConfigurationError(msg, provider=self.provider_name, cause=e) from e

        if settings.impersonate_email:
            credentials = credentials.with_subject(settings.impersonate_email)
        return credentials

    def _create_service(self, credentials: Credentials) -> Any:
        """Build the Gmail API resource."""
        try:
            return build("gmail", "v1", credentials=credentials, cache_discovery=False)
        except (ValueError, OSError) as e:
            msg = f"Failed to initialize Gmail service: {e}"
            raise EmailConfigurationError(msg, provider=self.provider_name, cause=e) from e

    def _authorized_http(self) -> AuthorizedHttp | None:
        """Create a fresh authorized transport for one request."""
        if self._credentials is None:
            return None
        return AuthorizedHttp(
            self._credentials,
            http=httplib2.Http(timeout=self._gmail_settings.timeout),
        )

    def build_raw_message(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> str:
        """Serialize the message into the Gmail ``raw`` format."""
        mime_message = build_mime_message(message, sender, body, include_bcc=True)
        return encode_raw_message(mime_message.as_bytes())

    def _send_sync(self, raw: str) -> dict[str, Any]:
        request = self._service.users().messages().send(userId=GMAIL_USER_ID, body={"raw": raw})
        return request.execute(http=self._authorized_http())

    async def _do_send(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> EmailDeliveryResult:
        """Send email via the Gmail API.

        Args:
            message: Email message to send
            sender: Resolved sender address
            body: Resolved body content

        Returns:
            EmailDeliveryResult with the Gmail message ID
        """
        raw = self.build_raw_message(message, sender, body)

        try:
            response = await asyncio.to_thread(self._send_sync, raw)
        except HttpError as e:
            status_code = getattr(e.resp, "status", None)
            msg = f"Gmail API error ({status_code}): {e}"
            raise EmailTransmissionError(
                msg,
                provider=self.provider_name,
                status_code=int(status_code) if status_code is not None else None,
                error_code="API_ERROR",
                cause=e,
            ) from e
        except google_auth_exceptions.RefreshError as e:
            msg = f"Gmail credential refresh failed: {e}"
            raise self._transmission_error(msg, "AUTH_FAILED", e) from e
        except google_auth_exceptions.TransportError as e:
            msg = f"Gmail auth transport error: {e}"
            raise self._transmission_error(msg, "CONNECTION_ERROR", e) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            msg = f"Gmail network error: {e}"
            raise self._transmission_error(msg, "CONNECTION_ERROR", e) from e

        return EmailDeliveryResult(
            message_id=response.get("id"),
            provider=self.provider_name,
            recipients_accepted=message.all_recipients,
            metadata={"thread_id": response.get("threadId")},
        )

    def _transmission_error(
        self,
        msg: str,
        error_code: str,
        cause: Exception,
    ) -> EmailTransmissionError:
        return EmailTransmissionError(
            msg,
            provider=self.provider_name,
            error_code=error_code,
            cause=cause,
        )


__all__ = ["GMAIL_SEND_SCOPE", "GmailEmailSender", "encode_raw_message"]
