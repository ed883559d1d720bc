"""SMTP relay sender using aiosmtplib.

Features:
- Native async support (aiosmtplib)
- STARTTLS / implicit TLS / plain connections
- Optional authentication
- Bcc delivered through the envelope only (never written as a header)

Usage:
    sender = SMTPEmailSender(get_smtp_settings())
    result = await sender.send_email(message)
"""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING

import aiosmtplib

from email_sender.infra.email.exceptions import EmailTransmissionError
from email_sender.infra.email.mime import build_mime_message, make_message_id

from .base import BaseEmailSender, EmailDeliveryResult

if TYPE_CHECKING:
    from email_sender.core.settings.email import SmtpSettings
    from email_sender.infra.email.providers.base import ResolvedBody
    from email_sender.infra.email.schemas import EmailAddress, EmailMessage

logger = logging.getLogger(__name__)


class SMTPEmailSender(BaseEmailSender):
    """SMTP email sender using native async aiosmtplib.

    Example:
        settings = SmtpSettings(
            host="smtp.example.com",
            port=587,
            username="user",
            password="pass",
            default_from_email="noreply@example.com",
        )
        sender = SMTPEmailSender(settings)
        result = await sender.send_email(message)
    """

    def __init__(self, settings: SmtpSettings) -> None:
        """Initialize SMTP sender.

        Args:
            settings: SMTP connection settings
        """
        super().__init__(settings)
        self._smtp_settings = settings

        logger.info(
            "SMTP sender initialized",
            extra={
                "smtp_url": settings.get_smtp_url(),
                "use_tls": settings.use_tls,
                "use_ssl": settings.use_ssl,
            },
        )

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "smtp"

    def _create_ssl_context(self) -> ssl.SSLContext | None:
        """Create SSL context for TLS/SSL connections.

        Returns:
            SSLContext or None if no TLS/SSL
        """
        settings = self._smtp_settings
        if not (settings.use_tls or settings.use_ssl):
            return None

        context = ssl.create_default_context()
        if not settings.validate_certs:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    async def _do_send(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> EmailDeliveryResult:
        """Send email via SMTP.

        Args:
            message: Email message to send
            sender: Resolved sender address
            body: Resolved body content

        Returns:
            EmailDeliveryResult with accepted and refused recipients
        """
        settings = self._smtp_settings
        message_id = make_message_id(sender.email.rpartition("@")[2] or settings.host)
        mime_message = build_mime_message(message, sender, body, message_id=message_id)
        recipients = message.all_recipients

        smtp = aiosmtplib.SMTP(
            hostname=settings.host,
            port=settings.port,
            use_tls=settings.use_ssl,  # Implicit TLS
            start_tls=settings.use_tls,  # STARTTLS
            tls_context=self._create_ssl_context(),
            timeout=settings.timeout,
        )

        try:
            async with smtp:
                if settings.requires_auth:
                    await smtp.login(settings.username, settings.password.get_secret_value())

                errors, _response = await smtp.send_message(
                    mime_message,
                    sender=sender.email,
                    recipients=recipients,
                )
        except aiosmtplib.SMTPAuthenticationError as e:
            raise self._transmission_error(f"SMTP authentication failed: {e}", "AUTH_FAILED", e) from e
        except aiosmtplib.SMTPRecipientsRefused as e:
            raise self._transmission_error(f"All recipients refused: {e}", "RECIPIENTS_REFUSED", e) from e
        except aiosmtplib.SMTPConnectError as e:
            raise self._transmission_error(f"SMTP connection failed: {e}", "CONNECTION_ERROR", e) from e
        except aiosmtplib.SMTPException as e:
            raise self._transmission_error(f"SMTP error: {e}", "SMTP_ERROR", e) from e
        except OSError as e:
            raise self._transmission_error(f"SMTP network error: {e}", "CONNECTION_ERROR", e) from e

        recipients_rejected = list(errors.keys()) if errors else []
        recipients_accepted = [r for r in recipients if r not in recipients_rejected]

        if recipients_rejected:
            logger.warning(
                "Some SMTP recipients rejected",
                extra={
                    "message_id": message_id,
                    "rejected": recipients_rejected,
                    "errors": {k: str(v) for k, v in errors.items()},
                },
            )

        return EmailDeliveryResult(
            message_id=message_id,
            provider=self.provider_name,
            recipients_accepted=recipients_accepted,
            recipients_rejected=recipients_rejected,
            metadata={
                "host": settings.host,
                "port": settings.port,
            },
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


__all__ = ["SMTPEmailSender"]
