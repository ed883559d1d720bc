"""Console email sender for development.

Logs emails instead of sending them. Useful for local development and
debugging templates.

Usage:
    sender = ConsoleEmailSender(get_console_settings())
    result = await sender.send_email(message)  # Logged, not delivered
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
import uuid

from .base import BaseEmailSender, EmailDeliveryResult

if TYPE_CHECKING:
    from email_sender.core.settings.email import SenderSettings
    from email_sender.infra.email.providers.base import ResolvedBody
    from email_sender.infra.email.schemas import EmailAddress, EmailMessage

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 500


class ConsoleEmailSender(BaseEmailSender):
    """Console email sender for development.

    Always succeeds after validation; nothing leaves the process.
    """

    def __init__(self, settings: SenderSettings) -> None:
        super().__init__(settings)
        logger.info("Console email sender initialized (development mode)")

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "console"

    def format_email(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
        message_id: str,
    ) -> str:
        """Format the email as a human-readable block."""
        separator = "=" * 60
        lines = [
            "",
            separator,
            "EMAIL (Console Backend - Development Mode)",
            separator,
            f"Message-ID: {message_id}",
            f"From: {sender.formatted()}",
            f"To: {', '.join(a.formatted() for a in message.to)}",
        ]
        if message.cc:
            lines.append(f"Cc: {', '.join(a.formatted() for a in message.cc)}")
        if message.bcc:
            lines.append(f"Bcc: {', '.join(a.formatted() for a in message.bcc)}")

        lines.extend([
            f"Subject: {message.subject}",
            f"Content-Type: {body.content_type}",
        ])
        if message.attachments:
            lines.append(
                "Attachments: "
                + ", ".join(f"{a.file_name} ({a.content_type})" for a in message.attachments)
            )

        lines.append(separator)
        lines.append(body.content[:PREVIEW_LENGTH])
        if len(body.content) > PREVIEW_LENGTH:
            lines.append(f"... ({len(body.content) - PREVIEW_LENGTH} more characters)")
        lines.extend([separator, ""])
        return "\n".join(lines)

    async def _do_send(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> EmailDeliveryResult:
        """Log email to console.

        Returns:
            EmailDeliveryResult (always accepted)
        """
        message_id = f"console-{uuid.uuid4()}"
        logger.info(
            self.format_email(message, sender, body, message_id),
            extra={"message_id": message_id, "body_source": body.source},
        )

        return EmailDeliveryResult(
            message_id=message_id,
            provider=self.provider_name,
            recipients_accepted=message.all_recipients,
            metadata={"mode": "development", "body_source": body.source},
        )


__all__ = ["ConsoleEmailSender"]
