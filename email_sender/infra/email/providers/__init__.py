"""Email sender implementations.

This package contains all email sender implementations:
- SMTP: SMTP relay delivery (aiosmtplib)
- SendGrid: SendGrid v3 HTTP API (httpx)
- Gmail: Gmail API with a service account (google-api-python-client)
- Console: Log emails to console (development)

Usage:
    from email_sender.infra.email.providers import SendGridEmailSender

    sender = SendGridEmailSender(get_sendgrid_settings())
    result = await sender.send_email(message, renderer)
"""

from .base import (
    BaseEmailSender,
    EmailDeliveryResult,
    EmailSender,
    ResolvedBody,
)
from .console import ConsoleEmailSender
from .gmail import GmailEmailSender
from .sendgrid import SendGridEmailSender
from .smtp import SMTPEmailSender

__all__ = [
    "BaseEmailSender",
    "ConsoleEmailSender",
    "EmailDeliveryResult",
    "EmailSender",
    "GmailEmailSender",
    "ResolvedBody",
    "SMTPEmailSender",
    "SendGridEmailSender",
]
