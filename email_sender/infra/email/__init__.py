"""Email sending infrastructure.

This package provides a provider-agnostic way to compose and send email:
- A normalized message model and fluent builder
- Interchangeable senders (SMTP, SendGrid, Gmail, Console)
- An interchangeable HTML renderer (Jinja2 views with theme fallback)
- One error hierarchy for every failure

Basic Usage:
    from email_sender.core.settings import get_sendgrid_settings, get_template_settings
    from email_sender.infra.email import (
        EmailMessageBuilder,
        JinjaHtmlRenderer,
        SendGridEmailSender,
    )

    message = (
        EmailMessageBuilder()
        .to("user@example.com", "User")
        .subject("Welcome!")
        .body("Welcome to our service.")
        .build()
    )

    sender = SendGridEmailSender(get_sendgrid_settings())
    result = await sender.send_email(message, JinjaHtmlRenderer(get_template_settings()))
"""

from __future__ import annotations

from .builder import EmailMessageBuilder
from .content import html_to_text, is_html, substitute_placeholders
from .exceptions import (
    EmailConfigurationError,
    EmailRenderError,
    EmailSenderError,
    EmailTransmissionError,
    EmailValidationError,
    TemplateNotFoundError,
)
from .providers import (
    BaseEmailSender,
    ConsoleEmailSender,
    EmailDeliveryResult,
    EmailSender,
    GmailEmailSender,
    ResolvedBody,
    SendGridEmailSender,
    SMTPEmailSender,
)
from .schemas import (
    EmailAddress,
    EmailAttachment,
    EmailMessage,
    EmailRenderOptions,
)
from .templates import (
    DEFAULT_VIEW,
    HtmlRenderer,
    JinjaHtmlRenderer,
    resolve_view_name,
)

__all__ = [
    "DEFAULT_VIEW",
    # Senders
    "BaseEmailSender",
    "ConsoleEmailSender",
    # Schemas
    "EmailAddress",
    "EmailAttachment",
    # Errors
    "EmailConfigurationError",
    "EmailDeliveryResult",
    "EmailMessage",
    # Builder
    "EmailMessageBuilder",
    "EmailRenderError",
    "EmailRenderOptions",
    "EmailSender",
    "EmailSenderError",
    "EmailTransmissionError",
    "EmailValidationError",
    "GmailEmailSender",
    # Rendering
    "HtmlRenderer",
    "JinjaHtmlRenderer",
    "ResolvedBody",
    "SMTPEmailSender",
    "SendGridEmailSender",
    "TemplateNotFoundError",
    # Content helpers
    "html_to_text",
    "is_html",
    "resolve_view_name",
    "substitute_placeholders",
]
