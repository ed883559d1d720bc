"""Base email sender protocol and abstract class.

Defines the contract that all email senders implement.

Usage:
    class MySender(BaseEmailSender):
        @property
        def provider_name(self) -> str:
            return "mine"

        async def _do_send(
            self, message: EmailMessage, sender: EmailAddress, body: ResolvedBody
        ) -> EmailDeliveryResult:
            # Transmit once, raise EmailTransmissionError on failure
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

from email_sender.infra.email.content import html_to_text, is_html, substitute_placeholders
from email_sender.infra.email.exceptions import (
    EmailConfigurationError,
    EmailRenderError,
    EmailSenderError,
    EmailValidationError,
)
from email_sender.infra.email.schemas import EmailAddress

if TYPE_CHECKING:
    from email_sender.core.settings.email import SenderSettings
    from email_sender.infra.email.schemas import EmailMessage
    from email_sender.infra.email.templates import HtmlRenderer

logger = logging.getLogger(__name__)

BodySource = Literal["renderer", "placeholders", "raw"]


@dataclass(frozen=True)
class EmailDeliveryResult:
    """Result of a successful delivery.

    Failures are raised as ``EmailSenderError``, never returned.

    Attributes:
        message_id: Provider-assigned message ID (for tracking)
        provider: Provider name (smtp, sendgrid, gmail, console)
        recipients_accepted: Recipients handed to the provider
        recipients_rejected: Recipients the provider refused (SMTP only)
        duration_ms: Time taken to send in milliseconds
        metadata: Provider-specific metadata
    """

    message_id: str | None
    provider: str
    recipients_accepted: list[str] = field(default_factory=list)
    recipients_rejected: list[str] = field(default_factory=list)
    duration_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedBody:
    """Final body content chosen for a message.

    Attributes:
        content: Body exactly as it will be transmitted.
        is_html: Whether the content is HTML.
        source: How the content was produced.
    """

    content: str
    is_html: bool
    source: BodySource

    @property
    def content_type(self) -> str:
        """MIME type of ``content``."""
        return "text/html" if self.is_html else "text/plain"

    @property
    def text(self) -> str:
        """Plain-text version of the body."""
        return html_to_text(self.content) if self.is_html else self.content


@runtime_checkable
class EmailSender(Protocol):
    """Protocol defining the email sender interface.

    Example:
        async def notify(sender: EmailSender, message: EmailMessage) -> None:
            result = await sender.send_email(message)
            print(f"Sent: {result.message_id}")
    """

    async def send_email(
        self,
        message: EmailMessage,
        renderer: HtmlRenderer | None = None,
    ) -> EmailDeliveryResult:
        """Send an email message.

        Args:
            message: The email message to send
            renderer: Optional HTML renderer for the body

        Returns:
            EmailDeliveryResult for the accepted message

        Raises:
            EmailSenderError: On any failure
        """
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name (e.g., 'smtp', 'sendgrid')."""
        ...


class BaseEmailSender(ABC):
    """Abstract base class for email senders.

    ``send_email`` applies the same policy for every provider:
    - Resolve the sender (explicit ``from_``, else the configured default)
    - Reject messages without recipients
    - Resolve the body (renderer, placeholder substitution, or raw body)
    - Call ``_do_send()`` exactly once
    - Log failures and raise them as ``EmailSenderError``

    Subclasses must implement:
    - _do_send(): Map the message to the wire format and transmit it
    - provider_name property
    """

    def __init__(self, settings: SenderSettings) -> None:
        """Initialize sender with configuration.

        Args:
            settings: Provider settings including the default sender
        """
        self._settings = settings

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    async def _do_send(
        self,
        message: EmailMessage,
        sender: EmailAddress,
        body: ResolvedBody,
    ) -> EmailDeliveryResult:
        """Implement the actual transmission.

        Args:
            message: The validated email message
            sender: Resolved sender address
            body: Resolved body content

        Returns:
            EmailDeliveryResult for the accepted message

        Raises:
            EmailTransmissionError: If the provider rejects the message
        """
        ...

    @property
    def settings(self) -> SenderSettings:
        """Get the provider settings."""
        return self._settings

    async def send_email(
        self,
        message: EmailMessage,
        renderer: HtmlRenderer | None = None,
    ) -> EmailDeliveryResult:
        """Send an email with validation, body resolution, timing and logging.

        Args:
            message: The email message to send
            renderer: Optional HTML renderer for the body

        Returns:
            EmailDeliveryResult with timing filled in

        Raises:
            EmailConfigurationError: No sender address can be resolved
            EmailValidationError: No recipients, or a blank recipient address
            EmailRenderError: The renderer failed
            EmailTransmissionError: The provider call failed
            EmailSenderError: Any other failure while composing the email
        """
        start_time = time.perf_counter()
        log_extra: dict[str, Any] = {
            "provider": self.provider_name,
            "recipients": message.all_recipients,
            "subject": message.subject,
        }

        try:
            sender = self.resolve_sender(message)
            self.validate_recipients(message)
            body = await self.resolve_body(message, renderer)

            logger.info(f"Sending email via {self.provider_name}", extra=log_extra)
            result = await self._do_send(message, sender, body)

        except EmailSenderError as e:
            e.provider = e.provider or self.provider_name
            logger.error(
                f"Email send failed via {self.provider_name}",
                exc_info=e.cause is not None,
                extra={
                    **log_extra,
                    "error": e.message,
                    "error_type": type(e).__name__,
                    "duration_ms": self._elapsed_ms(start_time),
                },
            )
            raise
        except Exception as e:
            logger.exception(
                f"Unexpected error in {self.provider_name} sender",
                extra={
                    **log_extra,
                    "error": str(e),
                    "duration_ms": self._elapsed_ms(start_time),
                },
            )
            msg = f"Failed to send email via {self.provider_name}: {e}"
            raise EmailSenderError(msg, provider=self.provider_name, cause=e) from e

        if result.duration_ms is None:
            result = replace(result, duration_ms=self._elapsed_ms(start_time))

        logger.info(
            f"Email sent via {self.provider_name}",
            extra={
                **log_extra,
                "message_id": result.message_id,
                "duration_ms": result.duration_ms,
            },
        )
        return result

    def resolve_sender(self, message: EmailMessage) -> EmailAddress:
        """Pick the sender: explicit ``from_`` first, then the configured default.

        Raises:
            EmailConfigurationError: If neither is available
        """
        if message.from_ is not None and message.from_.email:
            return message.from_

        if self._settings.has_default_sender:
            return EmailAddress(
                email=self._settings.default_from_email,
                name=self._settings.default_from_name,
            )

        msg = "No sender address: set message.from_ or configure default_from_email"
        raise EmailConfigurationError(
            msg,
            provider=self.provider_name,
            missing_fields=["default_from_email"],
        )

    def validate_recipients(self, message: EmailMessage) -> None:
        """Reject messages without recipients or with blank addresses.

        Raises:
            EmailValidationError: If validation fails
        """
        if not message.to:
            msg = "At least one 'to' recipient is required"
            raise EmailValidationError(msg, provider=self.provider_name, field="to")

        for field_name in ("to", "cc", "bcc"):
            for address in getattr(message, field_name):
                if not address.email or not address.email.strip():
                    msg = f"Recipient in '{field_name}' has an empty email address"
                    raise EmailValidationError(msg, provider=self.provider_name, field=field_name)

    async def resolve_body(
        self,
        message: EmailMessage,
        renderer: HtmlRenderer | None = None,
    ) -> ResolvedBody:
        """Resolve the final body content.

        1. A renderer's output is used verbatim as HTML.
        2. Without a renderer, ``body_template`` + ``model`` go through
           ``{{FieldName}}`` substitution.
        3. Otherwise ``body`` is used verbatim.

        The content type of (2) and (3) is detected from the markup.

        Raises:
            EmailRenderError: If the renderer fails
        """
        if renderer is not None:
            try:
                rendered = renderer.render_email(message)
                if inspect.isawaitable(rendered):
                    rendered = await rendered
            except EmailRenderError:
                raise
            except Exception as e:
                msg = f"Renderer {type(renderer).__name__} failed: {e}"
                raise EmailRenderError(msg, provider=self.provider_name, cause=e) from e
            return ResolvedBody(content=rendered, is_html=True, source="renderer")

        if message.body_template and message.model is not None:
            content = substitute_placeholders(message.body_template, message.model)
            return ResolvedBody(content=content, is_html=is_html(content), source="placeholders")

        return ResolvedBody(content=message.body, is_html=is_html(message.body), source="raw")

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)


__all__ = [
    "BaseEmailSender",
    "EmailDeliveryResult",
    "EmailSender",
    "ResolvedBody",
]
