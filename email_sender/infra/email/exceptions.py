"""Exceptions raised by email senders and renderers.

Every failure surfaced by ``send_email`` is an ``EmailSenderError`` so callers
can catch one type; the subclasses tell configuration, validation, rendering,
and transmission failures apart.
"""

from __future__ import annotations


class EmailSenderError(Exception):
    """Base exception for email sending errors.

    Attributes:
        message: Human-readable error message.
        provider: Provider name (smtp, sendgrid, gmail, console) if known.
        cause: The original exception, when this error wraps one.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.cause = cause
        super().__init__(message)


class EmailConfigurationError(EmailSenderError):
    """Raised when a credential or a resolvable sender address is missing."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        missing_fields: list[str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.missing_fields = missing_fields or []
        super().__init__(message, provider=provider, cause=cause)


class EmailValidationError(EmailSenderError):
    """Raised when a message is missing required fields at send time."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        field: str | None = None,
    ) -> None:
        self.field = field
        super().__init__(message, provider=provider)


class EmailRenderError(EmailSenderError):
    """Raised when the HTML body cannot be rendered."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        view_name: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.view_name = view_name
        super().__init__(message, provider=provider, cause=cause)


class TemplateNotFoundError(EmailRenderError):
    """Raised when neither the requested view nor the fallback view exists."""

    def __init__(self, view_name: str, *, searched: list[str] | None = None) -> None:
        self.searched = searched or [view_name]
        super().__init__(
            f"Could not find view '{view_name}' (searched: {', '.join(self.searched)})",
            view_name=view_name,
        )


class EmailTransmissionError(EmailSenderError):
    """Raised when the provider rejects the request or the network call fails."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message, provider=provider, cause=cause)


__all__ = [
    "EmailConfigurationError",
    "EmailRenderError",
    "EmailSenderError",
    "EmailTransmissionError",
    "EmailValidationError",
    "TemplateNotFoundError",
]
