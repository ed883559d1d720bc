"""Fluent builder for ``EmailMessage``.

Example:
    message = (
        EmailMessageBuilder()
        .from_("noreply@example.com", "Example")
        .to("user@example.com", "User")
        .subject("Welcome!")
        .body_template("Welcome")
        .model({"Name": "User"})
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .schemas import EmailAddress, EmailAttachment, EmailMessage, EmailRenderOptions


class EmailMessageBuilder:
    """Accumulates an ``EmailMessage`` through chained setters.

    No setter validates its input; senders validate at send time.

    ``build()`` returns the builder's own message instance and does not reset
    the builder. Calling it twice yields the same object, so later setter
    calls are visible through earlier ``build()`` results. Use a new builder
    for each message.
    """

    def __init__(self) -> None:
        self._message = EmailMessage()

    def from_(self, email: str, name: str | None = None) -> EmailMessageBuilder:
        """Set the sender, replacing any previous one."""
        self._message.from_ = EmailAddress(email=email, name=name)
        return self

    def to(self, email: str | Iterable[str], name: str | None = None) -> EmailMessageBuilder:
        """Append one recipient, or one recipient per address in an iterable.

        Addresses from an iterable get no display name.
        """
        if isinstance(email, str):
            self._message.to.append(EmailAddress(email=email, name=name))
        else:
            self._message.to.extend(EmailAddress(email=address) for address in email)
        return self

    def cc(self, email: str, name: str | None = None) -> EmailMessageBuilder:
        """Append a CC recipient."""
        self._message.cc.append(EmailAddress(email=email, name=name))
        return self

    def bcc(self, email: str, name: str | None = None) -> EmailMessageBuilder:
        """Append a BCC recipient."""
        self._message.bcc.append(EmailAddress(email=email, name=name))
        return self

    def subject(self, subject: str) -> EmailMessageBuilder:
        self._message.subject = subject
        return self

    def body(self, body: str) -> EmailMessageBuilder:
        self._message.body = body
        return self

    def body_template(self, template: str) -> EmailMessageBuilder:
        """Set the view name or inline markup used to render the body."""
        self._message.body_template = template
        return self

    def model(self, model: Any) -> EmailMessageBuilder:
        """Set template data, replacing any previous value."""
        self._message.model = model
        return self

    def render_options(self, render_options: EmailRenderOptions) -> EmailMessageBuilder:
        """Replace the render options wholesale."""
        self._message.render_options = render_options
        return self

    def attach(self, file_name: str, content: bytes, content_type: str) -> EmailMessageBuilder:
        """Append an attachment. Content is stored as immutable ``bytes``."""
        self._message.attachments.append(
            EmailAttachment(file_name=file_name, content=content, content_type=content_type)
        )
        return self

    def build(self) -> EmailMessage:
        """Return the accumulated message (the same instance on every call)."""
        return self._message


__all__ = ["EmailMessageBuilder"]
