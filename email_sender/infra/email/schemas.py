"""Email schemas and data models.

Defines the provider-independent structure of an outbound email: addresses,
attachments, render options, and the message itself.
"""

from __future__ import annotations

from email.utils import formataddr
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EmailAddress(BaseModel):
    """An email participant (address plus optional display name).

    Example:
        EmailAddress(email="ann@example.com", name="Ann")
    """

    model_config = ConfigDict(frozen=True)

    email: str = Field(description="Email address")
    name: str | None = Field(default=None, description="Display name")

    def formatted(self) -> str:
        """Format as an RFC 5322 address (``Name <email>`` or bare email)."""
        if self.name:
            return formataddr((self.name, self.email))
        return self.email


class EmailAttachment(BaseModel):
    """A binary attachment.

    Example:
        attachment = EmailAttachment(
            file_name="data.csv",
            content=b"col1,col2\\n1,2\\n",
            content_type="text/csv",
        )
    """

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="Attachment filename")
    content: bytes = Field(description="Attachment content as bytes")
    content_type: str = Field(description="MIME content type")


class EmailRenderOptions(BaseModel):
    """Visual theme passed to an HTML renderer.

    The core never validates these values; renderers interpret them.
    """

    theme: str = Field(default="modern", description="Theme name (modern, classic, minimal)")
    primary_color: str = Field(default="#007bff")
    secondary_color: str = Field(default="#6c757d")
    background_color: str = Field(default="#ffffff")
    text_color: str = Field(default="#333333")
    font_family: str = Field(default="Arial, sans-serif")
    logo_url: str | None = None
    company_name: str | None = None
    footer_text: str | None = None
    include_social_links: bool = False
    social_links: dict[str, str] = Field(default_factory=dict)


class EmailMessage(BaseModel):
    """Provider-independent email message.

    Messages are mutable while being composed (usually through
    ``EmailMessageBuilder``) and must not be changed once handed to a sender.
    Nothing is validated here; senders validate at send time.

    Example:
        message = EmailMessage(
            from_=EmailAddress(email="noreply@example.com"),
            to=[EmailAddress(email="user@example.com")],
            subject="Welcome!",
            body="Welcome to our service.",
        )
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: EmailAddress | None = Field(
        default=None,
        alias="from",
        description="Sender; falls back to the provider default when absent",
    )
    to: list[EmailAddress] = Field(default_factory=list, description="Primary recipients")
    cc: list[EmailAddress] = Field(default_factory=list, description="CC recipients")
    bcc: list[EmailAddress] = Field(default_factory=list, description="BCC recipients")

    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Raw body used when nothing is rendered")
    body_template: str | None = Field(
        default=None,
        description="View name or inline markup; renderers decide which",
    )
    model: Any = Field(
        default=None,
        description="Template data: a mapping or any object exposing attributes",
    )
    render_options: EmailRenderOptions | None = Field(default=None)

    attachments: list[EmailAttachment] = Field(default_factory=list)

    @property
    def all_recipients(self) -> list[str]:
        """Get all recipient emails (to, cc, bcc) in send order."""
        return [address.email for address in (*self.to, *self.cc, *self.bcc)]

    @property
    def recipient_count(self) -> int:
        """Get total number of recipients."""
        return len(self.to) + len(self.cc) + len(self.bcc)


__all__ = [
    "EmailAddress",
    "EmailAttachment",
    "EmailMessage",
    "EmailRenderOptions",
]
