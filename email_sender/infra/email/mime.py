"""MIME message composition shared by the SMTP and Gmail senders."""

from __future__ import annotations

from datetime import UTC, datetime
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from email_sender.infra.email.providers.base import ResolvedBody
    from email_sender.infra.email.schemas import EmailAddress, EmailAttachment, EmailMessage


def format_address_list(addresses: list[EmailAddress]) -> str:
    """Join addresses into a header value."""
    return ", ".join(address.formatted() for address in addresses)


def make_message_id(domain: str) -> str:
    """Generate a unique ``Message-ID`` header value."""
    return f"<{uuid.uuid4()}@{domain}>"


def _attachment_part(attachment: EmailAttachment) -> MIMEBase:
    maintype, _, subtype = attachment.content_type.partition("/")
    part = MIMEBase(maintype or "application", subtype or "octet-stream")
    part.set_payload(attachment.content)
    encoders.encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=attachment.file_name)
    return part


def _body_part(body: ResolvedBody) -> MIMEBase:
    if not body.is_html:
        return MIMEText(body.content, "plain", "utf-8")

    alternative = MIMEMultipart("alternative")
    alternative.attach(MIMEText(body.text, "plain", "utf-8"))
    alternative.attach(MIMEText(body.content, "html", "utf-8"))
    return alternative


def build_mime_message(
    message: EmailMessage,
    sender: EmailAddress,
    body: ResolvedBody,
    *,
    include_bcc: bool = False,
    message_id: str | None = None,
) -> MIMEBase:
    """Build a MIME message from an EmailMessage.

    The root part is the body itself when there are no attachments, otherwise
    a ``multipart/mixed`` container holding the body and one part per
    attachment. HTML bodies are sent as ``multipart/alternative`` with a
    derived plain-text part.

    Args:
        message: Email message
        sender: Resolved sender address
        body: Resolved body content
        include_bcc: Write a ``Bcc`` header (Gmail API) instead of relying
            on the SMTP envelope alone
        message_id: Optional ``Message-ID`` header value

    Returns:
        MIME message ready for serialization
    """
    mime_msg = _body_part(body)
    if message.attachments:
        mixed = MIMEMultipart("mixed")
        mixed.attach(mime_msg)
        for attachment in message.attachments:
            mixed.attach(_attachment_part(attachment))
        mime_msg = mixed

    mime_msg["From"] = sender.formatted()
    mime_msg["To"] = format_address_list(message.to)
    if message.cc:
        mime_msg["Cc"] = format_address_list(message.cc)
    if include_bcc and message.bcc:
        mime_msg["Bcc"] = format_address_list(message.bcc)

    mime_msg["Subject"] = message.subject
    mime_msg["Date"] = datetime.now(UTC).strftime("%a, %d %b %Y %H:%M:%S +0000")
    if message_id:
        mime_msg["Message-ID"] = message_id

    return mime_msg


__all__ = ["build_mime_message", "format_address_list", "make_message_id"]
