"""Unit tests for SMTPEmailSender."""

from __future__ import annotations

from email import message_from_bytes
from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
from pydantic import ValidationError
import pytest

from email_sender.core.settings.email import SmtpSettings
from email_sender.infra.email import (
    EmailMessageBuilder,
    EmailTransmissionError,
    SMTPEmailSender,
)


@pytest.fixture
def smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        host="smtp.example.com",
        port=587,
        username="user",
        password="secret",
        default_from_email="noreply@example.com",
    )


@pytest.fixture
def mock_smtp():
    """Patch aiosmtplib.SMTP with a client that accepts every recipient."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.login = AsyncMock()
    client.send_message = AsyncMock(return_value=({}, "OK"))

    with patch("email_sender.infra.email.providers.smtp.aiosmtplib.SMTP", return_value=client) as smtp_cls:
        yield smtp_cls, client


class TestSmtpSettings:
    """Test SMTP settings validation."""

    def test_tls_and_ssl_exclusive(self):
        with pytest.raises(ValidationError):
            SmtpSettings(use_tls=True, use_ssl=True)

    def test_username_requires_password(self):
        with pytest.raises(ValidationError):
            SmtpSettings(username="user")

    def test_smtp_url_hides_password(self, smtp_settings):
        assert smtp_settings.get_smtp_url() == "smtp://user@smtp.example.com:587"

    def test_requires_auth(self, smtp_settings):
        assert smtp_settings.requires_auth is True
        assert SmtpSettings(host="localhost").requires_auth is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("EMAIL_SMTP_HOST", "relay.internal")
        monkeypatch.setenv("EMAIL_SMTP_DEFAULT_FROM_EMAIL", "ops@example.com")

        settings = SmtpSettings()

        assert settings.host == "relay.internal"
        assert settings.default_from_email == "ops@example.com"


class TestSMTPEmailSender:
    """Test SMTP delivery."""

    @pytest.mark.asyncio
    async def test_sends_plain_message(self, smtp_settings, mock_smtp, plain_message):
        """Test a plain body goes out as text/plain with envelope recipients."""
        smtp_cls, client = mock_smtp
        sender = SMTPEmailSender(smtp_settings)

        result = await sender.send_email(plain_message)

        smtp_cls.assert_called_once()
        assert smtp_cls.call_args.kwargs["hostname"] == "smtp.example.com"
        assert smtp_cls.call_args.kwargs["start_tls"] is True
        assert smtp_cls.call_args.kwargs["use_tls"] is False
        client.login.assert_awaited_once_with("user", "secret")
        client.send_message.assert_awaited_once()

        mime = client.send_message.call_args.args[0]
        assert mime.get_content_type() == "text/plain"
        assert mime["From"] == "A <a@x.io>"
        assert mime["To"] == "b@y.io"
        assert mime["Subject"] == "Hi"
        assert mime.get_payload(decode=True).decode("utf-8") == "Hello"
        assert client.send_message.call_args.kwargs["sender"] == "a@x.io"
        assert client.send_message.call_args.kwargs["recipients"] == ["b@y.io"]

        assert result.provider == "smtp"
        assert result.message_id == mime["Message-ID"]
        assert result.recipients_accepted == ["b@y.io"]

    @pytest.mark.asyncio
    async def test_bcc_only_in_envelope(self, smtp_settings, mock_smtp):
        _, client = mock_smtp
        message = (
            EmailMessageBuilder()
            .to("b@y.io")
            .cc("c@y.io")
            .bcc("hidden@y.io")
            .body("Hello")
            .build()
        )

        await SMTPEmailSender(smtp_settings).send_email(message)

        mime = client.send_message.call_args.args[0]
        assert mime["Cc"] == "c@y.io"
        assert mime["Bcc"] is None
        assert client.send_message.call_args.kwargs["recipients"] == ["b@y.io", "c@y.io", "hidden@y.io"]

    @pytest.mark.asyncio
    async def test_html_body_with_attachment(self, smtp_settings, mock_smtp):
        _, client = mock_smtp
        message = (
            EmailMessageBuilder()
            .to("b@y.io")
            .body("<p>Hello</p>")
            .attach("report.csv", b"a,b\n1,2\n", "text/csv")
            .build()
        )

        await SMTPEmailSender(smtp_settings).send_email(message)

        mime = message_from_bytes(client.send_message.call_args.args[0].as_bytes())
        assert mime.get_content_type() == "multipart/mixed"
        body_part, attachment_part = mime.get_payload()
        assert body_part.get_content_type() == "multipart/alternative"
        assert [p.get_content_type() for p in body_part.get_payload()] == ["text/plain", "text/html"]
        assert attachment_part.get_filename() == "report.csv"
        assert attachment_part.get_payload(decode=True) == b"a,b\n1,2\n"

    @pytest.mark.asyncio
    async def test_no_login_without_credentials(self, mock_smtp, plain_message):
        _, client = mock_smtp
        settings = SmtpSettings(host="localhost", port=25, use_tls=False)

        await SMTPEmailSender(settings).send_email(plain_message)

        client.login.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_message_id_uses_sender_domain(self, mock_smtp, plain_message):
        """Test the Message-ID domain comes from the sender, not the relay host."""
        _, client = mock_smtp
        settings = SmtpSettings(host="localhost", port=25, use_tls=False)

        result = await SMTPEmailSender(settings).send_email(plain_message)

        mime = client.send_message.call_args.args[0]
        assert mime["Message-ID"].endswith("@x.io>")
        assert "localhost" not in mime["Message-ID"]
        assert result.message_id == mime["Message-ID"]

    @pytest.mark.asyncio
    async def test_partial_refusal_reported(self, smtp_settings, mock_smtp):
        _, client = mock_smtp
        client.send_message.return_value = (
            {"bad@y.io": aiosmtplib.SMTPResponse(550, "No such user")},
            "OK",
        )
        message = EmailMessageBuilder().to("b@y.io").to("bad@y.io").build()

        result = await SMTPEmailSender(smtp_settings).send_email(message)

        assert result.recipients_accepted == ["b@y.io"]
        assert result.recipients_rejected == ["bad@y.io"]

    @pytest.mark.asyncio
    async def test_authentication_failure(self, smtp_settings, mock_smtp, plain_message):
        _, client = mock_smtp
        client.login.side_effect = aiosmtplib.SMTPAuthenticationError(535, "Bad credentials")

        with pytest.raises(EmailTransmissionError) as exc_info:
            await SMTPEmailSender(smtp_settings).send_email(plain_message)

        assert exc_info.value.error_code == "AUTH_FAILED"
        assert isinstance(exc_info.value.cause, aiosmtplib.SMTPAuthenticationError)
        client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_failure(self, smtp_settings, mock_smtp, plain_message):
        _, client = mock_smtp
        client.__aenter__.side_effect = aiosmtplib.SMTPConnectError("refused")

        with pytest.raises(EmailTransmissionError) as exc_info:
            await SMTPEmailSender(smtp_settings).send_email(plain_message)

        assert exc_info.value.error_code == "CONNECTION_ERROR"
        assert exc_info.value.provider == "smtp"

    @pytest.mark.asyncio
    async def test_all_recipients_refused(self, smtp_settings, mock_smtp, plain_message):
        _, client = mock_smtp
        client.send_message.side_effect = aiosmtplib.SMTPRecipientsRefused([])

        with pytest.raises(EmailTransmissionError) as exc_info:
            await SMTPEmailSender(smtp_settings).send_email(plain_message)

        assert exc_info.value.error_code == "RECIPIENTS_REFUSED"
