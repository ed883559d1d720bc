"""Unit tests for SendGridEmailSender."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from email_sender.core.settings.email import SendGridSettings
from email_sender.infra.email import (
    EmailConfigurationError,
    EmailMessageBuilder,
    EmailRenderOptions,
    EmailTransmissionError,
    EmailValidationError,
    JinjaHtmlRenderer,
    SendGridEmailSender,
)


class RecordingTransport:
    """httpx MockTransport handler that records requests."""

    def __init__(self, response: httpx.Response | Exception | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(202, headers={"X-Message-Id": "sg-msg-1"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    @property
    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def sendgrid_settings() -> SendGridSettings:
    return SendGridSettings(api_key="SG.test-key", default_from_email="noreply@example.com")


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def sender(sendgrid_settings, transport) -> SendGridEmailSender:
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return SendGridEmailSender(sendgrid_settings, client=client)


class TestSendGridConfiguration:
    """Test SendGrid construction."""

    def test_missing_api_key(self):
        with pytest.raises(EmailConfigurationError) as exc_info:
            SendGridEmailSender(SendGridSettings())

        assert exc_info.value.missing_fields == ["api_key"]
        assert exc_info.value.provider == "sendgrid"

    def test_blank_api_key(self):
        with pytest.raises(EmailConfigurationError):
            SendGridEmailSender(SendGridSettings(api_key="   "))

    @pytest.mark.asyncio
    async def test_missing_sender_makes_no_request(self, transport, plain_message):
        """Test configuration errors are raised before any network call."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        sender = SendGridEmailSender(SendGridSettings(api_key="SG.key"), client=client)
        plain_message.from_ = None

        with pytest.raises(EmailConfigurationError):
            await sender.send_email(plain_message)

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_empty_body_makes_no_request(self, sender, transport):
        """Test a message without any body content is rejected before sending."""
        message = EmailMessageBuilder().to("b@y.io").subject("Hi").build()

        with pytest.raises(EmailValidationError) as exc_info:
            await sender.send_email(message)

        assert exc_info.value.field == "body"
        assert exc_info.value.provider == "sendgrid"
        assert transport.requests == []


class TestSendGridPayload:
    """Test the v3 mail/send payload."""

    @pytest.mark.asyncio
    async def test_plain_message(self, sender, transport, plain_message):
        result = await sender.send_email(plain_message)

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.sendgrid.com/v3/mail/send"
        assert request.headers["Authorization"] == "Bearer SG.test-key"

        payload = transport.payload
        assert payload["personalizations"] == [{"to": [{"email": "b@y.io"}]}]
        assert payload["from"] == {"email": "a@x.io", "name": "A"}
        assert payload["subject"] == "Hi"
        assert payload["content"] == [{"type": "text/plain", "value": "Hello"}]
        assert "mail_settings" not in payload

        assert result.message_id == "sg-msg-1"
        assert result.provider == "sendgrid"
        assert result.recipients_accepted == ["b@y.io"]

    @pytest.mark.asyncio
    async def test_html_message_has_text_alternative_first(self, sender, transport):
        message = EmailMessageBuilder().to("b@y.io").body("<p>Hello <b>there</b></p>").build()

        await sender.send_email(message)

        assert transport.payload["content"] == [
            {"type": "text/plain", "value": "Hello there"},
            {"type": "text/html", "value": "<p>Hello <b>there</b></p>"},
        ]
        assert transport.payload["from"] == {"email": "noreply@example.com"}

    @pytest.mark.asyncio
    async def test_cc_bcc_and_attachments(self, sender, transport):
        message = (
            EmailMessageBuilder()
            .to("b@y.io", "B")
            .cc("c@y.io")
            .bcc("d@y.io")
            .body("Hello")
            .attach("a.pdf", b"%PDF", "application/pdf")
            .build()
        )

        await sender.send_email(message)

        payload = transport.payload
        assert payload["personalizations"] == [
            {
                "to": [{"email": "b@y.io", "name": "B"}],
                "cc": [{"email": "c@y.io"}],
                "bcc": [{"email": "d@y.io"}],
            }
        ]
        assert payload["attachments"] == [
            {
                "content": base64.b64encode(b"%PDF").decode("ascii"),
                "filename": "a.pdf",
                "type": "application/pdf",
                "disposition": "attachment",
            }
        ]

    @pytest.mark.asyncio
    async def test_tracking_and_sandbox(self, transport, plain_message):
        settings = SendGridSettings(
            api_key="SG.key",
            sandbox_mode=True,
            enable_click_tracking=False,
            enable_subscription_tracking=True,
        )
        client = httpx.AsyncClient(transport=httpx.MockTransport(transport))

        await SendGridEmailSender(settings, client=client).send_email(plain_message)

        payload = transport.payload
        assert payload["tracking_settings"] == {
            "click_tracking": {"enable": False, "enable_text": False},
            "open_tracking": {"enable": True},
            "subscription_tracking": {"enable": True},
        }
        assert payload["mail_settings"] == {"sandbox_mode": {"enable": True}}

    @pytest.mark.asyncio
    async def test_message_id_falls_back_to_request_id(self, transport, sender, plain_message):
        transport.response = httpx.Response(202, headers={"X-Request-Id": "req-9"})

        result = await sender.send_email(plain_message)

        assert result.message_id == "sg-req-9"


class TestSendGridErrors:
    """Test SendGrid failure handling."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "error_code"),
        [
            (400, "BAD_REQUEST"),
            (401, "AUTH_FAILED"),
            (403, "FORBIDDEN"),
            (429, "RATE_LIMITED"),
            (503, "SERVER_ERROR"),
            (418, "API_ERROR"),
        ],
    )
    async def test_http_error_status(self, transport, sender, plain_message, status_code, error_code):
        transport.response = httpx.Response(
            status_code,
            json={"errors": [{"message": "does not contain a valid address"}]},
        )

        with pytest.raises(EmailTransmissionError) as exc_info:
            await sender.send_email(plain_message)

        assert exc_info.value.status_code == status_code
        assert exc_info.value.error_code == error_code
        assert "does not contain a valid address" in exc_info.value.message
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self, transport, sender, plain_message):
        transport.response = httpx.ReadTimeout("timed out")

        with pytest.raises(EmailTransmissionError) as exc_info:
            await sender.send_email(plain_message)

        assert exc_info.value.error_code == "TIMEOUT"
        assert isinstance(exc_info.value.cause, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_connection_error(self, transport, sender, plain_message):
        transport.response = httpx.ConnectError("connection refused")

        with pytest.raises(EmailTransmissionError) as exc_info:
            await sender.send_email(plain_message)

        assert exc_info.value.error_code == "HTTP_ERROR"
        assert exc_info.value.provider == "sendgrid"


class TestSendGridWithRenderer:
    """Test rendered delivery end to end."""

    @pytest.mark.asyncio
    async def test_rendered_theme_sent_as_html(self, sender, transport):
        message = (
            EmailMessageBuilder()
            .to("b@y.io")
            .subject("Welcome")
            .body("Thanks for joining")
            .render_options(EmailRenderOptions(theme="minimal", footer_text="Acme Inc."))
            .build()
        )

        await sender.send_email(message, JinjaHtmlRenderer())

        plain, html = transport.payload["content"]
        assert plain["type"] == "text/plain"
        assert "Thanks for joining" in plain["value"]
        assert "<" not in plain["value"]
        assert html["type"] == "text/html"
        assert html["value"].startswith("<!DOCTYPE html>")
        assert "Acme Inc." in html["value"]
