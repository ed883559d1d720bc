"""Pytest configuration and shared fixtures.

Organization:
    - Environment Fixtures: isolate settings from the host environment
    - Message Fixtures: ready-made messages and builders
    - Sender Fixtures: a recording sender for contract tests
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from email_sender.core.settings import clear_settings_cache
from email_sender.core.settings.email import SenderSettings
from email_sender.infra.email import (
    BaseEmailSender,
    EmailDeliveryResult,
    EmailMessage,
    EmailMessageBuilder,
)

if TYPE_CHECKING:
    from email_sender.infra.email import EmailAddress, ResolvedBody

_ENV_PREFIXES = ("EMAIL_", "SENDGRID_", "GMAIL_", "LOG_")


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test without provider environment variables or a .env file."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Message Fixtures
# ============================================================================


@pytest.fixture
def sender_settings() -> SenderSettings:
    """Settings with a default sender configured."""
    return SenderSettings(default_from_email="noreply@example.com", default_from_name="Example")


@pytest.fixture
def plain_message() -> EmailMessage:
    """A plain-text message with one recipient and an explicit sender."""
    return (
        EmailMessageBuilder()
        .from_("a@x.io", "A")
        .to("b@y.io")
        .subject("Hi")
        .body("Hello")
        .build()
    )


# ============================================================================
# Sender Fixtures
# ============================================================================


class RecordingSender(BaseEmailSender):
    """Sender that records every transmission instead of performing it."""

    def __init__(self, settings: SenderSettings, *, fail_with: Exception | None = None) -> None:
        super().__init__(settings)
        self.calls: list[tuple[EmailMessage, EmailAddress, ResolvedBody]] = []
        self.fail_with = fail_with

    @property
    def provider_name(self) -> str:
        return "recording"

    async def _do_send(self, message, sender, body) -> EmailDeliveryResult:
        self.calls.append((message, sender, body))
        if self.fail_with is not None:
            raise self.fail_with
        return EmailDeliveryResult(
            message_id=f"rec-{len(self.calls)}",
            provider=self.provider_name,
            recipients_accepted=message.all_recipients,
        )


@pytest.fixture
def recording_sender(sender_settings) -> RecordingSender:
    """Recording sender with a configured default sender."""
    return RecordingSender(sender_settings)
