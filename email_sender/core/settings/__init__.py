"""Pydantic Settings v2 configuration.

Settings are split per concern (one class per provider, templates, logging)
and exposed through LRU-cached loaders:

    from email_sender.core.settings import get_sendgrid_settings

    settings = get_sendgrid_settings()
    print(settings.api_endpoint)

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from functools import lru_cache

from .email import (
    ConsoleSettings,
    GmailSettings,
    SenderSettings,
    SendGridSettings,
    SmtpSettings,
    TemplateSettings,
)
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_smtp_settings() -> SmtpSettings:
    """Get cached SMTP settings.

    Returns:
        Validated and frozen SmtpSettings instance.
    """
    return SmtpSettings()


@lru_cache(maxsize=1)
def get_sendgrid_settings() -> SendGridSettings:
    """Get cached SendGrid settings.

    Returns:
        Validated and frozen SendGridSettings instance.
    """
    return SendGridSettings()


@lru_cache(maxsize=1)
def get_gmail_settings() -> GmailSettings:
    """Get cached Gmail settings.

    Returns:
        Validated and frozen GmailSettings instance.
    """
    return GmailSettings()


@lru_cache(maxsize=1)
def get_console_settings() -> ConsoleSettings:
    """Get cached console provider settings."""
    return ConsoleSettings()


@lru_cache(maxsize=1)
def get_template_settings() -> TemplateSettings:
    """Get cached template settings."""
    return TemplateSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings."""
    return LoggingSettings()


def clear_settings_cache() -> None:
    """Clear all cached settings (useful in tests)."""
    get_smtp_settings.cache_clear()
    get_sendgrid_settings.cache_clear()
    get_gmail_settings.cache_clear()
    get_console_settings.cache_clear()
    get_template_settings.cache_clear()
    get_logging_settings.cache_clear()


__all__ = [
    "ConsoleSettings",
    "GmailSettings",
    "LoggingSettings",
    "SendGridSettings",
    "SenderSettings",
    "SmtpSettings",
    "TemplateSettings",
    "clear_settings_cache",
    "get_console_settings",
    "get_gmail_settings",
    "get_logging_settings",
    "get_sendgrid_settings",
    "get_smtp_settings",
    "get_template_settings",
]
