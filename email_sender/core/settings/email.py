"""Email provider settings.

Each provider reads its own environment prefix:
- SMTP: EMAIL_SMTP_ (e.g. EMAIL_SMTP_HOST=smtp.example.com)
- SendGrid: SENDGRID_ (e.g. SENDGRID_API_KEY=SG.xxx)
- Gmail: GMAIL_ (e.g. GMAIL_CREDENTIALS_PATH=/secrets/sa.json)
- Templates: EMAIL_TEMPLATE_ (e.g. EMAIL_TEMPLATE_TEMPLATE_DIR=./emails)

Every provider shares the default sender fields, so EMAIL_SMTP_DEFAULT_FROM_EMAIL
and SENDGRID_DEFAULT_FROM_EMAIL are configured independently.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SenderSettings(BaseSettings):
    """Settings shared by every email provider.

    The default sender is used when a message carries no explicit sender.
    """

    default_from_email: str | None = Field(
        default=None,
        max_length=255,
        description="Default sender email address",
    )
    default_from_name: str | None = Field(
        default=None,
        max_length=100,
        description="Default sender display name",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def has_default_sender(self) -> bool:
        """Check if a default sender address is configured."""
        return bool(self.default_from_email)


class SmtpSettings(SenderSettings):
    """SMTP relay configuration.

    Environment variables use EMAIL_SMTP_ prefix.
    Example: EMAIL_SMTP_HOST=smtp.gmail.com, EMAIL_SMTP_PORT=587
    """

    host: str = Field(
        default="localhost",
        min_length=1,
        max_length=255,
        description="SMTP server hostname",
    )
    port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port (587 for TLS, 465 for SSL, 25 for plain)",
    )
    username: str | None = Field(
        default=None,
        max_length=255,
        description="SMTP authentication username",
    )
    password: SecretStr | None = Field(
        default=None,
        description="SMTP authentication password",
    )
    use_tls: bool = Field(
        default=True,
        description="Use STARTTLS (port 587). Set False for SSL (port 465) or plain (port 25)",
    )
    use_ssl: bool = Field(
        default=False,
        description="Use implicit SSL/TLS (port 465). Mutually exclusive with use_tls",
    )
    validate_certs: bool = Field(
        default=True,
        description="Validate SSL/TLS certificates. Set False for self-signed certs",
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="SMTP connection timeout in seconds",
    )

    model_config = SettingsConfigDict(env_prefix="EMAIL_SMTP_")

    @model_validator(mode="after")
    def validate_tls_ssl_exclusive(self) -> SmtpSettings:
        """Ensure TLS and SSL are mutually exclusive."""
        if self.use_tls and self.use_ssl:
            msg = "use_tls and use_ssl are mutually exclusive"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_auth_pair(self) -> SmtpSettings:
        """Require username and password together."""
        if (self.username is None) != (self.password is None):
            msg = "Both username and password must be provided together"
            raise ValueError(msg)
        return self

    @property
    def requires_auth(self) -> bool:
        """Check if SMTP authentication is configured."""
        return self.username is not None and self.password is not None

    def get_smtp_url(self) -> str:
        """Get SMTP URL for debugging (without password)."""
        scheme = "smtps" if self.use_ssl else "smtp"
        auth = f"{self.username}@" if self.username else ""
        return f"{scheme}://{auth}{self.host}:{self.port}"


class SendGridSettings(SenderSettings):
    """SendGrid v3 API configuration.

    Environment variables use SENDGRID_ prefix.
    Example: SENDGRID_API_KEY=SG.xxx, SENDGRID_SANDBOX_MODE=true
    """

    api_key: SecretStr | None = Field(
        default=None,
        description="SendGrid API key",
    )
    api_endpoint: str = Field(
        default="https://api.sendgrid.com/v3",
        description="SendGrid API base URL",
    )
    sandbox_mode: bool = Field(
        default=False,
        description="Validate requests without delivering mail",
    )
    enable_click_tracking: bool = Field(
        default=True,
        description="Rewrite links for click tracking",
    )
    enable_open_tracking: bool = Field(
        default=True,
        description="Insert the open tracking pixel",
    )
    enable_subscription_tracking: bool = Field(
        default=False,
        description="Append SendGrid's unsubscribe footer",
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="HTTP request timeout in seconds",
    )

    model_config = SettingsConfigDict(env_prefix="SENDGRID_")


class GmailSettings(SenderSettings):
    """Gmail API configuration using a service account.

    Environment variables use GMAIL_ prefix.
    Either GMAIL_CREDENTIALS_JSON or GMAIL_CREDENTIALS_PATH must be set.
    """

    credentials_json: SecretStr | None = Field(
        default=None,
        description="Service account credentials as a JSON string",
    )
    credentials_path: Path | None = Field(
        default=None,
        description="Path to the service account credentials JSON file",
    )
    impersonate_email: str | None = Field(
        default=None,
        description="Mailbox to impersonate (domain-wide delegation)",
    )
    application_name: str = Field(
        default="Email Sender",
        description="Application name reported to the Gmail API",
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="HTTP request timeout in seconds",
    )

    model_config = SettingsConfigDict(env_prefix="GMAIL_")

    @property
    def has_credentials(self) -> bool:
        """Check if service account credentials are configured."""
        return self.credentials_json is not None or self.credentials_path is not None


class ConsoleSettings(SenderSettings):
    """Console (development) provider configuration.

    Environment variables use EMAIL_CONSOLE_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="EMAIL_CONSOLE_")


class TemplateSettings(BaseSettings):
    """HTML template rendering configuration.

    Environment variables use EMAIL_TEMPLATE_ prefix.
    """

    template_dir: Path | None = Field(
        default=None,
        description="Directory with custom <View>.html templates, searched before the bundled ones",
    )
    default_context: dict[str, Any] = Field(
        default_factory=dict,
        description="Default context variables for all templates",
    )

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_TEMPLATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
