"""Email commands: send, render and list templates."""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
import sys
from typing import Any

import click

from email_sender.cli.utils import coro, error, header, info, success
from email_sender.core.settings import (
    get_console_settings,
    get_gmail_settings,
    get_sendgrid_settings,
    get_smtp_settings,
    get_template_settings,
)
from email_sender.infra.email import (
    BaseEmailSender,
    ConsoleEmailSender,
    EmailMessage,
    EmailMessageBuilder,
    EmailRenderOptions,
    EmailSenderError,
    GmailEmailSender,
    JinjaHtmlRenderer,
    SendGridEmailSender,
    SMTPEmailSender,
    resolve_view_name,
)

PROVIDERS = ("console", "smtp", "sendgrid", "gmail")
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"


def create_sender(provider: str) -> BaseEmailSender:
    """Instantiate the sender for a provider name from cached settings.

    Raises:
        EmailConfigurationError: If the provider's credentials are missing
    """
    if provider == "smtp":
        return SMTPEmailSender(get_smtp_settings())
    if provider == "sendgrid":
        return SendGridEmailSender(get_sendgrid_settings())
    if provider == "gmail":
        return GmailEmailSender(get_gmail_settings())
    return ConsoleEmailSender(get_console_settings())


def _parse_model(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> dict[str, Any] | None:
    if value is None:
        return None
    try:
        model = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}") from e
    if not isinstance(model, dict):
        raise click.BadParameter("must be a JSON object")
    return model


def build_message(
    *,
    sender_email: str | None = None,
    sender_name: str | None = None,
    recipients: tuple[str, ...] = (),
    cc: tuple[str, ...] = (),
    bcc: tuple[str, ...] = (),
    subject: str = "",
    body: str = "",
    template: str | None = None,
    theme: str | None = None,
    model: dict[str, Any] | None = None,
    attachments: tuple[Path, ...] = (),
) -> EmailMessage:
    """Translate command line options into an EmailMessage."""
    builder = EmailMessageBuilder().subject(subject).body(body)
    if sender_email:
        builder.from_(sender_email, sender_name)
    if recipients:
        builder.to(recipients)
    for address in cc:
        builder.cc(address)
    for address in bcc:
        builder.bcc(address)
    if template is not None:
        builder.body_template(template)
    if model is not None:
        builder.model(model)
    if theme is not None:
        builder.render_options(EmailRenderOptions(theme=theme))
    for path in attachments:
        content_type, _ = mimetypes.guess_type(path.name)
        builder.attach(path.name, path.read_bytes(), content_type or DEFAULT_ATTACHMENT_TYPE)
    return builder.build()


model_option = click.option(
    "--model",
    "model",
    callback=_parse_model,
    help='Template model as a JSON object, e.g. \'{"Name": "Ann"}\'',
)
template_option = click.option(
    "--template",
    help="View name (e.g. Welcome) or inline template with {{Field}} placeholders",
)
theme_option = click.option("--theme", help="Render theme (modern, classic, minimal, ...)")


@click.command(name="send")
@click.option(
    "--provider",
    "-p",
    type=click.Choice(PROVIDERS),
    default="console",
    show_default=True,
    help="Delivery backend",
)
@click.option("--from", "sender_email", help="Sender address (defaults to the provider setting)")
@click.option("--from-name", "sender_name", help="Sender display name")
@click.option("--to", "-r", "recipients", multiple=True, required=True, help="Recipient address(es)")
@click.option("--cc", multiple=True, help="Cc address(es)")
@click.option("--bcc", multiple=True, help="Bcc address(es)")
@click.option("--subject", "-s", default="", help="Email subject")
@click.option("--body", "-b", default="", help="Email body (plain text or HTML)")
@template_option
@theme_option
@model_option
@click.option(
    "--attach",
    "attachments",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File to attach (repeatable)",
)
@click.option(
    "--render/--no-render",
    default=True,
    show_default=True,
    help="Render the body through the HTML template renderer",
)
@coro
async def send(
    provider: str,
    sender_email: str | None,
    sender_name: str | None,
    recipients: tuple[str, ...],
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str,
    body: str,
    template: str | None,
    theme: str | None,
    model: dict[str, Any] | None,
    attachments: tuple[Path, ...],
    render: bool,
) -> None:
    """Compose and send an email.

    Examples:
    \b
      email-sender send --to user@example.com -s "Hello" -b "Test message"
      email-sender send -p sendgrid --to user@example.com --template Welcome \\
          --model '{"Name": "Ann"}'
    """
    message = build_message(
        sender_email=sender_email,
        sender_name=sender_name,
        recipients=recipients,
        cc=cc,
        bcc=bcc,
        subject=subject,
        body=body,
        template=template,
        theme=theme,
        model=model,
        attachments=attachments,
    )

    header("Sending Email")
    info(f"Provider: {provider}")
    info(f"Recipients: {', '.join(message.all_recipients)}")
    info(f"Subject: {subject}")

    try:
        sender = create_sender(provider)
        renderer = JinjaHtmlRenderer(get_template_settings()) if render else None
        result = await sender.send_email(message, renderer)
    except EmailSenderError as e:
        error(f"Failed to send email: {e.message}")
        if e.cause is not None:
            click.secho(f"  Cause: {e.cause}", fg="red", err=True)
        sys.exit(1)

    click.echo()
    success("Email sent successfully!")
    click.echo(f"  Message ID: {result.message_id}")
    click.echo(f"  Provider: {result.provider}")
    click.echo(f"  Recipients: {len(result.recipients_accepted)}")
    if result.recipients_rejected:
        click.secho(f"  Rejected: {', '.join(result.recipients_rejected)}", fg="yellow")
    click.echo(f"  Duration: {result.duration_ms}ms")


@click.command(name="render")
@click.option("--subject", "-s", default="", help="Email subject")
@click.option("--body", "-b", default="", help="Email body")
@template_option
@theme_option
@model_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the HTML to a file instead of stdout",
)
def render(
    subject: str,
    body: str,
    template: str | None,
    theme: str | None,
    model: dict[str, Any] | None,
    output: Path | None,
) -> None:
    """Render an email to HTML without sending it."""
    message = build_message(
        subject=subject,
        body=body,
        template=template,
        theme=theme,
        model=model,
    )
    renderer = JinjaHtmlRenderer(get_template_settings())

    try:
        html = renderer.render_email(message)
    except EmailSenderError as e:
        error(f"Failed to render view '{resolve_view_name(message)}': {e.message}")
        sys.exit(1)

    if output is None:
        click.echo(html)
    else:
        output.write_text(html, encoding="utf-8")
        success(f"Rendered HTML written to {output}")


@click.command(name="templates")
def list_templates() -> None:
    """List the views available to the renderer."""
    renderer = JinjaHtmlRenderer(get_template_settings())
    views = renderer.list_views()

    header("Available Views")
    for view in views:
        click.echo(f"  {view}")
    click.echo()
    success(f"Total: {len(views)} views available")
