"""Main CLI entry point for email-sender commands."""

import click

from email_sender import __version__
from email_sender.cli.commands import email
from email_sender.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="email-sender")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Email Sender CLI - compose, render and deliver email.

    \b
    Commands:
      send       Send an email through a provider
      render     Render an email to HTML without sending
      templates  List available views

    \b
    Quick Start:
      email-sender templates
      email-sender render --theme classic -s "Hi" -b "Hello there"
      email-sender send --to user@example.com -s "Hi" -b "Hello there"
    """
    setup_logging()
    ctx.ensure_object(dict)


cli.add_command(email.send)
cli.add_command(email.render)
cli.add_command(email.list_templates)


def main() -> None:
    """Entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
