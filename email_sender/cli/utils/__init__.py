"""CLI utilities for running async commands and formatting output."""

from email_sender.cli.utils.async_runner import coro
from email_sender.cli.utils.formatters import error, header, info, success

__all__ = [
    "coro",
    "error",
    "header",
    "info",
    "success",
]
