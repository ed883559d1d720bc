"""Pluggable email delivery: one message model, interchangeable senders and renderers."""

__version__ = "0.1.0"
