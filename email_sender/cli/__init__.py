"""Command line interface for composing, rendering and sending email."""
