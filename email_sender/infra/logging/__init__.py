"""Logging infrastructure.

Structured logging on the standard library:
- JSONL format for log aggregation (Loki/Elasticsearch)
- Structured fields through ``extra=`` on module loggers
- OpenTelemetry trace correlation

Basic usage:
    from email_sender.infra.logging import setup_logging
    import logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Email queued", extra={"recipients": ["user@example.com"]})
"""

from email_sender.infra.logging.config import (
    build_logging_config,
    configure_logging,
    setup_logging,
)
from email_sender.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "build_logging_config",
    "configure_logging",
    "setup_logging",
]
