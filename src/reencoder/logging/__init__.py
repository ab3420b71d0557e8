"""Logging setup: text or JSON output, optional rotating log file."""

from reencoder.logging.config import configure_logging, logging_session
from reencoder.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "logging_session",
]
