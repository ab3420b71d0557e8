"""Logging configuration.

configure_logging() installs handlers on the root logger and returns
them; logging_session() scopes those handlers (and the log file handle)
to a single run.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from reencoder.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from reencoder.config.models import LoggingConfig

_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config: LoggingConfig) -> list[logging.Handler]:
    """Configure the root logger based on LoggingConfig.

    Sets up a rotating file handler and/or a stderr handler. If the log
    file cannot be opened, stderr is used as a fallback.

    Args:
        config: Logging configuration.

    Returns:
        The handlers that were installed.
    """
    level = _LEVEL_MAP.get(config.level.casefold(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if config.format.casefold() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []

    if config.file:
        try:
            file_path = Path(config.file).expanduser()
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            handlers.append(file_handler)
        except OSError as e:
            sys.stderr.write(f"Warning: Could not open log file {config.file}: {e}\n")

    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return handlers


@contextmanager
def logging_session(config: LoggingConfig) -> Iterator[list[logging.Handler]]:
    """Install logging handlers for the duration of a run.

    Handlers are removed from the root logger and closed on exit, which
    releases the log file handle.
    """
    handlers = configure_logging(config)
    try:
        yield handlers
    finally:
        root_logger = logging.getLogger()
        for handler in handlers:
            root_logger.removeHandler(handler)
            handler.close()
