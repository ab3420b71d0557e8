"""JSON log formatter for ``--log-json``.

Each record becomes one line:

    {"timestamp": "...", "level": "INFO", "logger": "reencoder.executor.backup",
     "message": "Creating backup", "source_path": "/v/a.mkv",
     "backup_path": "/v/a.mkv.backup_1700000000"}

File-operation and subprocess fields passed through ``extra`` are
promoted to top-level keys so log processors can filter on them.
Any other ``extra`` values are dropped.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# extra= keys emitted by executor.backup and core.subprocess_utils
RECORD_FIELDS: tuple[str, ...] = (
    "source_path",
    "backup_path",
    "target_path",
    "command",
    "returncode",
    "elapsed_seconds",
    "timeout_seconds",
)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in RECORD_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
