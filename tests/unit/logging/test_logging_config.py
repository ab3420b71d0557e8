"""Unit tests for logging configuration."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from reencoder.config.models import LoggingConfig
from reencoder.logging import JSONFormatter, logging_session


class TestLoggingSession:
    """Tests for logging_session."""

    def test_file_handler_installed_and_removed(self, temp_dir: Path) -> None:
        """Should log to the file during the session and detach afterwards."""
        log_file = temp_dir / "logs" / "reencode.log"
        config = LoggingConfig(file=log_file, include_stderr=False)
        root = logging.getLogger()

        with logging_session(config) as handlers:
            assert isinstance(handlers[0], RotatingFileHandler)
            logging.getLogger("reencoder.test").info("hello from the run")

        assert all(handler not in root.handlers for handler in handlers)
        content = log_file.read_text()
        assert "reencoder.test - INFO - hello from the run" in content

    def test_stderr_fallback_when_file_unavailable(self, temp_dir: Path) -> None:
        """Should fall back to stderr if the log file cannot be opened."""
        blocker = temp_dir / "not_a_dir"
        blocker.touch()
        config = LoggingConfig(file=blocker / "x.log", include_stderr=False)

        with logging_session(config) as handlers:
            assert len(handlers) == 1
            assert isinstance(handlers[0], logging.StreamHandler)

    def test_json_format_writes_json_lines(self, temp_dir: Path) -> None:
        """Should write one JSON object per record in JSON mode."""
        log_file = temp_dir / "reencode.log"
        config = LoggingConfig(file=log_file, format="json", include_stderr=False)

        with logging_session(config):
            logging.getLogger("reencoder.test").info(
                "Restoring", extra={"target_path": "/v/a.mkv"}
            )

        data = json.loads(log_file.read_text().splitlines()[-1])
        assert data["message"] == "Restoring"
        assert data["target_path"] == "/v/a.mkv"

    def test_level_applied(self) -> None:
        """Should set the root level from configuration."""
        with logging_session(LoggingConfig(level="debug")):
            assert logging.getLogger().level == logging.DEBUG


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    @staticmethod
    def _record(msg: str, *args: object, **extra: object) -> logging.LogRecord:
        record = logging.LogRecord(
            "reencoder.executor.backup", logging.INFO, __file__, 1, msg, args, None
        )
        record.__dict__.update(extra)
        return record

    def test_promotes_file_operation_fields(self) -> None:
        """Should put backup and source paths at the top level."""
        record = self._record(
            "Creating backup",
            source_path="/v/a.mkv",
            backup_path="/v/a.mkv.backup_1",
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "reencoder.executor.backup"
        assert data["message"] == "Creating backup"
        assert data["source_path"] == "/v/a.mkv"
        assert data["backup_path"] == "/v/a.mkv.backup_1"
        assert "target_path" not in data

    def test_promotes_subprocess_fields(self) -> None:
        """Should keep command, return code and timing as typed values."""
        record = self._record(
            "Command completed", command="ffprobe", returncode=0, elapsed_seconds=0.25
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["command"] == "ffprobe"
        assert data["returncode"] == 0
        assert data["elapsed_seconds"] == 0.25

    def test_ignores_unknown_extras(self) -> None:
        """Should drop extra values it does not know about."""
        record = self._record("moved %s", "a", unrelated="x")

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "moved a"
        assert "unrelated" not in data

    def test_includes_exception(self) -> None:
        """Should render exception tracebacks."""
        try:
            raise OSError("disk full")
        except OSError:
            record = logging.LogRecord(
                "reencoder", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))

        assert "OSError: disk full" in data["exception"]
