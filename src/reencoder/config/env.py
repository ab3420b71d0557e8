"""Environment variable reader with dependency injection support."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion and validation.

    Supports dependency injection by accepting an optional env mapping,
    so tests can exercise env handling without touching os.environ.

    Example:
        reader = EnvReader(env={"CRF_VALUE": "24"})
        crf = reader.get_int("CRF_VALUE", 20)  # Returns 24
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        value = self._env.get(var)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer, logging a warning and using default if invalid."""
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float, logging a warning and using default if invalid."""
        value = self.get_str(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean.

        Recognizes "true", "1", "yes", "on" (case-insensitive) as true.
        All other non-empty values are treated as false.
        """
        value = self.get_str(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        value = self.get_str(var)
        if value is None:
            return default
        return Path(value).expanduser()

    def get_list(
        self, var: str, separator: str = ",", default: list[str] | None = None
    ) -> list[str] | None:
        """Get a separator-delimited list; empty items are dropped."""
        value = self.get_str(var)
        if value is None:
            return default
        return [part.strip() for part in value.split(separator) if part.strip()]
