"""External tool discovery.

ffmpeg is required to encode; ffprobe is optional (codec and framerate
are then treated as unknown).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from reencoder.exceptions import ToolNotAvailableError

logger = logging.getLogger(__name__)

INSTALL_HINTS: dict[str, str] = {
    "ffmpeg": "Install ffmpeg and ensure it is on PATH, or set FFMPEG_PATH.",
    "ffprobe": "ffprobe ships with ffmpeg; install it or set FFPROBE_PATH.",
}


def find_tool(name: str, configured: Path | None = None) -> Path | None:
    """Resolve a tool path from configuration or PATH.

    Args:
        name: Executable name, e.g. ``ffmpeg``.
        configured: Explicit path from configuration, if any.

    Returns:
        Path to the executable, or None if it cannot be found.
    """
    if configured is not None:
        if configured.is_file():
            return configured
        logger.warning("Configured %s path does not exist: %s", name, configured)
        return None

    found = shutil.which(name)
    return Path(found) if found else None


def require_tool(name: str, configured: Path | None = None) -> Path:
    """Like find_tool, but raise ToolNotAvailableError if missing."""
    path = find_tool(name, configured)
    if path is None:
        raise ToolNotAvailableError(
            f"Required tool not available: {name}. {INSTALL_HINTS.get(name, '')}"
        )
    return path
