"""VideoProber interface for codec and framerate lookup."""

from pathlib import Path
from typing import Protocol


class VideoProber(Protocol):
    """Protocol for probing the primary video stream of a file.

    Implementations never raise for an unreadable file or a missing
    tool; they return None ("unknown") instead.
    """

    def get_video_codec(self, path: Path) -> str | None:
        """Return the codec name of the first video stream, or None."""
        ...

    def get_framerate(self, path: Path) -> str | None:
        """Return the raw framerate string (e.g. ``30000/1001``), or None."""
        ...
