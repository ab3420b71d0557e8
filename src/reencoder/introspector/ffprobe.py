"""ffprobe-based implementation of the VideoProber protocol."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from reencoder.core.subprocess_utils import ToolInvocation, run_command

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 60


class FFprobeProber:
    """Query the first video stream with ffprobe.

    Any failure (missing tool, timeout, non-zero exit, empty output) is
    logged and reported as None so callers treat the value as unknown.
    """

    def __init__(
        self,
        ffprobe_path: Path | None,
        timeout: int = PROBE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the prober.

        Args:
            ffprobe_path: Resolved ffprobe executable. None disables probing.
            timeout: Per-probe timeout in seconds.
        """
        self._ffprobe_path = ffprobe_path
        self._timeout = timeout
        if ffprobe_path is None:
            logger.warning(
                "ffprobe not available; codecs and framerates will be unknown"
            )

    @property
    def available(self) -> bool:
        return self._ffprobe_path is not None

    def build_invocation(self, path: Path, entry: str) -> ToolInvocation:
        """Build the ffprobe command reading one stream entry of v:0."""
        return ToolInvocation(
            self._ffprobe_path or "ffprobe",
            (
                "-v",
                "error",
                "-select_streams",
                "v:0",
                "-show_entries",
                f"stream={entry}",
                "-of",
                "default=noprint_wrappers=1:nokey=1",
                str(path),
            ),
        )

    def get_video_codec(self, path: Path) -> str | None:
        return self._probe(path, "codec_name")

    def get_framerate(self, path: Path) -> str | None:
        return self._probe(path, "r_frame_rate")

    def _probe(self, path: Path, entry: str) -> str | None:
        if self._ffprobe_path is None:
            return None

        try:
            stdout, stderr, returncode = run_command(
                self.build_invocation(path, entry), timeout=self._timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning("ffprobe timed out reading %s of %s", entry, path)
            return None
        except OSError as e:
            logger.warning("ffprobe could not be run for %s: %s", path, e)
            return None

        if returncode != 0:
            logger.debug(
                "ffprobe failed for %s (rc=%s): %s", path, returncode, stderr.strip()
            )
            return None

        # Some containers report the entry more than once; use the first line
        lines = [line.strip() for line in stdout.splitlines() if line.strip()]
        return lines[0] if lines else None
