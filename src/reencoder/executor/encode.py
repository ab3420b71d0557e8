"""Encode orchestration: run ffmpeg into a temporary output file.

ffmpeg never writes to a final name. It writes ``<stem>_<label>.mp4.tmp``
next to the source; the replacement step later renames that file into
place. TempOutputGuard removes the temporary file on every exit path,
including interpreter shutdown.
"""

from __future__ import annotations

import atexit
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

from reencoder.core.codecs import output_label
from reencoder.core.subprocess_utils import ToolInvocation, run_streaming
from reencoder.executor.command import build_encode_invocation
from reencoder.policy.planner import EncodePlan
from reencoder.scanner.selector import VideoSelection

OUTPUT_EXTENSION = ".mp4"
TEMP_SUFFIX = ".tmp"

EncodeRunner = Callable[[ToolInvocation], int]


def sibling_output_path(original: Path, target_codec: str) -> Path:
    """``/videos/movie.mkv`` -> ``/videos/movie_h265.mp4``."""
    label = output_label(target_codec)
    return original.with_name(f"{original.stem}_{label}{OUTPUT_EXTENSION}")


def temp_output_path(output_path: Path) -> Path:
    return output_path.with_name(output_path.name + TEMP_SUFFIX)


@dataclass
class EncodeResult:
    """Outcome of one encoder invocation."""

    success: bool
    output_path: Path
    """Sibling path the output would take when not replacing."""

    temp_path: Path
    duration_seconds: float
    returncode: int | None = None
    dry_run: bool = False


class TempOutputGuard:
    """Delete a temporary output file when the guarded block exits.

    Cleanup is also registered with atexit while the guard is active, so
    the file is removed if the interpreter shuts down mid-encode.
    """

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self.path = path
        self._logger = logger or logging.getLogger(__name__)

    def __enter__(self) -> TempOutputGuard:
        atexit.register(self.cleanup)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.cleanup()
        finally:
            atexit.unregister(self.cleanup)

    def cleanup(self) -> None:
        if self.path.exists():
            try:
                self.path.unlink()
                self._logger.info("Removed temporary output: %s", self.path)
            except OSError as e:
                self._logger.warning(
                    "Could not remove temporary output %s: %s", self.path, e
                )


class EncodeExecutor:
    """Invoke the encoder for a selected file.

    In dry-run mode nothing is executed and no file is created; the
    result reports a synthetic success.
    """

    def __init__(
        self,
        ffmpeg_path: Path | None,
        target_codec: str,
        dry_run: bool = False,
        runner: EncodeRunner = run_streaming,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the encode executor.

        Args:
            ffmpeg_path: Resolved ffmpeg executable (may be None in dry-run).
            target_codec: Canonical target codec family.
            dry_run: Log the command instead of running it.
            runner: Callable running an invocation and returning its exit
                code. Defaults to running it attached to the terminal.
            logger: Logger to report to.
        """
        if ffmpeg_path is None and not dry_run:
            raise ValueError("ffmpeg_path is required unless dry_run is set")
        self._ffmpeg_path = ffmpeg_path
        self._target_codec = target_codec
        self._dry_run = dry_run
        self._runner = runner
        self._logger = logger or logging.getLogger(__name__)

    def paths_for(self, selection: VideoSelection) -> tuple[Path, Path]:
        """Return (sibling output path, temporary output path)."""
        output_path = sibling_output_path(Path(selection.path), self._target_codec)
        return output_path, temp_output_path(output_path)

    def encode(self, selection: VideoSelection, plan: EncodePlan) -> EncodeResult:
        """Run the encoder for ``selection`` into its temporary path.

        The caller is expected to hold a TempOutputGuard for the returned
        temp path.
        """
        output_path, temp_path = self.paths_for(selection)
        invocation = build_encode_invocation(
            self._ffmpeg_path or "ffmpeg",
            Path(selection.path),
            temp_path,
            plan,
            self._target_codec,
        )

        mode = "GPU (NVENC)" if plan.use_gpu else "CPU"
        self._logger.info(
            "Encoding %s with %s encoder (quality %d, preset %s)",
            selection.path,
            mode,
            plan.crf,
            plan.preset,
        )

        start = time.monotonic()
        if self._dry_run:
            self._logger.info("[DRY RUN] Would execute: %s", invocation.describe())
            return EncodeResult(
                success=True,
                output_path=output_path,
                temp_path=temp_path,
                duration_seconds=0.0,
                dry_run=True,
            )

        self._logger.info("Command: %s", invocation.describe())
        returncode = self._runner(invocation)
        duration = time.monotonic() - start

        success = returncode == 0
        if success:
            self._logger.info("Encoding completed in %.1f minutes", duration / 60)
        else:
            self._logger.error(
                "Encoding failed for %s (exit code %d)", selection.path, returncode
            )
        return EncodeResult(
            success=success,
            output_path=output_path,
            temp_path=temp_path,
            duration_seconds=duration,
            returncode=returncode,
        )
