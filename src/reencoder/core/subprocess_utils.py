"""Subprocess utilities for external tool invocation.

Commands are described by a ToolInvocation (executable plus argument
list) and never assembled as shell strings, so file names with quotes,
spaces or shell metacharacters need no escaping.
"""

from __future__ import annotations

import logging
import shlex
import subprocess  # nosec B404 - subprocess is required for ffmpeg/ffprobe
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """A fully-resolved external command.

    Attributes:
        executable: Path or name of the program to run.
        args: Arguments passed after the executable.
    """

    executable: str | Path
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        """Argument vector suitable for subprocess."""
        return [str(self.executable), *self.args]

    @property
    def command_name(self) -> str:
        return Path(str(self.executable)).name

    def describe(self) -> str:
        """Shell-quoted rendering for logs only."""
        return shlex.join(self.argv)


def run_command(
    invocation: ToolInvocation,
    timeout: int = 120,
    **kwargs: Any,
) -> tuple[str, str, int]:
    """Run a short-lived command and capture its output.

    Args:
        invocation: Command to run.
        timeout: Timeout in seconds (default 120).
        **kwargs: Additional subprocess.run arguments.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        subprocess.TimeoutExpired: If the command times out.
        OSError: If the executable cannot be started.
    """
    logger.debug(
        "Executing command: %s",
        invocation.describe(),
        extra={"command": invocation.command_name},
    )

    start_time = time.monotonic()
    try:
        result = subprocess.run(  # nosec B603 - argv list, no shell
            invocation.argv,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Command timed out after %ds: %s",
            timeout,
            invocation.command_name,
            extra={"command": invocation.command_name, "timeout_seconds": timeout},
        )
        raise

    logger.debug(
        "Command completed",
        extra={
            "command": invocation.command_name,
            "elapsed_seconds": round(time.monotonic() - start_time, 3),
            "returncode": result.returncode,
        },
    )
    return result.stdout or "", result.stderr or "", result.returncode


def run_streaming(invocation: ToolInvocation) -> int:
    """Run a long-lived command with its output attached to the terminal.

    No timeout is applied: the encoder is allowed to run as long as it
    needs. Interrupts propagate to the caller.

    Args:
        invocation: Command to run.

    Returns:
        The process return code. A command that cannot be started
        returns 127, matching the shell convention.
    """
    logger.debug("Executing command: %s", invocation.describe())
    try:
        completed = subprocess.run(invocation.argv, check=False)  # nosec B603
    except OSError as e:
        logger.error("Could not start %s: %s", invocation.command_name, e)
        return 127
    return completed.returncode
