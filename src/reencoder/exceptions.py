"""Exception taxonomy for the re-encoder.

Only EncodeFailedError stops a run. The others describe conditions that
are handled locally (logged, file skipped, cache reset) by the component
that raises or catches them.
"""

from pathlib import Path


class ReencoderError(Exception):
    """Base class for re-encoder errors."""


class CacheCorruptError(ReencoderError):
    """The persisted cache could not be parsed."""


class ToolNotAvailableError(ReencoderError):
    """A required external tool (ffmpeg) is not installed."""


class EncodeFailedError(ReencoderError):
    """The external encoder reported failure for the selected file."""

    def __init__(self, path: str, returncode: int | None = None) -> None:
        self.path = path
        self.returncode = returncode
        detail = f" (exit code {returncode})" if returncode is not None else ""
        super().__init__(f"Encoding failed for {path}{detail}")


class TempArtifactMissingError(ReencoderError):
    """The encoder reported success but produced no temporary output."""

    def __init__(self, temp_path: Path) -> None:
        self.temp_path = temp_path
        super().__init__(f"Temporary output file not found: {temp_path}")


class ReplacementFailedError(ReencoderError):
    """Moving the encoded output into place failed.

    Attributes:
        original_path: File that was being replaced.
        restored: True if the original was confirmed back in place.
    """

    def __init__(self, message: str, original_path: Path, restored: bool) -> None:
        self.original_path = original_path
        self.restored = restored
        super().__init__(message)


class ConfigError(ReencoderError):
    """Configuration file or values are invalid."""
