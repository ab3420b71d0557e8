"""Configuration data models.

This module defines dataclasses for re-encoder configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from reencoder.core.codecs import SUPPORTED_TARGET_CODECS, canonical_video_codec

DEFAULT_VIDEO_EXTENSIONS: tuple[str, ...] = (
    ".mp4",
    ".mkv",
    ".avi",
    ".wmv",
    ".mov",
    ".flv",
    ".m4v",
)

VALID_PRESETS = frozenset(
    {
        "ultrafast",
        "superfast",
        "veryfast",
        "faster",
        "fast",
        "medium",
        "slow",
        "slower",
        "veryslow",
    }
)

VALID_LOG_LEVELS = frozenset({"debug", "info", "warning", "error"})


def _check_type(name: str, value: object, expected: type | tuple[type, ...]) -> None:
    """Reject values of the wrong type; bool never counts as a number."""
    if not isinstance(value, expected) or (
        isinstance(value, bool) and expected is not bool
    ):
        names = expected if isinstance(expected, tuple) else (expected,)
        raise ValueError(
            f"{name} must be {' or '.join(t.__name__ for t in names)}, "
            f"got {type(value).__name__} {value!r}"
        )


def normalize_extensions(extensions: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Lowercase extensions and ensure a leading dot; drop blanks."""
    result: list[str] = []
    for ext in extensions:
        _check_type("video_extensions entry", ext, str)
        ext = ext.strip().casefold()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        if ext not in result:
            result.append(ext)
    return tuple(result)


@dataclass
class LibraryConfig:
    """Where to look for videos and where to keep the size cache."""

    target_directory: Path = Path(".")
    video_extensions: tuple[str, ...] = DEFAULT_VIDEO_EXTENSIONS
    cache_file: Path = Path("filesize_cache.json")

    def __post_init__(self) -> None:
        self.video_extensions = normalize_extensions(self.video_extensions)
        if not self.video_extensions:
            raise ValueError("video_extensions must contain at least one extension")


@dataclass
class EncodingConfig:
    """Encoder settings and the replacement safety threshold."""

    target_codec: str = "hevc"
    crf: int = 20
    """Quality value: -crf on the CPU path, -cq on NVENC. Lower is better."""

    preset: str = "medium"
    use_gpu: bool = False

    min_size_reduction_percent: float = 10.0
    """Minimum reduction required before an original is replaced."""

    def __post_init__(self) -> None:
        _check_type("target_codec", self.target_codec, str)
        _check_type("crf", self.crf, int)
        _check_type("preset", self.preset, str)
        _check_type("use_gpu", self.use_gpu, bool)
        _check_type(
            "min_size_reduction_percent", self.min_size_reduction_percent, (int, float)
        )
        canonical = canonical_video_codec(self.target_codec)
        if canonical not in SUPPORTED_TARGET_CODECS:
            raise ValueError(
                f"target_codec must be one of {sorted(SUPPORTED_TARGET_CODECS)}, "
                f"got {self.target_codec!r}"
            )
        self.target_codec = canonical
        if not 0 <= self.crf <= 51:
            raise ValueError(f"crf must be between 0 and 51, got {self.crf}")
        self.preset = self.preset.casefold()
        if self.preset not in VALID_PRESETS:
            raise ValueError(
                f"preset must be one of {sorted(VALID_PRESETS)}, got {self.preset!r}"
            )
        if not 0 <= self.min_size_reduction_percent <= 100:
            raise ValueError(
                "min_size_reduction_percent must be between 0 and 100, "
                f"got {self.min_size_reduction_percent}"
            )


@dataclass
class RunConfig:
    """Per-invocation defaults."""

    num_files: int = 1

    def __post_init__(self) -> None:
        _check_type("num_files", self.num_files, int)
        self.num_files = max(1, self.num_files)


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging output."""

    level: str = "info"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = True
    max_bytes: int = 10_485_760
    backup_count: int = 5

    def __post_init__(self) -> None:
        _check_type("level", self.level, str)
        _check_type("format", self.format, str)
        _check_type("include_stderr", self.include_stderr, bool)
        _check_type("max_bytes", self.max_bytes, int)
        _check_type("backup_count", self.backup_count, int)
        if self.level.casefold() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"level must be one of {sorted(VALID_LOG_LEVELS)}, got {self.level!r}"
            )
        if self.format.casefold() not in ("text", "json"):
            raise ValueError(f"format must be 'text' or 'json', got {self.format!r}")


@dataclass
class ReencoderConfig:
    """Top-level configuration."""

    library: LibraryConfig = field(default_factory=LibraryConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    run: RunConfig = field(default_factory=RunConfig)
    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
