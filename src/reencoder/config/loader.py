"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (applied by the caller on the returned config)
2. Environment variables
3. Config file (TOML)
4. Default values

Environment variables:
- REENCODER_CONFIG: Path to the TOML config file
- TARGET_DIRECTORY: Root directory to scan
- VIDEO_EXTENSIONS: Comma-separated list of extensions (".mp4,.mkv")
- CACHE_FILE: Path to the size/codec cache file
- TARGET_CODEC: Target codec family (hevc or h264)
- CRF_VALUE: Encoder quality value
- PRESET: Encoder speed preset
- USE_GPU: Use NVENC hardware encoding ("true"/"false")
- MIN_SIZE_REDUCTION: Minimum size reduction percent for replacement
- NUM_FILES: Default number of files to process per run
- FFMPEG_PATH / FFPROBE_PATH: Explicit tool paths
- LOG_FILE / LOG_LEVEL / LOG_FORMAT: Logging overrides
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from reencoder.config.env import EnvReader
from reencoder.config.models import (
    EncodingConfig,
    LibraryConfig,
    LoggingConfig,
    ReencoderConfig,
    RunConfig,
    ToolPathsConfig,
)
from reencoder.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "REENCODER_CONFIG"

_PATH_KEYS = frozenset({"target_directory", "cache_file", "ffmpeg", "ffprobe", "file"})


def get_config_path(env: Mapping[str, str] | None = None) -> Path | None:
    """Config file named by REENCODER_CONFIG, or None."""
    return EnvReader(env).get_path(CONFIG_PATH_ENV)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Raises:
        ConfigError: If the file is missing, unreadable or not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    section = dict(value)
    for key in _PATH_KEYS & section.keys():
        if section[key] is not None:
            section[key] = Path(str(section[key])).expanduser()
    if "video_extensions" in section:
        extensions = section["video_extensions"]
        if isinstance(extensions, str):
            extensions = extensions.split(",")
        section["video_extensions"] = tuple(extensions)
    return section


def _set_if(section: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        section[key] = value


def _apply_env(
    sections: dict[str, dict[str, Any]], reader: EnvReader
) -> None:
    library = sections["library"]
    _set_if(library, "target_directory", reader.get_path("TARGET_DIRECTORY"))
    extensions = reader.get_list("VIDEO_EXTENSIONS")
    if extensions is not None:
        library["video_extensions"] = tuple(extensions)
    _set_if(library, "cache_file", reader.get_path("CACHE_FILE"))

    encoding = sections["encoding"]
    _set_if(encoding, "target_codec", reader.get_str("TARGET_CODEC"))
    _set_if(encoding, "crf", reader.get_int("CRF_VALUE"))
    _set_if(encoding, "preset", reader.get_str("PRESET"))
    _set_if(encoding, "use_gpu", reader.get_bool("USE_GPU"))
    _set_if(
        encoding,
        "min_size_reduction_percent",
        reader.get_float("MIN_SIZE_REDUCTION"),
    )

    _set_if(sections["run"], "num_files", reader.get_int("NUM_FILES"))

    tools = sections["tools"]
    _set_if(tools, "ffmpeg", reader.get_path("FFMPEG_PATH"))
    _set_if(tools, "ffprobe", reader.get_path("FFPROBE_PATH"))

    logging_section = sections["logging"]
    _set_if(logging_section, "file", reader.get_path("LOG_FILE"))
    _set_if(logging_section, "level", reader.get_str("LOG_LEVEL"))
    _set_if(logging_section, "format", reader.get_str("LOG_FORMAT"))


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ReencoderConfig:
    """Build the effective configuration from file, environment and defaults.

    Args:
        config_path: Explicit config file. If None, REENCODER_CONFIG is
            consulted; with neither, only environment and defaults apply.
        env: Environment mapping (defaults to os.environ).

    Returns:
        Validated ReencoderConfig.

    Raises:
        ConfigError: If the file cannot be loaded or a value is invalid.
    """
    reader = EnvReader(env)
    path = config_path if config_path is not None else get_config_path(env)

    data: dict[str, Any] = {}
    if path is not None:
        data = load_config_file(path)
        logger.debug("Loaded config file %s", path)

    sections = {
        name: _section(data, name)
        for name in ("library", "encoding", "run", "tools", "logging")
    }
    _apply_env(sections, reader)

    try:
        return ReencoderConfig(
            library=LibraryConfig(**sections["library"]),
            encoding=EncodingConfig(**sections["encoding"]),
            run=RunConfig(**sections["run"]),
            tools=ToolPathsConfig(**sections["tools"]),
            logging=LoggingConfig(**sections["logging"]),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
