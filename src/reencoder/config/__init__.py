"""Configuration management for the re-encoder.

Precedence: CLI flags > environment variables > TOML config file > defaults.
"""

from reencoder.config.env import EnvReader
from reencoder.config.loader import get_config_path, load_config, load_config_file
from reencoder.config.models import (
    DEFAULT_VIDEO_EXTENSIONS,
    EncodingConfig,
    LibraryConfig,
    LoggingConfig,
    ReencoderConfig,
    RunConfig,
    ToolPathsConfig,
)

__all__ = [
    "DEFAULT_VIDEO_EXTENSIONS",
    "EncodingConfig",
    "EnvReader",
    "LibraryConfig",
    "LoggingConfig",
    "ReencoderConfig",
    "RunConfig",
    "ToolPathsConfig",
    "get_config_path",
    "load_config",
    "load_config_file",
]
