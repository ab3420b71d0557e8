"""Core utilities package.

Pure helpers with no dependencies on the rest of the package: codec
family handling, size formatting, and subprocess invocation.
"""

from reencoder.core.codecs import (
    SUPPORTED_TARGET_CODECS,
    VIDEO_CODEC_ALIASES,
    canonical_video_codec,
    output_label,
    video_codec_matches,
)
from reencoder.core.formatting import format_mb
from reencoder.core.subprocess_utils import ToolInvocation, run_command, run_streaming

__all__ = [
    "SUPPORTED_TARGET_CODECS",
    "VIDEO_CODEC_ALIASES",
    "ToolInvocation",
    "canonical_video_codec",
    "format_mb",
    "output_label",
    "run_command",
    "run_streaming",
    "video_codec_matches",
]
