"""Encoding and replacement executors."""

from reencoder.executor.command import (
    ENCODERS,
    NVENC_PRESET_MAP,
    build_encode_invocation,
    map_nvenc_preset,
)
from reencoder.executor.encode import (
    EncodeExecutor,
    EncodeResult,
    TempOutputGuard,
    sibling_output_path,
    temp_output_path,
)
from reencoder.executor.replace import (
    ReplacementAction,
    ReplacementExecutor,
    ReplacementOutcome,
    ReplacementResult,
    decide,
    size_reduction_percent,
)

__all__ = [
    "ENCODERS",
    "NVENC_PRESET_MAP",
    "EncodeExecutor",
    "EncodeResult",
    "ReplacementAction",
    "ReplacementExecutor",
    "ReplacementOutcome",
    "ReplacementResult",
    "TempOutputGuard",
    "build_encode_invocation",
    "decide",
    "map_nvenc_preset",
    "sibling_output_path",
    "size_reduction_percent",
    "temp_output_path",
]
