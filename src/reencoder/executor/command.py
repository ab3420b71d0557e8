"""FFmpeg command building for re-encoding.

Both paths produce an MP4 with stream-copied audio, a deinterlace filter,
profile ``main`` and a fixed GOP (scene-cut disabled).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from reencoder.core.subprocess_utils import ToolInvocation
from reencoder.policy.planner import EncodePlan


@dataclass(frozen=True)
class EncoderSpec:
    """FFmpeg encoder names for one target codec family."""

    software: str
    hardware: str
    params_flag: str


ENCODERS: dict[str, EncoderSpec] = {
    "hevc": EncoderSpec("libx265", "hevc_nvenc", "-x265-params"),
    "h264": EncoderSpec("libx264", "h264_nvenc", "-x264-params"),
}

# x264/x265 preset name -> NVENC preset (p1 fastest .. p7 best quality)
NVENC_PRESET_MAP: dict[str, str] = {
    "ultrafast": "p1",
    "superfast": "p2",
    "veryfast": "p3",
    "faster": "p4",
    "fast": "p4",
    "medium": "p5",
    "slow": "p6",
    "slower": "p7",
    "veryslow": "p7",
}
DEFAULT_NVENC_PRESET = "p5"


def map_nvenc_preset(preset: str) -> str:
    """Translate a software preset name to the NVENC vocabulary."""
    return NVENC_PRESET_MAP.get(preset.casefold(), DEFAULT_NVENC_PRESET)


def get_encoder_spec(target_codec: str) -> EncoderSpec:
    try:
        return ENCODERS[target_codec]
    except KeyError:
        raise ValueError(f"No encoder available for codec {target_codec!r}") from None


def _output_args(output_path: Path) -> list[str]:
    return [
        "-c:a",
        "copy",
        "-movflags",
        "+faststart",
        "-f",
        "mp4",
        "-y",
        str(output_path),
    ]


def build_software_args(
    input_path: Path, output_path: Path, plan: EncodePlan, spec: EncoderSpec
) -> list[str]:
    """Arguments for the CPU (libx265/libx264) path."""
    codec_params = f"scenecut=0:keyint={plan.keyint}:min-keyint={plan.min_keyint}"
    return [
        "-i",
        str(input_path),
        "-c:v",
        spec.software,
        "-crf",
        str(plan.crf),
        "-preset",
        plan.preset,
        "-tune",
        "fastdecode",
        "-profile:v",
        "main",
        "-vf",
        "yadif",
        spec.params_flag,
        codec_params,
        *_output_args(output_path),
    ]


def build_nvenc_args(
    input_path: Path, output_path: Path, plan: EncodePlan, spec: EncoderSpec
) -> list[str]:
    """Arguments for the NVIDIA NVENC path."""
    return [
        "-hwaccel",
        "cuda",
        "-hwaccel_output_format",
        "cuda",
        "-i",
        str(input_path),
        "-c:v",
        spec.hardware,
        "-preset",
        map_nvenc_preset(plan.preset),
        "-cq",
        str(plan.crf),
        "-profile:v",
        "main",
        "-vf",
        "yadif_cuda",
        "-g",
        str(plan.keyint),
        "-keyint_min",
        str(plan.min_keyint),
        "-no-scenecut",
        "1",
        *_output_args(output_path),
    ]


def build_encode_invocation(
    ffmpeg_path: str | Path,
    input_path: Path,
    output_path: Path,
    plan: EncodePlan,
    target_codec: str,
) -> ToolInvocation:
    """Build the complete ffmpeg invocation for one encode.

    Args:
        ffmpeg_path: ffmpeg executable.
        input_path: Source video.
        output_path: Where ffmpeg writes (the temporary output).
        plan: Encoder parameters.
        target_codec: Canonical target codec family.

    Returns:
        ToolInvocation ready to run.
    """
    spec = get_encoder_spec(target_codec)
    if plan.use_gpu:
        args = build_nvenc_args(input_path, output_path, plan, spec)
    else:
        args = build_software_args(input_path, output_path, plan, spec)
    return ToolInvocation(ffmpeg_path, tuple(args))
