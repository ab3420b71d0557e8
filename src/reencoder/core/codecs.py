"""Video codec families and alias resolution.

ffprobe reports codec names such as ``hevc`` while users and older cache
files may say ``h265`` or ``x265``. Everything that compares or stores a
codec goes through this module so the cache only ever holds canonical
names.
"""

from __future__ import annotations

# =============================================================================
# Codec Alias Groups
# =============================================================================

_HEVC = frozenset({"hevc", "h265", "h.265", "x265", "hvc1", "hev1"})
_H264 = frozenset({"h264", "h.264", "avc", "avc1", "x264"})

VIDEO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "hevc": _HEVC,
    "h265": _HEVC,
    "h264": _H264,
    "avc": _H264,
    "vp9": frozenset({"vp9", "vp09"}),
    "av1": frozenset({"av1", "av01", "libaom-av1"}),
    "mpeg4": frozenset({"mpeg4", "mp4v"}),
}

# Canonical name for each alias group, used when writing to the cache
_CANONICAL: dict[str, str] = {}
for _canonical in ("hevc", "h264", "vp9", "av1", "mpeg4"):
    for _alias in VIDEO_CODEC_ALIASES[_canonical]:
        _CANONICAL[_alias] = _canonical

# Target families the encoder can produce, with the label used in
# sibling output names (movie_h265.mp4)
SUPPORTED_TARGET_CODECS: dict[str, str] = {
    "hevc": "h265",
    "h264": "h264",
}


def canonical_video_codec(codec: str | None) -> str | None:
    """Return the canonical family name for a codec identifier.

    Unknown identifiers are returned casefolded and stripped. Empty or
    missing values return None ("not probed / unknown").
    """
    if codec is None:
        return None
    normalized = codec.casefold().strip()
    if not normalized:
        return None
    return _CANONICAL.get(normalized, normalized)


def video_codec_matches(current_codec: str | None, target: str) -> bool:
    """Check if a codec belongs to the target family (case-insensitive).

    Args:
        current_codec: Codec from ffprobe or the cache.
        target: Target codec family, e.g. ``hevc``.

    Returns:
        True if the codec is already in the target family.
    """
    if current_codec is None:
        return False

    current_lower = current_codec.casefold().strip()
    target_lower = target.casefold().strip()

    if current_lower == target_lower:
        return True

    return current_lower in VIDEO_CODEC_ALIASES.get(target_lower, frozenset())


def output_label(target_codec: str) -> str:
    """Suffix label for sibling output files of a target family."""
    canonical = canonical_video_codec(target_codec) or target_codec
    return SUPPORTED_TARGET_CODECS.get(canonical, canonical)
