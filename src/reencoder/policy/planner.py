"""Encoder parameter planning.

GOP length is fixed from the source framerate: a keyframe every two
seconds, at least one second apart, with scene-cut detection disabled
by the command builder. Seeking and segmenting are then predictable
regardless of content.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from fractions import Fraction

from reencoder.config.models import EncodingConfig

logger = logging.getLogger(__name__)

GOP_DURATION_SECONDS = 2.0
MIN_GOP_DURATION_SECONDS = 1.0
DEFAULT_KEYINT = 120
DEFAULT_MIN_KEYINT = 60


@dataclass(frozen=True)
class EncodePlan:
    """Encoder parameters for one file."""

    crf: int
    preset: str
    keyint: int
    min_keyint: int
    use_gpu: bool
    framerate: float | None = None
    """Parsed source framerate, None when defaults were used."""


def parse_framerate(value: str) -> float:
    """Parse an ffprobe framerate (``30000/1001``, ``25/1`` or ``29.97``).

    Raises:
        ValueError: If the value is not a positive finite number.
    """
    try:
        rate = float(Fraction(value.strip()))
    except (ValueError, ZeroDivisionError, OverflowError) as e:
        raise ValueError(f"invalid framerate {value!r}") from e
    if not math.isfinite(rate) or rate <= 0:
        raise ValueError(f"invalid framerate {value!r}")
    return rate


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def plan_encode(framerate: str | None, encoding: EncodingConfig) -> EncodePlan:
    """Derive encoder parameters from a probed framerate.

    Args:
        framerate: Raw framerate string from the prober, or None.
        encoding: Quality, preset and GPU settings.

    Returns:
        EncodePlan. Unknown or unparseable framerates use
        keyint=120 / min_keyint=60.
    """
    keyint, min_keyint = DEFAULT_KEYINT, DEFAULT_MIN_KEYINT
    rate: float | None = None

    if framerate is None:
        logger.info(
            "Could not determine framerate. "
            "Using defaults (keyint: %d, min-keyint: %d)",
            keyint,
            min_keyint,
        )
    else:
        try:
            rate = parse_framerate(framerate)
        except ValueError as e:
            logger.warning("Could not parse framerate. Using defaults: %s", e)
        else:
            keyint = max(_round_half_up(rate * GOP_DURATION_SECONDS), 1)
            min_keyint = max(_round_half_up(rate * MIN_GOP_DURATION_SECONDS), 1)
            min_keyint = min(min_keyint, keyint)
            logger.info(
                "Framerate: %.2f fps, keyframe interval: %d (min: %d)",
                rate,
                keyint,
                min_keyint,
            )

    return EncodePlan(
        crf=encoding.crf,
        preset=encoding.preset,
        keyint=keyint,
        min_keyint=min_keyint,
        use_gpu=encoding.use_gpu,
        framerate=rate,
    )
