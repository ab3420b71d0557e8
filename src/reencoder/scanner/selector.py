"""Largest-eligible-file selection over the cache index."""

from __future__ import annotations

import logging
import os
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from reencoder.cache.models import CacheIndex
from reencoder.core.codecs import canonical_video_codec, video_codec_matches
from reencoder.core.formatting import format_mb
from reencoder.introspector.interface import VideoProber


@dataclass(frozen=True)
class VideoSelection:
    """The file chosen for one run iteration."""

    path: str
    size: int
    codec: str | None


class LargestFileSelector:
    """Pick the largest cached file not already in the target codec family.

    Selecting mutates the index: entries whose file is gone are removed,
    and entries without a codec are probed and updated in place. A path
    is probed at most once per selector, even if the probe returns
    nothing.
    """

    def __init__(
        self,
        prober: VideoProber,
        target_codec: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self._prober = prober
        self._target_codec = target_codec
        self._logger = logger or logging.getLogger(__name__)
        self._probed: set[str] = set()

    def select(
        self,
        cache: CacheIndex,
        exclude: Collection[str] = (),
    ) -> VideoSelection | None:
        """Return the largest eligible file, or None if nothing is left.

        Args:
            cache: Index to select from (modified in place).
            exclude: Paths to pass over for this call (for example files
                that already failed earlier in the run).

        Returns:
            The selection, or None when no eligible file remains.
        """
        # sorted() is stable, so equal sizes keep insertion order
        candidates = sorted(cache.values(), key=lambda entry: -entry.size)

        for entry in candidates:
            if not os.path.exists(entry.path):
                self._logger.info("Cached file not found, removing: %s", entry.path)
                del cache[entry.path]
                continue

            if entry.path in exclude:
                continue

            if entry.codec is None and entry.path not in self._probed:
                self._probed.add(entry.path)
                entry.codec = canonical_video_codec(
                    self._prober.get_video_codec(Path(entry.path))
                )

            if video_codec_matches(entry.codec, self._target_codec):
                self._logger.debug(
                    "Skipping %s file: %s (%s)",
                    entry.codec,
                    entry.path,
                    format_mb(entry.size),
                )
                continue

            self._logger.info(
                "Found largest eligible file: %s (%s, codec: %s)",
                entry.path,
                format_mb(entry.size),
                entry.codec or "unknown",
            )
            return VideoSelection(path=entry.path, size=entry.size, codec=entry.codec)

        self._logger.info("No eligible files left to encode")
        return None
