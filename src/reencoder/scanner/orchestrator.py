"""Full filesystem scan that rebuilds the cache index."""

from __future__ import annotations

import logging
import os
import stat
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from reencoder.cache.models import CacheIndex
from reencoder.cache.store import make_entry
from reencoder.config.models import normalize_extensions
from reencoder.introspector.interface import VideoProber

# Report progress every N directory entries
PROGRESS_INTERVAL = 100


class ScanProgressCallback(Protocol):
    """Protocol for scan progress callbacks."""

    def on_scan_progress(self, entries_seen: int, videos_found: int) -> None:
        """Called periodically during the walk."""
        ...

    def on_scan_complete(self, videos_found: int, elapsed_seconds: float) -> None:
        """Called once when the walk finishes."""
        ...


def has_video_extension(name: str, extensions: Iterable[str]) -> bool:
    """Case-insensitive extension check (``extensions`` must be normalized)."""
    return os.path.splitext(name)[1].casefold() in extensions


class DirectoryScanner:
    """Walk a directory tree and record size and codec of each video.

    The result is meant to replace the cache content wholesale; it is
    never merged with previous entries.
    """

    def __init__(
        self,
        prober: VideoProber,
        extensions: Iterable[str],
        progress: ScanProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._prober = prober
        self._extensions = frozenset(normalize_extensions(tuple(extensions)))
        self._progress = progress
        self._logger = logger or logging.getLogger(__name__)

    def scan(self, root: str | Path) -> CacheIndex:
        """Scan ``root`` recursively.

        Files that disappear between listing and stat are skipped. Paths
        are recorded as ``os.path.join(root, ...)`` of the given root.

        Args:
            root: Directory to scan.

        Returns:
            New index of every matching regular file.
        """
        root_str = os.fspath(root)
        self._logger.info("Performing full filesystem scan of %s", root_str)
        start = time.monotonic()

        index: CacheIndex = {}
        seen = 0

        walker = os.walk(root_str, onerror=self._on_walk_error)
        for dirpath, dirnames, filenames in walker:
            dirnames.sort()
            for name in sorted(filenames):
                seen += 1
                if self._progress and seen % PROGRESS_INTERVAL == 0:
                    self._progress.on_scan_progress(seen, len(index))

                if not has_video_extension(name, self._extensions):
                    continue

                path = os.path.join(dirpath, name)
                try:
                    st = os.stat(path)
                except FileNotFoundError:
                    self._logger.debug("File vanished during scan: %s", path)
                    continue
                except OSError as e:
                    self._logger.warning("Cannot stat %s: %s", path, e)
                    continue

                if not stat.S_ISREG(st.st_mode):
                    continue

                codec = self._prober.get_video_codec(Path(path))
                index[path] = make_entry(path, st.st_size, codec)

        elapsed = time.monotonic() - start
        if self._progress:
            self._progress.on_scan_complete(len(index), elapsed)
        self._logger.info(
            "Scan complete: %d video files found in %.1fs", len(index), elapsed
        )
        return index

    def _on_walk_error(self, error: OSError) -> None:
        self._logger.warning("Cannot read directory %s: %s", error.filename, error)
