"""Persistent file-size cache.

The cache file is a JSON object mapping file path to
``{"size": int, "codec": str | null}``. It never expires; stale entries
are pruned by the selector when their file no longer exists.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from reencoder.cache.models import CacheEntry, CacheIndex, StoredCacheEntry
from reencoder.exceptions import CacheCorruptError

TEMP_SUFFIX = ".tmp"


class CacheStore:
    """Load and save the cache file.

    Loading fails soft: a missing file yields an empty index, and a
    corrupt file yields an empty index plus a warning. Saving always
    writes the complete index (full overwrite, never an append).
    """

    def __init__(self, path: Path, logger: logging.Logger | None = None) -> None:
        self.path = Path(path)
        self._logger = logger or logging.getLogger(__name__)

    def load(self) -> CacheIndex:
        """Load the cache, returning an empty index if absent or corrupt."""
        if not self.path.exists():
            self._logger.debug("No cache file at %s", self.path)
            return {}

        try:
            return self._parse(self.path.read_bytes())
        except CacheCorruptError as e:
            self._logger.warning("Cache file is corrupt (%s). Starting fresh.", e)
            return {}
        except OSError as e:
            self._logger.warning(
                "Cannot read cache file %s: %s. Starting fresh.", self.path, e
            )
            return {}

    def _parse(self, data: bytes) -> CacheIndex:
        try:
            raw = json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise CacheCorruptError(f"not UTF-8 text: {e}") from e
        except json.JSONDecodeError as e:
            raise CacheCorruptError(f"invalid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise CacheCorruptError(
                f"expected a JSON object, got {type(raw).__name__}"
            )

        index: CacheIndex = {}
        migrated = 0
        for path, value in raw.items():
            try:
                stored = StoredCacheEntry.model_validate(value)
            except ValidationError as e:
                self._logger.warning(
                    "Dropping invalid cache entry for %s: %s",
                    path,
                    e.errors()[0]["msg"],
                )
                continue
            if not isinstance(value, dict):
                migrated += 1
            index[path] = stored.to_entry(path)

        if migrated:
            self._logger.info("Migrated %d legacy cache entries", migrated)
        self._logger.debug("Loaded %d cache entries from %s", len(index), self.path)
        return index

    def save(self, index: CacheIndex) -> None:
        """Persist the complete index.

        The file is written beside the target and renamed over it, so an
        interrupted save leaves the previous cache intact.

        Raises:
            OSError: If the cache cannot be written.
        """
        payload = {
            path: StoredCacheEntry.from_entry(entry).model_dump()
            for path, entry in index.items()
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(self.path.name + TEMP_SUFFIX)
        try:
            temp_path.write_text(
                json.dumps(payload, indent=2) + "\n", encoding="utf-8"
            )
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        self._logger.debug("Saved %d cache entries to %s", len(index), self.path)


def make_entry(path: str, size: int, codec: str | None) -> CacheEntry:
    """Build an entry, storing the codec under its canonical name."""
    return StoredCacheEntry(size=size, codec=codec).to_entry(path)
