"""Cache entry types.

CacheEntry is the in-memory record used by the scanner, selector and
replacement steps. StoredCacheEntry is the pydantic model for one value
of the on-disk JSON object; it accepts both the current object shape and
the legacy bare-integer shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reencoder.core.codecs import canonical_video_codec


@dataclass
class CacheEntry:
    """Size and codec of one video file.

    Attributes:
        path: Path as recorded at scan time (the cache key).
        size: File size in bytes.
        codec: Canonical codec family, or None if not probed yet.
    """

    path: str
    size: int
    codec: str | None = None


# Path -> entry, in insertion order
CacheIndex = dict[str, CacheEntry]


class StoredCacheEntry(BaseModel):
    """On-disk value: ``{"size": int, "codec": str | null}``.

    Legacy caches stored the size alone (``"movie.mkv": 123456``). Those
    values are migrated on load to ``{"size": 123456, "codec": null}``.
    """

    model_config = ConfigDict(extra="ignore")

    size: int = Field(ge=0)
    codec: str | None = None

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_size(cls, data: Any) -> Any:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return {"size": data, "codec": None}
        return data

    @field_validator("codec")
    @classmethod
    def normalize_codec(cls, v: str | None) -> str | None:
        return canonical_video_codec(v)

    def to_entry(self, path: str) -> CacheEntry:
        return CacheEntry(path=path, size=self.size, codec=self.codec)

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> StoredCacheEntry:
        return cls(size=entry.size, codec=entry.codec)
