"""Persistent path -> {size, codec} cache."""

from reencoder.cache.models import CacheEntry, CacheIndex, StoredCacheEntry
from reencoder.cache.store import CacheStore, make_entry

__all__ = [
    "CacheEntry",
    "CacheIndex",
    "CacheStore",
    "StoredCacheEntry",
    "make_entry",
]
