"""
Keyed async resource cache.

Provides:
- CacheEntry: immutable {data, is_loading, error} snapshot
- EntryMap: keyed entries with loading/terminal transitions
- ResourceCache: list/detail cache with mutation reconciliation
"""

from aaraazi.cache.keys import (
    UNFILTERED,
    CacheKey,
    FilteredBy,
    Unfiltered,
    list_key,
)
from aaraazi.cache.entries import CacheEntry, CacheEvent, EntryMap
from aaraazi.cache.base import KeyedStore
from aaraazi.cache.resource_cache import ResourceCache, ResourceService

__all__ = [
    "UNFILTERED",
    "CacheKey",
    "FilteredBy",
    "Unfiltered",
    "list_key",
    "CacheEntry",
    "CacheEvent",
    "EntryMap",
    "KeyedStore",
    "ResourceCache",
    "ResourceService",
]
