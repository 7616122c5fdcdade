"""Persistent cache of selectors confirmed to work, keyed by page type and target."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import logfire

from echobreaker.models import PageType, SelectorCacheEntry, Target, cache_key
from echobreaker.storage.stores import KeyValueStore, MemoryStore

CACHE_TTL = timedelta(hours=24)


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class SelectorCache:
    """Selector cache with a fixed validity window.

    Expired entries are never returned as hits but stay in the store until
    overwritten or until a full reset.

    Attributes:
        store: Backing key-value store
        ttl: Validity window of an entry
        clock: Callable returning the current UTC time

    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        ttl: timedelta = CACHE_TTL,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the cache.

        Args:
            store: Backing store, defaults to an in-memory store
            ttl: Validity window. Defaults to 24 hours.
            clock: Time source, injectable for tests

        """
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.ttl = ttl
        self.clock = clock

    def get(self, page_type: PageType, target: Target) -> SelectorCacheEntry | None:
        """Return the entry for a key if present and still valid."""
        value = self.store.get(cache_key(page_type, target))
        if not isinstance(value, dict):
            return None

        entry = SelectorCacheEntry.from_store(page_type, target, value)
        if entry is None:
            logfire.warn('Discarding malformed cache entry', page_type=page_type.value, target=target.value)
            return None

        if not entry.is_valid(self.clock(), self.ttl):
            logfire.debug('Cache entry expired', page_type=page_type.value, target=target.value)
            return None
        return entry

    def set(self, page_type: PageType, target: Target, query: str) -> SelectorCacheEntry:
        """Store a confirmed selector, stamped with the current time."""
        entry = SelectorCacheEntry(page_type=page_type, target=target, query=query, saved_at=self.clock())
        self.store.set(cache_key(page_type, target), entry.to_store())
        logfire.info('Cached selector', page_type=page_type.value, target=target.value, selector=query)
        return entry

    def entries(self) -> list[SelectorCacheEntry]:
        """Every stored entry, expired ones included."""
        entries = []
        for page_type in PageType:
            for target in Target:
                value = self.store.get(cache_key(page_type, target))
                if isinstance(value, dict):
                    entry = SelectorCacheEntry.from_store(page_type, target, value)
                    if entry is not None:
                        entries.append(entry)
        return entries

    def is_expired(self, entry: SelectorCacheEntry) -> bool:
        """Whether an entry is outside the validity window."""
        return not entry.is_valid(self.clock(), self.ttl)

    def clear(self) -> None:
        """Full reset: drop every cached selector."""
        self.store.clear()
        logfire.info('Selector cache cleared')
