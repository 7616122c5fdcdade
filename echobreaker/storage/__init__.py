"""Storage components: selector cache, pending queue and debug output."""

from echobreaker.storage.cache import CACHE_TTL, SelectorCache
from echobreaker.storage.debug import DebugManager
from echobreaker.storage.pending import PendingQueue
from echobreaker.storage.stores import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    'CACHE_TTL',
    'DebugManager',
    'JsonFileStore',
    'KeyValueStore',
    'MemoryStore',
    'PendingQueue',
    'SelectorCache',
]
