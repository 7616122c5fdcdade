"""Local retention of batches the transport could not deliver."""

import time
from typing import Any

from echobreaker.storage.stores import KeyValueStore, MemoryStore

PENDING_KEY = 'pendingData'
MAX_PENDING = 10


class PendingQueue:
    """Bounded FIFO of undelivered batch payloads.

    Only the newest ``max_items`` payloads are kept; older ones are dropped
    when the queue overflows.

    Attributes:
        store: Backing key-value store
        max_items: Maximum number of retained payloads

    """

    def __init__(self, store: KeyValueStore | None = None, max_items: int = MAX_PENDING):
        """Initialize the queue.

        Args:
            store: Backing store, defaults to an in-memory store
            max_items: Maximum number of retained payloads. Defaults to 10.

        """
        self.store: KeyValueStore = store if store is not None else MemoryStore()
        self.max_items = max_items

    def items(self) -> list[dict[str, Any]]:
        """Retained payloads, oldest first."""
        value = self.store.get(PENDING_KEY)
        return list(value) if isinstance(value, list) else []

    def push(self, payload: dict[str, Any]) -> int:
        """Retain a payload for later resubmission.

        Args:
            payload: Batch payload that failed to submit

        Returns:
            Queue size after the push.

        """
        pending = self.items()
        pending.append({**payload, 'timestamp': int(time.time() * 1000)})
        pending = pending[-self.max_items :]
        self.store.set(PENDING_KEY, pending)
        return len(pending)

    def replace(self, payloads: list[dict[str, Any]]) -> None:
        """Overwrite the queue contents."""
        self.store.set(PENDING_KEY, payloads[-self.max_items :])

    def __len__(self) -> int:
        """Number of retained payloads."""
        return len(self.items())
