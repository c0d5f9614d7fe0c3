"""
Retry queue — persistent queue for failed customer syncs.

Uses exponential backoff with jitter.  Queue items are stored through
a snapshot slot so they survive restarts.  The queue belongs to the
caller of the sync service; the core never retries on its own.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from timeledger.core.errors import StorageWriteError
from timeledger.core.persistence.snapshot import SYNC_RETRY_KEY, SnapshotSlot
from timeledger.core.persistence.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class RetryItem:
    """A single item in the retry queue."""

    id: str
    attempt: int = 0
    max_attempts: int = 3
    next_retry_at: float = 0.0
    created_at: float = field(default_factory=time.time)
    last_error: str = ""

    @property
    def exhausted(self) -> bool:
        """Whether all retry attempts have been used."""
        return self.attempt >= self.max_attempts

    @property
    def ready(self) -> bool:
        """Whether it's time to retry this item."""
        return time.time() >= self.next_retry_at

    def schedule_retry(self, base_delay: float = 1.0, max_delay: float = 60.0) -> None:
        """Schedule the next retry with exponential backoff + jitter."""
        self.attempt += 1
        delay = min(base_delay * (2 ** (self.attempt - 1)), max_delay)
        jitter = random.uniform(0, delay * 0.3)
        self.next_retry_at = time.time() + delay + jitter
        logger.debug(
            "Retry item '%s' scheduled: attempt %d/%d, delay %.1fs",
            self.id,
            self.attempt,
            self.max_attempts,
            delay + jitter,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RetryQueue:
    """Persistent retry queue with exponential backoff.

    Items live in memory and are written to the store after every
    change.  A failed write is logged and the queue keeps working.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
    ):
        self._slot: SnapshotSlot[list[RetryItem]] | None = (
            SnapshotSlot(store, SYNC_RETRY_KEY, list[RetryItem]) if store is not None else None
        )
        self._items: dict[str, RetryItem] = {}
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay

        if self._slot is not None:
            for item in self._slot.load(list):
                self._items[item.id] = item
            if self._items:
                logger.info("Loaded %d retry items", len(self._items))

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def ready_count(self) -> int:
        return sum(1 for item in self._items.values() if item.ready and not item.exhausted)

    def enqueue(self, item_id: str, error: str = "") -> RetryItem:
        """Add an item to the retry queue.

        If the item already exists, increments its attempt counter.
        """
        if item_id in self._items:
            item = self._items[item_id]
            item.last_error = error
            item.schedule_retry(self._base_delay, self._max_delay)
        else:
            item = RetryItem(
                id=item_id,
                max_attempts=self._max_attempts,
                last_error=error,
            )
            item.schedule_retry(self._base_delay, self._max_delay)
            self._items[item_id] = item

        self._save()
        return item

    def dequeue_ready(self) -> list[RetryItem]:
        """Get all items that are ready for retry."""
        ready = [
            item
            for item in self._items.values()
            if item.ready and not item.exhausted
        ]
        return sorted(ready, key=lambda i: i.next_retry_at)

    def complete(self, item_id: str) -> None:
        """Remove an item after successful retry."""
        if self._items.pop(item_id, None) is not None:
            self._save()

    def fail(self, item_id: str, error: str = "") -> RetryItem | None:
        """Record a retry failure. Returns None if the item is unknown."""
        item = self._items.get(item_id)
        if item is None:
            return None

        item.last_error = error
        if item.exhausted:
            logger.warning("Retry item '%s' exhausted after %d attempts", item_id, item.attempt)
            self._save()
            return item

        item.schedule_retry(self._base_delay, self._max_delay)
        self._save()
        return item

    def remove_exhausted(self) -> list[RetryItem]:
        """Remove and return all exhausted items."""
        exhausted = [item for item in self._items.values() if item.exhausted]
        for item in exhausted:
            del self._items[item.id]
        if exhausted:
            self._save()
        return exhausted

    def get_status(self) -> dict[str, Any]:
        """Queue status summary."""
        return {
            "total": self.size,
            "ready": self.ready_count,
            "exhausted": sum(1 for i in self._items.values() if i.exhausted),
            "items": [item.to_dict() for item in self._items.values()],
        }

    def _save(self) -> None:
        if self._slot is None:
            return
        try:
            self._slot.save(list(self._items.values()))
        except StorageWriteError as e:
            logger.warning("Retry queue not persisted: %s", e)
