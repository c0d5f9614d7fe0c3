"""
Snapshot slots — typed JSON values over a KeyValueStore.

A slot binds one storage key to one Pydantic-validated shape.  Loading
never fails: missing, malformed or wrongly-shaped data yields the
caller's default, so the application always boots into a usable state.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Generic, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as ShapeError

from timeledger.core.errors import StorageDecodeError
from timeledger.core.persistence.store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fixed storage keys
LEDGER_KEY = "ledger-entries"
DIRECTORY_KEY = "directory-customers"
REPORT_ID_COUNTERS_KEY = "report-id-counters"
SYNC_RETRY_KEY = "customer-sync-retry"


class SnapshotSlot(Generic[T]):
    """A single persisted value of type ``T`` under a fixed key."""

    def __init__(self, store: KeyValueStore, key: str, shape: Any):
        self._store = store
        self._key = key
        self._adapter: TypeAdapter[T] = TypeAdapter(shape)

    @property
    def key(self) -> str:
        return self._key

    def decode(self, raw: bytes) -> T:
        """Decode raw bytes into the slot's shape.

        Raises:
            StorageDecodeError: If the bytes are not valid JSON of the
                expected shape.
        """
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageDecodeError(f"'{self._key}' is not valid JSON: {e}") from e
        try:
            return self._adapter.validate_python(data)
        except ShapeError as e:
            raise StorageDecodeError(
                f"'{self._key}' has an unexpected shape: {e.error_count()} error(s)"
            ) from e

    def load(self, default: Callable[[], T]) -> T:
        """Load the stored value, or ``default()`` when absent or unreadable."""
        raw = self._store.get(self._key)
        if raw is None:
            logger.debug("No stored value for '%s' — starting empty", self._key)
            return default()
        try:
            value = self.decode(raw)
        except StorageDecodeError as e:
            logger.warning("%s — starting empty", e)
            return default()
        logger.debug("Loaded '%s'", self._key)
        return value

    def save(self, value: T) -> None:
        """Serialize and store the full value.

        Raises:
            StorageWriteError: If the underlying store refuses the write.
        """
        data = self._adapter.dump_python(value, mode="json")
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        self._store.set(self._key, content.encode("utf-8"))

    def clear(self) -> None:
        self._store.clear(self._key)
