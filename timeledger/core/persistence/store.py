"""
Key-value byte stores — the durable layer under every snapshot.

The contract is deliberately small: ``get`` returns raw bytes or None,
``set`` stores raw bytes or raises StorageWriteError, ``clear`` drops a
key.  Callers never see an I/O error on read; a value that cannot be
read is simply absent.

FileStore keeps one ``<key>.json`` file per key in a data directory.
Writes are atomic (write to temp file, then rename) so a crash
mid-write leaves the previous value intact.
"""

from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path
from typing import Protocol

from timeledger.core.errors import StorageWriteError

logger = logging.getLogger(__name__)

# Default data directory (relative to the config file / cwd)
DEFAULT_DATA_DIR = ".timeledger"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class KeyValueStore(Protocol):
    """Raw byte storage addressed by fixed string keys."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...

    def clear(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store.

    ``writable=False`` simulates a disabled store: every ``set`` raises
    StorageWriteError while reads keep working.
    """

    def __init__(self, initial: dict[str, bytes] | None = None, writable: bool = True):
        self._data: dict[str, bytes] = dict(initial or {})
        self.writable = writable

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not self.writable:
            raise StorageWriteError(key, "store is read-only")
        self._data[key] = bytes(value)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileStore:
    """One JSON file per key under ``root``."""

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._root / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            logger.warning("Cannot read %s: %s — treating as absent", path, e)
            return None

    def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{key}_", suffix=".tmp")
        except OSError as e:
            logger.error("Failed to prepare write for %s: %s", path, e)
            raise StorageWriteError(key, str(e)) from e

        tmp = Path(tmp_path)
        try:
            with open(fd, "wb") as f:
                f.write(value)
            tmp.replace(path)
            logger.debug("Stored %d bytes under '%s'", len(value), key)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            logger.error("Failed to write %s: %s", path, e)
            raise StorageWriteError(key, str(e)) from e

    def clear(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e
