"""
Timesheet session — the one object that owns all ledger state.

Every entry point (CLI, tests) opens a session for a data directory
and passes it to the use cases.  There is no module-level state:

    - CLI:    main.py → TimesheetSession.open(settings.data_dir)
    - Tests:  TimesheetSession(MemoryStore(), clock=fixed_clock)

Design notes:
    - ``mutation()`` is the single lock around every
      mutate-then-persist sequence (directory edits, id issue + ledger
      append, deletes).  With one writer it costs nothing; with a
      background writer it keeps report ids unique and snapshots
      consistent.
    - Snapshots are separate keys with no shared transaction.  The
      id counter is written before the ledger, so a crash in between
      burns an id but never reissues one.  On open, counters are
      raised to the highest id already in the ledger, so a lost
      counter snapshot cannot reissue one either.
    - Storage write failures land in ``notices``; the in-memory state
      is kept as is.
"""

from __future__ import annotations

import datetime as dt
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from timeledger.core.errors import StorageWriteError
from timeledger.core.persistence.store import FileStore, KeyValueStore
from timeledger.core.services.directory import Directory
from timeledger.core.services.ledger import Ledger
from timeledger.core.services.report_ids import ReportIdGenerator

logger = logging.getLogger(__name__)


class TimesheetSession:
    """Directory, ledger and report id counters over one store."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ):
        self.store = store
        self.clock = clock
        self.notices: list[StorageWriteError] = []
        self._lock = threading.Lock()

        self.report_ids = ReportIdGenerator(store, notices=self.notices)
        self.directory = Directory(store, notices=self.notices)
        self.ledger = Ledger(store, self.report_ids, clock=clock, notices=self.notices)
        self.report_ids.reconcile(entry.id for entry in self.ledger.all())
        logger.debug(
            "Session opened: %d customers, %d entries",
            len(self.directory), len(self.ledger),
        )

    @classmethod
    def open(cls, data_dir: Path, clock: Callable[[], dt.datetime] = dt.datetime.now) -> TimesheetSession:
        """Open a session backed by JSON files in ``data_dir``."""
        return cls(FileStore(data_dir), clock=clock)

    @contextmanager
    def mutation(self) -> Iterator[TimesheetSession]:
        """Hold the session lock for one mutate-then-persist sequence."""
        with self._lock:
            yield self

    def drain_notices(self) -> list[StorageWriteError]:
        """Return and forget the storage write failures seen so far."""
        with self._lock:
            notices = list(self.notices)
            self.notices.clear()
        return notices
