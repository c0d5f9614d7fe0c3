"""
Ledger — the ordered store of saved timesheet entries.

Entries are kept in save order, which is not necessarily work-date
order.  ``append`` validates the time range before anything else, so
a rejected candidate consumes no report id and leaves the ledger and
the store untouched.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable

from timeledger.core.errors import InvalidRangeError, StorageWriteError
from timeledger.core.models.entry import EntryCandidate, TimesheetEntry
from timeledger.core.persistence.snapshot import LEDGER_KEY, SnapshotSlot
from timeledger.core.persistence.store import KeyValueStore
from timeledger.core.services.duration import is_valid_range
from timeledger.core.services.report_ids import ReportIdGenerator, month_bucket

logger = logging.getLogger(__name__)


class Ledger:
    """Append/delete store of timesheet entries."""

    def __init__(
        self,
        store: KeyValueStore,
        report_ids: ReportIdGenerator,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        notices: list[StorageWriteError] | None = None,
    ):
        self._slot: SnapshotSlot[list[TimesheetEntry]] = SnapshotSlot(
            store, LEDGER_KEY, list[TimesheetEntry]
        )
        self._entries: list[TimesheetEntry] = self._slot.load(list)
        self._report_ids = report_ids
        self._clock = clock
        self._notices = notices if notices is not None else []

    # ── Queries ─────────────────────────────────────────────────

    def all(self) -> list[TimesheetEntry]:
        """Every entry, in save order."""
        return list(self._entries)

    def get(self, entry_id: str) -> TimesheetEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def filter(self, customer_name: str, year: int, month: int) -> list[TimesheetEntry]:
        """Entries for exactly this customer whose work date is in year/month."""
        return [
            e
            for e in self._entries
            if e.customer_name == customer_name and e.in_month(year, month)
        ]

    def __len__(self) -> int:
        return len(self._entries)

    # ── Mutations ───────────────────────────────────────────────

    def append(self, candidate: EntryCandidate) -> TimesheetEntry:
        """Assign a report id to the candidate and store it.

        The id's month is taken from the clock at save time, not from
        the candidate's work date.

        Raises:
            InvalidRangeError: If exit time is not after entrance time.
        """
        if not is_valid_range(candidate.entrance_time, candidate.exit_time):
            raise InvalidRangeError(candidate.entrance_time, candidate.exit_time)

        report_id = self._report_ids.next_id(month_bucket(self._clock()))
        entry = TimesheetEntry.from_candidate(report_id, candidate)
        self._entries.append(entry)
        logger.info(
            "Saved entry %s (%s / %s, %s)",
            entry.id, entry.customer_name, entry.project_name or "-", entry.date.isoformat(),
        )
        self._persist()
        return entry

    def remove(self, entry_id: str) -> bool:
        """Delete the entry with this id. Returns whether anything was removed."""
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        removed = len(self._entries) != before
        if removed:
            logger.info("Deleted entry %s", entry_id)
        else:
            logger.debug("Delete: no entry with id %s", entry_id)
        self._persist()
        return removed

    # ── Internal ────────────────────────────────────────────────

    def _persist(self) -> None:
        try:
            self._slot.save(self._entries)
        except StorageWriteError as e:
            logger.warning("Ledger not persisted: %s", e)
            self._notices.append(e)
