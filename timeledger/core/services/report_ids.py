"""
Report id generator — month-scoped sequential identifiers.

Ids look like ``2024-05-0001``.  The month part is the month the id was
*generated* in, not the work date of the entry it is attached to.  Each
month bucket has its own counter; counters only ever go up.

The read-increment-write sequence is not atomic on its own.  Callers
with more than one writer must hold the session lock around
``next_id`` (see ``TimesheetSession``).
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Iterable

from timeledger.core.errors import StorageWriteError, ValidationError
from timeledger.core.models.entry import REPORT_ID_PATTERN
from timeledger.core.persistence.snapshot import REPORT_ID_COUNTERS_KEY, SnapshotSlot
from timeledger.core.persistence.store import KeyValueStore

logger = logging.getLogger(__name__)

_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

COUNTER_WIDTH = 4


def month_bucket(moment: dt.date | dt.datetime) -> str:
    """The ``YYYY-MM`` bucket a moment falls in."""
    return f"{moment.year:04d}-{moment.month:02d}"


def format_report_id(month: str, counter: int) -> str:
    return f"{month}-{counter:0{COUNTER_WIDTH}d}"


class ReportIdGenerator:
    """Issues report ids from counters persisted under one key.

    Counters are loaded once; every ``next_id`` writes the whole map
    back.  A failed write is recorded in ``notices`` and the in-memory
    counter still advances, so ids stay unique for the session.
    """

    def __init__(self, store: KeyValueStore, notices: list[StorageWriteError] | None = None):
        self._slot: SnapshotSlot[dict[str, int]] = SnapshotSlot(
            store, REPORT_ID_COUNTERS_KEY, dict[str, int]
        )
        self._counters: dict[str, int] = self._slot.load(dict)
        self._notices = notices if notices is not None else []

    def last_issued(self, month: str) -> int:
        """Last counter issued for ``month`` (0 if none)."""
        return self._counters.get(month, 0)

    def counters(self) -> dict[str, int]:
        return dict(self._counters)

    def reconcile(self, issued: Iterable[str]) -> dict[str, int]:
        """Raise counters to at least the highest id already issued.

        The counter snapshot can be lost or corrupted while the ledger
        survives; counters restarting at 0 would reissue ids that are
        still in use.  Malformed ids are skipped.

        Returns:
            The months whose counter was raised, with the new value.
        """
        raised: dict[str, int] = {}
        for report_id in issued:
            m = REPORT_ID_PATTERN.match(report_id or "")
            if not m:
                continue
            month = f"{m.group(1)}-{m.group(2)}"
            seen = int(m.group(3))
            if seen > self._counters.get(month, 0):
                self._counters[month] = seen
                raised[month] = seen

        if raised:
            logger.warning("Report id counters behind the ledger, raised: %s", raised)
        return raised

    def next_id(self, now_month: str) -> str:
        """Issue the next report id for ``now_month`` (``YYYY-MM``).

        Raises:
            ValidationError: If ``now_month`` is not a ``YYYY-MM`` string.
        """
        if not _MONTH_PATTERN.match(now_month or ""):
            raise ValidationError(f"Invalid month bucket: {now_month!r}")

        counter = self._counters.get(now_month, 0) + 1
        self._counters[now_month] = counter
        try:
            self._slot.save(self._counters)
        except StorageWriteError as e:
            logger.warning("Report id counter not persisted: %s", e)
            self._notices.append(e)

        report_id = format_report_id(now_month, counter)
        logger.debug("Issued report id %s", report_id)
        return report_id
