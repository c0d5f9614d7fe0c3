"""
Timesheet entry models.

An ``EntryCandidate`` is what the user filled in; a ``TimesheetEntry``
is what the ledger stored after assigning a report id.  Customer and
project are plain names, not references: an entry outlives the
directory records it was booked against.
"""

from __future__ import annotations

import datetime as dt
import re

from pydantic import BaseModel, Field

# Report id: YYYY-MM-NNNN
REPORT_ID_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{4,})$")

# Time of day: HH:MM
TIME_OF_DAY_PATTERN = r"^\d{1,2}:\d{2}$"


class EntryCandidate(BaseModel):
    """Unsaved timesheet values, as entered on the form."""

    customer_name: str
    project_name: str = ""
    date: dt.date
    entrance_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    exit_time: str = Field(pattern=TIME_OF_DAY_PATTERN)


class TimesheetEntry(BaseModel):
    """A saved work session.

    Never edited after creation; the ledger only appends and deletes.
    """

    id: str = Field(pattern=REPORT_ID_PATTERN.pattern)
    customer_name: str
    project_name: str = ""
    date: dt.date
    entrance_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    exit_time: str = Field(pattern=TIME_OF_DAY_PATTERN)

    @classmethod
    def from_candidate(cls, report_id: str, candidate: EntryCandidate) -> TimesheetEntry:
        return cls(id=report_id, **candidate.model_dump())

    def in_month(self, year: int, month: int) -> bool:
        """Whether the work date falls in the given calendar month."""
        return self.date.year == year and self.date.month == month
