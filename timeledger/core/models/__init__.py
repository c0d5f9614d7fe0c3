"""
Domain models — Pydantic types for the timesheet ledger.

All models are re-exported here for convenient access:

    from timeledger.core.models import Customer, EntryCandidate, TimesheetEntry
"""

from timeledger.core.models.customer import Customer, name_key
from timeledger.core.models.entry import (
    REPORT_ID_PATTERN,
    EntryCandidate,
    TimesheetEntry,
)

__all__ = [
    "REPORT_ID_PATTERN",
    # customer.py
    "Customer",
    # entry.py
    "EntryCandidate",
    "TimesheetEntry",
    "name_key",
]
