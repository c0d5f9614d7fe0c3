"""
Entry use cases — save, delete and export timesheet entries.

Each function takes an open session and returns a result object.
Validation problems come back as ``error``; storage write failures
come back as ``notices`` next to a successful result, because the
in-memory change has been applied either way.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from pydantic import ValidationError as ShapeError

from timeledger.core.errors import InvalidDateError, ValidationError
from timeledger.core.models.entry import EntryCandidate, TimesheetEntry
from timeledger.core.services.duration import format_hours, hours_between
from timeledger.core.services.reports import (
    DEFAULT_CSV_FORMAT,
    CsvFormat,
    ExportArtifact,
    entry_export,
)
from timeledger.core.session import TimesheetSession

# Earliest work date accepted on save
MIN_ENTRY_DATE = dt.date(1900, 1, 1)


def entry_to_dict(entry: TimesheetEntry) -> dict:
    data = entry.model_dump(mode="json")
    data["hours"] = format_hours(hours_between(entry.entrance_time, entry.exit_time))
    return data


@dataclass
class SaveEntryResult:
    """Result of saving one entry."""

    entry: TimesheetEntry | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)

    @property
    def hours(self) -> float:
        if self.entry is None:
            return 0.0
        return hours_between(self.entry.entrance_time, self.entry.exit_time)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "entry": entry_to_dict(self.entry) if self.entry else None,
            "warnings": self.warnings,
            "notices": self.notices,
        }


def validate_entry_date(day: dt.date, today: dt.date) -> None:
    """Reject work dates in the future or before 1900-01-01.

    Raises:
        InvalidDateError: If ``day`` is out of range.
    """
    if day > today:
        raise InvalidDateError(f"Date {day.isoformat()} is in the future")
    if day < MIN_ENTRY_DATE:
        raise InvalidDateError(f"Date {day.isoformat()} is before {MIN_ENTRY_DATE.isoformat()}")


def save_entry(
    session: TimesheetSession,
    customer_name: str,
    project_name: str,
    date: dt.date,
    entrance_time: str,
    exit_time: str,
) -> SaveEntryResult:
    """Validate the form values and append an entry to the ledger."""
    result = SaveEntryResult()

    # Store the directory's spelling so monthly filters match exactly
    customer = session.directory.find_customer(customer_name)
    if customer is not None:
        customer_name = customer.name

    try:
        candidate = EntryCandidate(
            customer_name=customer_name,
            project_name=project_name,
            date=date,
            entrance_time=entrance_time,
            exit_time=exit_time,
        )
    except ShapeError as e:
        result.error = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        return result

    try:
        validate_entry_date(candidate.date, session.clock().date())
        with session.mutation():
            result.entry = session.ledger.append(candidate)
    except ValidationError as e:
        result.error = str(e)
        return result

    if customer is None:
        result.warnings.append(f"Customer '{customer_name}' is not in the directory")
    elif project_name and not customer.has_project(project_name):
        result.warnings.append(f"Project '{project_name}' is not listed for '{customer.name}'")

    result.notices = [str(n) for n in session.drain_notices()]
    return result


@dataclass
class DeleteEntryResult:
    """Result of deleting one entry."""

    entry_id: str = ""
    removed: bool = False
    notices: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"id": self.entry_id, "removed": self.removed, "notices": self.notices}


def delete_entry(session: TimesheetSession, entry_id: str) -> DeleteEntryResult:
    """Remove an entry by id. A missing id is reported, not raised."""
    with session.mutation():
        removed = session.ledger.remove(entry_id)
    return DeleteEntryResult(
        entry_id=entry_id,
        removed=removed,
        notices=[str(n) for n in session.drain_notices()],
    )


@dataclass
class ExportEntryResult:
    """Result of exporting one entry."""

    artifact: ExportArtifact | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error or self.artifact is None:
            return {"error": self.error}
        return {
            "filename": self.artifact.filename,
            "subject": self.artifact.subject,
            "recipient": self.artifact.recipient,
            "csv": self.artifact.text,
        }


def export_entry(
    session: TimesheetSession,
    entry_id: str,
    fmt: CsvFormat = DEFAULT_CSV_FORMAT,
) -> ExportEntryResult:
    """Build the single-entry CSV export for ``entry_id``."""
    entry = session.ledger.get(entry_id)
    if entry is None:
        return ExportEntryResult(error=f"No entry with id {entry_id}")
    return ExportEntryResult(artifact=entry_export(entry, session.directory, fmt))
