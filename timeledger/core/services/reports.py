"""
Report builder — CSV rendering, monthly summaries, export artifacts.

Two CSV layouts exist and are selected explicitly:

    V1  ID,Customer,Date,Hours                       (earlier single-entry export)
    V2  ID,Customer,Company,Project,Date,Hours       (current)

Every field is wrapped in double quotes and nothing else: quotes or
newlines inside customer/project names are written as-is.  This is
the established wire format and is kept unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Iterable

from timeledger.core.models.entry import TimesheetEntry
from timeledger.core.services.duration import format_hours, hours_between

if TYPE_CHECKING:
    from timeledger.core.services.directory import Directory
    from timeledger.core.services.ledger import Ledger

logger = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_SLUG_SEPARATORS = re.compile(r"[\s.]+")


class CsvFormat(StrEnum):
    """Versioned CSV export layouts."""

    V1 = "v1"
    V2 = "v2"

    @property
    def columns(self) -> tuple[str, ...]:
        if self is CsvFormat.V1:
            return ("ID", "Customer", "Date", "Hours")
        return ("ID", "Customer", "Company", "Project", "Date", "Hours")


DEFAULT_CSV_FORMAT = CsvFormat.V2


def _quote(value: str) -> str:
    return f'"{value}"'


def _row(entry: TimesheetEntry, directory: Directory, fmt: CsvFormat) -> list[str]:
    hours = format_hours(hours_between(entry.entrance_time, entry.exit_time))
    day = entry.date.strftime(_DATE_FORMAT)
    if fmt is CsvFormat.V1:
        return [entry.id, entry.customer_name, day, hours]

    customer = directory.find_customer(entry.customer_name)
    company = customer.company_name if customer else ""
    return [entry.id, entry.customer_name, company, entry.project_name, day, hours]


def to_csv(
    entries: Iterable[TimesheetEntry],
    directory: Directory,
    fmt: CsvFormat = DEFAULT_CSV_FORMAT,
) -> str:
    """Render entries as CSV text in the given order.

    Args:
        entries: Entries to render.
        directory: Used to look up each customer's company (V2 only).
        fmt: Output layout.

    Returns:
        Header line plus one line per entry, joined by ``\\n``, with no
        trailing newline.  No entries gives just the header.
    """
    lines = [",".join(fmt.columns)]
    for entry in entries:
        lines.append(",".join(_quote(v) for v in _row(entry, directory, fmt)))
    return "\n".join(lines)


# ── Monthly report ──────────────────────────────────────────────


@dataclass
class MonthlyReport:
    """Aggregate of one customer's entries for one calendar month."""

    customer_name: str
    year: int
    month: int
    total_hours: float = 0.0
    entry_count: int = 0
    csv: str = ""

    @property
    def empty(self) -> bool:
        return self.entry_count == 0

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict:
        return {
            "customer": self.customer_name,
            "period": self.period,
            "total_hours": self.total_hours,
            "entry_count": self.entry_count,
            "csv": self.csv,
        }


def build_monthly_report(
    customer_name: str,
    year: int,
    month: int,
    directory: Directory,
    ledger: Ledger,
    fmt: CsvFormat = DEFAULT_CSV_FORMAT,
) -> MonthlyReport:
    """Filter the ledger to one customer/month, total the hours, render CSV.

    A month without entries is a normal result with ``entry_count == 0``.
    """
    entries = ledger.filter(customer_name, year, month)
    total = sum(
        (Decimal(str(hours_between(e.entrance_time, e.exit_time))) for e in entries),
        Decimal(0),
    )
    report = MonthlyReport(
        customer_name=customer_name,
        year=year,
        month=month,
        total_hours=float(total),
        entry_count=len(entries),
        csv=to_csv(entries, directory, fmt),
    )
    logger.debug(
        "Monthly report %s %s: %d entries, %s h",
        customer_name, report.period, report.entry_count, format_hours(report.total_hours),
    )
    return report


# ── Export artifacts ────────────────────────────────────────────


@dataclass
class ExportArtifact:
    """Finished export, ready for a transport sink (file, mail, stdout)."""

    filename: str
    subject: str
    content: bytes
    recipient: str | None = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


def slugify(name: str) -> str:
    """File-name safe form of a customer name (whitespace/dot runs → ``-``)."""
    return _SLUG_SEPARATORS.sub("-", name.strip()).strip("-")


def entry_filename(entry: TimesheetEntry) -> str:
    return f"timesheet-{entry.id}.csv"


def entry_export(
    entry: TimesheetEntry,
    directory: Directory,
    fmt: CsvFormat = DEFAULT_CSV_FORMAT,
) -> ExportArtifact:
    """Single-entry export named ``timesheet-<ReportId>.csv``."""
    customer = directory.find_customer(entry.customer_name)
    return ExportArtifact(
        filename=entry_filename(entry),
        subject=f"Timesheet {entry.id}",
        content=to_csv([entry], directory, fmt).encode("utf-8"),
        recipient=customer.email if customer else None,
    )


def monthly_export(report: MonthlyReport, directory: Directory) -> ExportArtifact:
    """Monthly export named ``timesheet-<customer-slug>-<YYYY-MM>.csv``."""
    customer = directory.find_customer(report.customer_name)
    return ExportArtifact(
        filename=f"timesheet-{slugify(report.customer_name)}-{report.period}.csv",
        subject=f"Timesheet {report.customer_name} {report.period}",
        content=report.csv.encode("utf-8"),
        recipient=customer.email if customer else None,
    )
