"""
Report use case — monthly customer report and its export artifact.
"""

from __future__ import annotations

from dataclasses import dataclass

from timeledger.core.services.duration import format_hours
from timeledger.core.services.reports import (
    DEFAULT_CSV_FORMAT,
    CsvFormat,
    ExportArtifact,
    MonthlyReport,
    build_monthly_report,
    monthly_export,
)
from timeledger.core.session import TimesheetSession


@dataclass
class MonthlyReportResult:
    """Monthly report plus its ready-to-send export."""

    report: MonthlyReport | None = None
    artifact: ExportArtifact | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error or self.report is None:
            return {"error": self.error}
        data = self.report.to_dict()
        data["total_hours"] = format_hours(self.report.total_hours)
        if self.artifact is not None:
            data["filename"] = self.artifact.filename
            data["subject"] = self.artifact.subject
            data["recipient"] = self.artifact.recipient
        return data


def monthly_report(
    session: TimesheetSession,
    customer_name: str,
    year: int,
    month: int,
    fmt: CsvFormat = DEFAULT_CSV_FORMAT,
) -> MonthlyReportResult:
    """Build the monthly report for one customer.

    An empty month is returned as a report with ``entry_count == 0``
    and no artifact, so callers can show a neutral message.
    """
    if not 1 <= month <= 12:
        return MonthlyReportResult(error=f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        return MonthlyReportResult(error=f"Invalid year: {year}")

    customer = session.directory.find_customer(customer_name)
    # Entries keep the exact name they were saved with
    name = customer.name if customer else customer_name

    report = build_monthly_report(name, year, month, session.directory, session.ledger, fmt)
    result = MonthlyReportResult(report=report)
    if not report.empty:
        result.artifact = monthly_export(report, session.directory)
    return result
