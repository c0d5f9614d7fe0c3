"""Timesheet Ledger — local-first timesheets, report ids and CSV exports."""

__version__ = "0.1.0"
