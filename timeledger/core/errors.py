"""
Error taxonomy for the timesheet core.

ValidationError and its subclasses are raised synchronously before any
state is touched.  StorageDecodeError never leaves the persistence
layer.  StorageWriteError is caught where a mutation persists and is
surfaced as a non-fatal notice.  RemoteSyncError is recorded per
customer and aggregated, never raised out of a sync batch.
"""

from __future__ import annotations


class TimesheetError(Exception):
    """Base class for every error raised by the timesheet core."""


# ── Validation ──────────────────────────────────────────────────


class ValidationError(TimesheetError):
    """Input rejected before any state was mutated."""


class InvalidRangeError(ValidationError):
    """Exit time is not strictly after entrance time."""

    def __init__(self, entrance_time: str, exit_time: str):
        super().__init__(
            f"Exit time {exit_time!r} must be after entrance time {entrance_time!r}"
        )
        self.entrance_time = entrance_time
        self.exit_time = exit_time


class InvalidDateError(ValidationError):
    """Entry date outside the accepted calendar range."""


class DuplicateNameError(ValidationError):
    """A customer with the same name (case-insensitive) already exists."""

    def __init__(self, name: str):
        super().__init__(f"Customer '{name}' already exists")
        self.name = name


class DuplicateProjectError(ValidationError):
    """The customer already has a project with this name (case-insensitive)."""

    def __init__(self, customer_name: str, project_name: str):
        super().__init__(
            f"Project '{project_name}' already exists for customer '{customer_name}'"
        )
        self.customer_name = customer_name
        self.project_name = project_name


class UnknownCustomerError(ValidationError):
    """No customer with that name exists in the directory."""

    def __init__(self, name: str):
        super().__init__(f"Unknown customer '{name}'")
        self.name = name


# ── Storage ─────────────────────────────────────────────────────


class StorageDecodeError(TimesheetError):
    """A stored value could not be decoded into the expected shape."""


class StorageWriteError(TimesheetError):
    """The store refused a write (quota exceeded, disabled, I/O failure)."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Cannot persist '{key}': {reason}")
        self.key = key
        self.reason = reason


# ── Remote sync ─────────────────────────────────────────────────


class RemoteSyncError(TimesheetError):
    """A single customer could not be submitted to the remote service."""

    def __init__(self, customer_name: str, reason: str):
        super().__init__(f"Sync failed for '{customer_name}': {reason}")
        self.customer_name = customer_name
        self.reason = reason
