"""
Customer use cases — directory edits and remote sync.

Directory edits go through the session lock and report validation
failures as ``error``.  Sync submits every customer (or only the ones
waiting in the retry queue) and never touches the directory itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from timeledger.core.errors import ValidationError
from timeledger.core.models.customer import Customer
from timeledger.core.reliability.retry_queue import RetryQueue
from timeledger.core.services.customer_sync import (
    CustomerService,
    SyncSummary,
    submit_one,
    sync_customers,
)
from timeledger.core.session import TimesheetSession


@dataclass
class DirectoryEditResult:
    """Result of one directory mutation."""

    customer: Customer | None = None
    error: str | None = None
    notices: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "customer": self.customer.model_dump(mode="json") if self.customer else None,
            "notices": self.notices,
        }


def _edit(session: TimesheetSession, customer_name: str, action) -> DirectoryEditResult:
    result = DirectoryEditResult()
    try:
        with session.mutation():
            action(session.directory)
    except ValidationError as e:
        result.error = str(e)
        return result
    result.customer = session.directory.find_customer(customer_name)
    result.notices = [str(n) for n in session.drain_notices()]
    return result


def add_customer(
    session: TimesheetSession,
    name: str,
    company_name: str,
    email: str | None = None,
) -> DirectoryEditResult:
    return _edit(session, name, lambda d: d.add_customer(name, company_name, email))


def add_project(session: TimesheetSession, customer_name: str, project_name: str) -> DirectoryEditResult:
    return _edit(session, customer_name, lambda d: d.add_project(customer_name, project_name))


def remove_project(session: TimesheetSession, customer_name: str, project_name: str) -> DirectoryEditResult:
    return _edit(session, customer_name, lambda d: d.remove_project(customer_name, project_name))


def set_customer_email(session: TimesheetSession, customer_name: str, email: str | None) -> DirectoryEditResult:
    return _edit(session, customer_name, lambda d: d.set_customer_email(customer_name, email))


# ── Sync ────────────────────────────────────────────────────────


@dataclass
class SyncResult:
    """Outcome of a sync run, including what was left for retry."""

    summary: SyncSummary = field(default_factory=SyncSummary)
    queued: int = 0
    exhausted: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.summary.to_dict()
        data["queued_for_retry"] = self.queued
        data["gave_up"] = self.exhausted
        return data


def sync_directory(
    session: TimesheetSession,
    service: CustomerService,
    queue: RetryQueue,
) -> SyncResult:
    """Submit every customer once; failures go to the retry queue."""
    summary = sync_customers(session.directory.list_customers(), service)

    for name in summary.succeeded:
        queue.complete(name)
    for failure in summary.failures:
        queue.enqueue(failure.customer_name, error=failure.reason)

    return SyncResult(summary=summary, queued=queue.size)


def retry_failed(
    session: TimesheetSession,
    service: CustomerService,
    queue: RetryQueue,
) -> SyncResult:
    """Re-submit customers whose retry is due.

    Items for customers that have since left the directory are
    dropped.  Items that run out of attempts are removed and listed
    in ``exhausted``.
    """
    summary = SyncSummary()
    for item in queue.dequeue_ready():
        customer = session.directory.find_customer(item.id)
        if customer is None:
            queue.complete(item.id)
            continue

        failure = submit_one(customer, service)
        if failure is None:
            summary.succeeded.append(customer.name)
            queue.complete(item.id)
        else:
            summary.failures.append(failure)
            queue.fail(item.id, failure.reason)

    exhausted = [item.id for item in queue.remove_exhausted()]
    return SyncResult(summary=summary, queued=queue.size, exhausted=exhausted)
