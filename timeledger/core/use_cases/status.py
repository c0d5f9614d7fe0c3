"""
Status use case — summary of what the data directory holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from timeledger.core.reliability.retry_queue import RetryQueue
from timeledger.core.session import TimesheetSession


@dataclass
class StatusResult:
    """Aggregated ledger status."""

    data_dir: Path | None = None
    customer_count: int = 0
    project_count: int = 0
    entry_count: int = 0
    counters: dict[str, int] = field(default_factory=dict)
    sync_queue: dict[str, Any] = field(default_factory=dict)
    last_entry_id: str | None = None

    @property
    def pending_sync(self) -> int:
        return self.sync_queue.get("total", 0)

    def to_dict(self) -> dict:
        return {
            "data_dir": str(self.data_dir) if self.data_dir else None,
            "customers": self.customer_count,
            "projects": self.project_count,
            "entries": self.entry_count,
            "last_entry_id": self.last_entry_id,
            "report_id_counters": self.counters,
            "pending_sync": self.pending_sync,
            "sync_queue": self.sync_queue,
        }


def get_status(
    session: TimesheetSession,
    data_dir: Path | None = None,
    queue: RetryQueue | None = None,
) -> StatusResult:
    """Summarize directory, ledger, counters and the sync retry queue."""
    customers = session.directory.list_customers()
    entries = session.ledger.all()
    return StatusResult(
        data_dir=data_dir,
        customer_count=len(customers),
        project_count=sum(len(c.projects) for c in customers),
        entry_count=len(entries),
        counters=session.report_ids.counters(),
        sync_queue=queue.get_status() if queue is not None else {},
        last_entry_id=entries[-1].id if entries else None,
    )
