"""
Tests for the session — wiring, notices and the mutation lock.
"""

import datetime as dt
import threading
from pathlib import Path

from timeledger.core.models.entry import EntryCandidate
from timeledger.core.persistence.snapshot import REPORT_ID_COUNTERS_KEY
from timeledger.core.persistence.store import MemoryStore
from timeledger.core.session import TimesheetSession


def _candidate() -> EntryCandidate:
    return EntryCandidate(
        customer_name="A",
        project_name="P1",
        date=dt.date(2024, 5, 10),
        entrance_time="09:00",
        exit_time="17:30",
    )


class TestSession:
    def test_scenario_first_entry(self, session):
        entry = session.ledger.append(_candidate())
        assert entry.id == "2024-05-0001"

    def test_open_file_backed(self, data_dir: Path, clock):
        first = TimesheetSession.open(data_dir, clock=clock)
        first.directory.add_customer("Acme", "Acme Corp.")
        first.ledger.append(_candidate())

        second = TimesheetSession.open(data_dir, clock=clock)
        assert second.directory.find_customer("acme") is not None
        assert len(second.ledger) == 1
        assert second.report_ids.last_issued("2024-05") == 1

    def test_corrupt_counters_do_not_reissue_ids(self, clock):
        store = MemoryStore()
        first = TimesheetSession(store, clock=clock)
        issued = first.ledger.append(_candidate()).id
        store.set(REPORT_ID_COUNTERS_KEY, b"{not json")

        second = TimesheetSession(store, clock=clock)
        again = second.ledger.append(_candidate()).id
        assert again != issued
        assert again == "2024-05-0002"

        assert second.ledger.remove(issued)
        assert [e.id for e in second.ledger.all()] == [again]

    def test_cleared_counters_do_not_reissue_ids(self, data_dir: Path, clock):
        first = TimesheetSession.open(data_dir, clock=clock)
        first.ledger.append(_candidate())
        first.ledger.append(_candidate())
        first.store.clear(REPORT_ID_COUNTERS_KEY)

        second = TimesheetSession.open(data_dir, clock=clock)
        assert second.report_ids.last_issued("2024-05") == 2
        assert second.ledger.append(_candidate()).id == "2024-05-0003"

    def test_notices_collected_and_drained(self, clock):
        session = TimesheetSession(MemoryStore(writable=False), clock=clock)
        session.directory.add_customer("Acme", "")
        session.ledger.append(_candidate())
        notices = session.drain_notices()
        assert len(notices) == 3
        assert session.drain_notices() == []

    def test_concurrent_appends_get_unique_ids(self, session):
        ids: list[str] = []

        def worker():
            for _ in range(25):
                with session.mutation():
                    ids.append(session.ledger.append(_candidate()).id)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 100
        assert len(set(ids)) == 100
        assert session.report_ids.last_issued("2024-05") == 100
