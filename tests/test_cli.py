"""
Tests for CLI commands — customers, entries, reports, status and global options.
"""

import datetime as dt
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from timeledger.core.config.loader import DATA_DIR_ENV
from timeledger.main import cli


@pytest.fixture
def config(tmp_path: Path, monkeypatch) -> Path:
    """A timeledger.yml pointing at a fresh data directory."""
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    path = tmp_path / "timeledger.yml"
    path.write_text("data_dir: data\ncsv_format: v2\n")
    return path


def run(config: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(cli, ["--config", str(config), *args])


def run_json(config: Path, *args: str):
    result = run(config, *args, "--json")
    return result, json.loads(result.output)


def this_month() -> str:
    return dt.date.today().strftime("%Y-%m")


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Timesheet Ledger" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_bad_config(self, tmp_path: Path):
        bad = tmp_path / "timeledger.yml"
        bad.write_text("csv_format: nope\n")
        result = run(bad, "status")
        assert result.exit_code == 1


class TestCustomersCommands:
    def test_add_and_list(self, config: Path):
        result = run(config, "customers", "add", "Acme", "--company", "Acme Corp.", "--email", "a@acme.test")
        assert result.exit_code == 0
        assert "Acme" in result.output

        result, data = run_json(config, "customers", "list")
        assert result.exit_code == 0
        assert data == [
            {"name": "Acme", "email": "a@acme.test", "company_name": "Acme Corp.", "projects": []}
        ]

    def test_duplicate_customer_fails(self, config: Path):
        run(config, "customers", "add", "Acme")
        result = run(config, "customers", "add", "ACME")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_projects(self, config: Path):
        run(config, "customers", "add", "Acme")
        assert run(config, "customers", "add-project", "Acme", "Web").exit_code == 0
        assert run(config, "customers", "add-project", "Acme", "web").exit_code == 1
        assert run(config, "customers", "remove-project", "Acme", "Web").exit_code == 0
        assert run(config, "customers", "remove-project", "Acme", "Web").exit_code == 0

        _, data = run_json(config, "customers", "list")
        assert data[0]["projects"] == []

    def test_set_email(self, config: Path):
        run(config, "customers", "add", "Acme")
        assert run(config, "customers", "set-email", "Acme", "ops@acme.test").exit_code == 0
        _, data = run_json(config, "customers", "list")
        assert data[0]["email"] == "ops@acme.test"

    def test_set_email_unknown(self, config: Path):
        result = run(config, "customers", "set-email", "Ghost", "g@example.test")
        assert result.exit_code == 0
        assert "Unknown customer" in result.output

    def test_list_empty(self, config: Path):
        result = run(config, "customers", "list")
        assert result.exit_code == 0
        assert "No customers" in result.output

    def test_sync_without_endpoint(self, config: Path):
        result = run(config, "customers", "sync")
        assert result.exit_code == 1
        assert "No sync endpoint" in result.output


class TestEntriesCommands:
    def _add(self, config: Path, customer="A", date="2024-05-10", entrance="09:00", exit="17:30"):
        return run_json(
            config, "entries", "add",
            "--customer", customer, "--project", "P1",
            "--date", date, "--in", entrance, "--out", exit,
        )

    def test_add(self, config: Path):
        run(config, "customers", "add", "A", "--company", "A Company")
        result, data = self._add(config)
        assert result.exit_code == 0
        assert data["entry"]["id"] == f"{this_month()}-0001"
        assert data["entry"]["hours"] == "8.50"
        assert data["entry"]["date"] == "2024-05-10"

    def test_add_invalid_range(self, config: Path):
        result, data = self._add(config, entrance="17:30", exit="09:00")
        assert result.exit_code == 1
        assert "after entrance" in data["error"]

    def test_add_human_output(self, config: Path):
        result = run(
            config, "entries", "add", "--customer", "A",
            "--date", "2024-05-10", "--in", "09:00", "--out", "10:30",
        )
        assert result.exit_code == 0
        assert "1.50 h" in result.output
        assert "not in the directory" in result.output

    def test_list_and_filter(self, config: Path):
        self._add(config, customer="A", date="2024-05-10")
        self._add(config, customer="B", date="2024-05-11")
        self._add(config, customer="A", date="2024-04-30")

        _, everything = run_json(config, "entries", "list")
        assert len(everything) == 3

        _, may = run_json(config, "entries", "list", "--customer", "A", "--month", "2024-05")
        assert [e["date"] for e in may] == ["2024-05-10"]

    def test_list_uses_directory_spelling(self, config: Path):
        run(config, "customers", "add", "Acme", "--company", "Acme Corp.")
        self._add(config, customer="Acme", date="2024-05-10")

        _, by_name = run_json(config, "entries", "list", "--customer", "acme")
        assert [e["customer_name"] for e in by_name] == ["Acme"]

        _, by_month = run_json(config, "entries", "list", "--customer", "ACME", "--month", "2024-05")
        assert len(by_month) == 1

    def test_export_unwritable_output(self, config: Path, tmp_path: Path):
        _, data = self._add(config)
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        result = run(config, "entries", "export", data["entry"]["id"], "--output", str(blocker / "out"))
        assert result.exit_code == 1
        assert "Cannot write" in result.output

    def test_delete(self, config: Path):
        _, data = self._add(config)
        entry_id = data["entry"]["id"]
        _, first = run_json(config, "entries", "delete", entry_id)
        _, second = run_json(config, "entries", "delete", entry_id)
        assert first["removed"] is True
        assert second["removed"] is False

    def test_export_to_directory(self, config: Path, tmp_path: Path):
        run(config, "customers", "add", "A", "--company", "A Company")
        _, data = self._add(config)
        entry_id = data["entry"]["id"]

        out = tmp_path / "exports"
        result = run(config, "entries", "export", entry_id, "--output", str(out))
        assert result.exit_code == 0

        written = out / f"timesheet-{entry_id}.csv"
        assert written.read_text(encoding="utf-8") == (
            "ID,Customer,Company,Project,Date,Hours\n"
            f'"{entry_id}","A","A Company","P1","2024-05-10","8.50"'
        )

    def test_export_v1_to_stdout(self, config: Path):
        _, data = self._add(config)
        result = run(config, "entries", "export", data["entry"]["id"], "--format", "v1")
        assert result.exit_code == 0
        assert result.output.startswith("ID,Customer,Date,Hours\n")

    def test_export_unknown(self, config: Path):
        result = run(config, "entries", "export", "2024-05-0099")
        assert result.exit_code == 1


class TestReportCommands:
    def test_monthly(self, config: Path, tmp_path: Path):
        run(config, "customers", "add", "A", "--company", "A Company", "--email", "a@example.test")
        for customer in ("A", "B"):
            run(
                config, "entries", "add", "--customer", customer, "--project", "P1",
                "--date", "2024-05-10", "--in", "09:00", "--out", "17:30",
            )

        result, data = run_json(config, "report", "monthly", "A", "2024", "5")
        assert result.exit_code == 0
        assert data["entry_count"] == 1
        assert data["total_hours"] == "8.50"
        assert data["filename"] == "timesheet-A-2024-05.csv"
        assert data["recipient"] == "a@example.test"

        out = tmp_path / "reports"
        result = run(config, "report", "monthly", "A", "2024", "5", "--output", str(out))
        assert result.exit_code == 0
        assert (out / "timesheet-A-2024-05.csv").is_file()
        assert "8.50 h" in result.output

    def test_monthly_empty(self, config: Path):
        result = run(config, "report", "monthly", "A", "2024", "5")
        assert result.exit_code == 0
        assert "No entries for A in 2024-05" in result.output

    def test_monthly_bad_month(self, config: Path):
        result = run(config, "report", "monthly", "A", "2024", "13")
        assert result.exit_code != 0


class TestStatusCommand:
    def test_status_json(self, config: Path):
        run(config, "customers", "add", "A")
        run(
            config, "entries", "add", "--customer", "A",
            "--date", "2024-05-10", "--in", "09:00", "--out", "10:00",
        )
        result, data = run_json(config, "status")
        assert result.exit_code == 0
        assert data["customers"] == 1
        assert data["entries"] == 1
        assert data["report_id_counters"] == {this_month(): 1}
        assert data["data_dir"] == str((config.parent / "data").resolve())

    def test_status_human(self, config: Path):
        result = run(config, "status")
        assert result.exit_code == 0
        assert "Customers: 0" in result.output

    def test_status_shows_sync_queue(self, config: Path):
        from timeledger.core.persistence.store import FileStore
        from timeledger.core.reliability.retry_queue import RetryQueue

        RetryQueue(FileStore(config.parent / "data"), base_delay=0).enqueue("A", error="HTTP 503")

        result = run(config, "status")
        assert result.exit_code == 0
        assert "1 customer(s) waiting for sync retry" in result.output
        assert "A: attempt 1/3 — HTTP 503" in result.output

        _, data = run_json(config, "status")
        assert data["pending_sync"] == 1
        assert data["sync_queue"]["items"][0]["id"] == "A"
