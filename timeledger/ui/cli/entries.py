"""
CLI commands for timesheet entries.

Usage::

    timeledger entries add --customer Acme --project Website --date 2024-05-10 --in 09:00 --out 17:30
    timeledger entries list --customer Acme --month 2024-05
    timeledger entries delete 2024-05-0001
    timeledger entries export 2024-05-0001 --output exports/
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path

import click

from timeledger.ui.cli.helpers import (
    FORMAT_CHOICE,
    deliver,
    echo_notices,
    fail,
    get_session,
    is_quiet,
    resolve_format,
)

_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")


@click.group()
def entries() -> None:
    """Entries — record, list, delete and export work sessions."""


@entries.command("add")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--project", default="", help="Project name.")
@click.option(
    "--date", "day", required=True,
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Work date (YYYY-MM-DD).",
)
@click.option("--in", "entrance_time", required=True, help="Entrance time (HH:MM).")
@click.option("--out", "exit_time", required=True, help="Exit time (HH:MM).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def add(
    ctx: click.Context,
    customer: str,
    project: str,
    day,
    entrance_time: str,
    exit_time: str,
    as_json: bool,
) -> None:
    """Save a work session and assign it a report id."""
    from timeledger.core.services.duration import format_hours
    from timeledger.core.use_cases.entries import save_entry

    result = save_entry(get_session(ctx), customer, project, day.date(), entrance_time, exit_time)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    entry = result.entry
    if result.error or entry is None:
        fail(result.error or "Entry was not saved")
        return
    click.secho(f"✅ Saved {entry.id}", fg="green", bold=True, nl=False)
    click.echo(f"  {entry.customer_name} · {entry.date.isoformat()} · {format_hours(result.hours)} h")
    for warning in result.warnings:
        click.secho(f"⚠️  {warning}", fg="yellow")
    echo_notices(result.notices)


@entries.command("list")
@click.option("--customer", default=None, help="Only this customer.")
@click.option("--month", default=None, help="Only this work month (YYYY-MM). Requires --customer.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_entries(ctx: click.Context, customer: str | None, month: str | None, as_json: bool) -> None:
    """List saved entries in save order."""
    from timeledger.core.services.duration import format_hours, hours_between
    from timeledger.core.use_cases.entries import entry_to_dict

    session = get_session(ctx)
    ledger = session.ledger
    if customer:
        # Match the directory spelling, as the monthly report does
        found = session.directory.find_customer(customer)
        if found is not None:
            customer = found.name

    if month:
        m = _MONTH.match(month)
        if not m or not customer:
            fail("--month needs YYYY-MM and a --customer")
        items = ledger.filter(customer, int(m.group(1)), int(m.group(2)))
    else:
        items = ledger.all()
        if customer:
            items = [e for e in items if e.customer_name == customer]

    if as_json:
        click.echo(json.dumps([entry_to_dict(e) for e in items], indent=2))
        return

    if not items:
        if not is_quiet(ctx):
            click.echo("No entries.")
        return

    for e in items:
        hours = format_hours(hours_between(e.entrance_time, e.exit_time))
        project = f" / {e.project_name}" if e.project_name else ""
        click.echo(
            f"{e.id}  {e.date.isoformat()}  {e.entrance_time}-{e.exit_time}  "
            f"{hours:>6} h  {e.customer_name}{project}"
        )


@entries.command("delete")
@click.argument("entry_id")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def delete(ctx: click.Context, entry_id: str, as_json: bool) -> None:
    """Delete an entry by report id."""
    from timeledger.core.use_cases.entries import delete_entry

    result = delete_entry(get_session(ctx), entry_id)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.removed:
        click.secho(f"🗑  Deleted {entry_id}", fg="green")
    else:
        click.secho(f"No entry with id {entry_id}", fg="yellow")
    echo_notices(result.notices)


@entries.command("export")
@click.argument("entry_id")
@click.option(
    "--output", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Directory to write timesheet-<id>.csv into (default: print to stdout).",
)
@click.option("--format", "fmt", type=FORMAT_CHOICE, default=None, help="CSV layout.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def export(ctx: click.Context, entry_id: str, output: Path | None, fmt: str | None, as_json: bool) -> None:
    """Export a single entry as CSV."""
    from timeledger.core.use_cases.entries import export_entry

    result = export_entry(get_session(ctx), entry_id, resolve_format(ctx, fmt))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error or result.artifact is None:
        fail(result.error or "Nothing to export")

    target = deliver(result.artifact, output)
    if target is not None:
        click.secho(f"💾 Exported to {target}", fg="cyan")
