"""
CLI commands for monthly reports.

Usage::

    timeledger report monthly Acme 2024 5
    timeledger report monthly Acme 2024 5 --output exports/ --format v1
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from timeledger.ui.cli.helpers import FORMAT_CHOICE, deliver, fail, get_session, resolve_format


@click.group()
def report() -> None:
    """Reports — monthly summaries per customer."""


@report.command("monthly")
@click.argument("customer")
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@click.option(
    "--output", "-o", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="Directory to write the CSV into (default: print to stdout).",
)
@click.option("--format", "fmt", type=FORMAT_CHOICE, default=None, help="CSV layout.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def monthly(
    ctx: click.Context,
    customer: str,
    year: int,
    month: int,
    output: Path | None,
    fmt: str | None,
    as_json: bool,
) -> None:
    """Total hours and CSV for one customer's work month."""
    from timeledger.core.services.duration import format_hours
    from timeledger.core.use_cases.reports import monthly_report

    result = monthly_report(get_session(ctx), customer, year, month, resolve_format(ctx, fmt))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.error or result.report is None:
        fail(result.error or "Report could not be built")

    summary = result.report
    if summary.empty:
        click.echo(f"No entries for {customer} in {summary.period}.")
        return

    if output is None:
        click.echo(summary.csv)
        return

    target = deliver(result.artifact, output)
    click.secho(f"📊 {summary.customer_name} {summary.period}", fg="cyan", bold=True)
    click.echo(f"   Entries: {summary.entry_count}")
    click.echo(f"   Total:   {format_hours(summary.total_hours)} h")
    click.echo(f"   Written: {target}")
    if result.artifact.recipient:
        click.echo(f"   Send to: {result.artifact.recipient} — \"{result.artifact.subject}\"")
