"""
Timesheet Ledger — CLI entrypoint.

Usage:
    timeledger --help
    timeledger customers add "Acme" --company "Acme Corp."
    timeledger entries add --customer Acme --date 2024-05-10 --in 09:00 --out 17:30
    timeledger report monthly Acme 2024 5 --output exports/
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from timeledger import __version__
from timeledger.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="timeledger")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to timeledger.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Timesheet Ledger — record work sessions and export CSV reports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show what the ledger currently holds."""
    from timeledger.core.use_cases.status import get_status
    from timeledger.ui.cli.helpers import get_retry_queue, get_session, get_settings

    settings = get_settings(ctx)
    result = get_status(get_session(ctx), settings.data_dir, get_retry_queue(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"\n📒 Timesheet ledger — {result.data_dir}", fg="cyan", bold=True)
    click.echo(f"   Customers: {result.customer_count} ({result.project_count} projects)")
    click.echo(f"   Entries:   {result.entry_count}")
    if result.last_entry_id:
        click.echo(f"   Last id:   {result.last_entry_id}")
    if result.counters:
        click.echo()
        click.secho("   Report id counters:", fg="white", bold=True)
        for month, counter in sorted(result.counters.items()):
            click.echo(f"     • {month}: {counter:04d}")
    if result.pending_sync:
        click.echo()
        queue = result.sync_queue
        click.secho(
            f"   ⏳ {result.pending_sync} customer(s) waiting for sync retry "
            f"({queue.get('ready', 0)} ready, {queue.get('exhausted', 0)} exhausted)",
            fg="yellow",
        )
        for item in queue.get("items", []):
            error = f" — {item['last_error']}" if item.get("last_error") else ""
            click.echo(f"     • {item['id']}: attempt {item['attempt']}/{item['max_attempts']}{error}")
    click.echo()


# ── Register sub-command groups from timeledger/ui/cli/ ────────

from timeledger.ui.cli.customers import customers  # noqa: E402
from timeledger.ui.cli.entries import entries  # noqa: E402
from timeledger.ui.cli.report import report  # noqa: E402

cli.add_command(customers)
cli.add_command(entries)
cli.add_command(report)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
