"""
Shared CLI plumbing — settings, session and output helpers.

Settings and the session are created lazily on first use and cached
on the click context, so ``--help`` works without a data directory.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from timeledger.core.config.loader import ConfigError, Settings, load_settings
from timeledger.core.reliability.retry_queue import RetryQueue
from timeledger.core.services.reports import CsvFormat, ExportArtifact
from timeledger.core.session import TimesheetSession

FORMAT_CHOICE = click.Choice([f.value for f in CsvFormat], case_sensitive=False)


def get_settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation. Exits 1 on a bad config file."""
    root = ctx.find_root()
    root.ensure_object(dict)
    if "settings" not in root.obj:
        try:
            root.obj["settings"] = load_settings(root.obj.get("config_path"))
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
    return root.obj["settings"]


def get_session(ctx: click.Context) -> TimesheetSession:
    root = ctx.find_root()
    if "session" not in root.obj:
        root.obj["session"] = TimesheetSession.open(get_settings(ctx).data_dir)
    return root.obj["session"]


def get_retry_queue(ctx: click.Context) -> RetryQueue:
    root = ctx.find_root()
    if "retry_queue" not in root.obj:
        settings = get_settings(ctx)
        root.obj["retry_queue"] = RetryQueue(
            get_session(ctx).store,
            max_attempts=settings.sync.max_attempts,
            base_delay=settings.sync.base_delay,
        )
    return root.obj["retry_queue"]


def resolve_format(ctx: click.Context, fmt: str | None) -> CsvFormat:
    """Explicit ``--format`` wins over the configured default."""
    if fmt:
        return CsvFormat(fmt.lower())
    return get_settings(ctx).csv_format


def is_quiet(ctx: click.Context) -> bool:
    return bool(ctx.find_root().obj.get("quiet", False))


def echo_notices(notices: list[str]) -> None:
    """Storage write failures: the change is in memory but not on disk."""
    for notice in notices:
        click.secho(f"⚠️  Not saved to disk: {notice}", fg="yellow", err=True)


def fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def deliver(artifact: ExportArtifact, output: Path | None) -> Path | None:
    """Hand an export to its sink: a file in ``output``, or stdout.

    Returns:
        The written path, or None when printed to stdout.
        Exits 1 if ``output`` cannot be written.
    """
    if output is None:
        click.echo(artifact.text)
        return None
    target = output / artifact.filename
    try:
        output.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.content)
    except OSError as e:
        fail(f"Cannot write {target}: {e}")
    return target
