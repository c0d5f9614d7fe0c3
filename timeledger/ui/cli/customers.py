"""
CLI commands for the customer directory and remote customer sync.

Usage::

    timeledger customers add "Acme" --company "Acme Corp." --email billing@acme.test
    timeledger customers list --json
    timeledger customers add-project Acme Website
    timeledger customers remove-project Acme Website
    timeledger customers set-email Acme ops@acme.test
    timeledger customers sync --endpoint https://example.test/customers
    timeledger customers sync --retry
"""

from __future__ import annotations

import json
import sys

import click

from timeledger.ui.cli.helpers import (
    echo_notices,
    fail,
    get_retry_queue,
    get_session,
    get_settings,
    is_quiet,
)


@click.group()
def customers() -> None:
    """Customers — directory of customers and their projects."""


def _report_edit(result, as_json: bool, message: str) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return
    if result.error:
        fail(result.error)
    click.secho(f"✅ {message}", fg="green")
    echo_notices(result.notices)


@customers.command("add")
@click.argument("name")
@click.option("--company", "company_name", default="", help="Company the customer belongs to.")
@click.option("--email", default=None, help="Where reports are sent.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def add(ctx: click.Context, name: str, company_name: str, email: str | None, as_json: bool) -> None:
    """Add a customer."""
    from timeledger.core.use_cases.customers import add_customer

    result = add_customer(get_session(ctx), name, company_name, email)
    _report_edit(result, as_json, f"Customer '{name}' added")


@customers.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_customers(ctx: click.Context, as_json: bool) -> None:
    """List customers and their projects."""
    items = get_session(ctx).directory.list_customers()

    if as_json:
        click.echo(json.dumps([c.model_dump(mode="json") for c in items], indent=2))
        return

    if not items:
        if not is_quiet(ctx):
            click.echo("No customers yet. Add one with 'timeledger customers add'.")
        return

    for customer in items:
        company = f" ({customer.company_name})" if customer.company_name else ""
        email = f"  <{customer.email}>" if customer.email else ""
        click.secho(f"• {customer.name}", fg="cyan", bold=True, nl=False)
        click.echo(f"{company}{email}")
        for project in customer.projects:
            click.echo(f"    - {project}")


@customers.command("add-project")
@click.argument("customer")
@click.argument("project")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def add_project_cmd(ctx: click.Context, customer: str, project: str, as_json: bool) -> None:
    """Add a project to a customer."""
    from timeledger.core.use_cases.customers import add_project

    result = add_project(get_session(ctx), customer, project)
    _report_edit(result, as_json, f"Project '{project}' added to '{customer}'")


@customers.command("remove-project")
@click.argument("customer")
@click.argument("project")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove_project_cmd(ctx: click.Context, customer: str, project: str, as_json: bool) -> None:
    """Remove a project from a customer (no error if absent)."""
    from timeledger.core.use_cases.customers import remove_project

    result = remove_project(get_session(ctx), customer, project)
    _report_edit(result, as_json, f"Project '{project}' removed from '{customer}'")


@customers.command("set-email")
@click.argument("customer")
@click.argument("email")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def set_email_cmd(ctx: click.Context, customer: str, email: str, as_json: bool) -> None:
    """Set the email reports for a customer are sent to."""
    from timeledger.core.use_cases.customers import set_customer_email

    result = set_customer_email(get_session(ctx), customer, email)
    if not as_json and result.customer is None:
        click.secho(f"⚠️  Unknown customer '{customer}', nothing changed", fg="yellow")
        return
    _report_edit(result, as_json, f"Email for '{customer}' set to {email}")


@customers.command("sync")
@click.option("--endpoint", default=None, help="Sync service URL (default: from config).")
@click.option("--retry", is_flag=True, help="Only re-submit customers whose retry is due.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sync(ctx: click.Context, endpoint: str | None, retry: bool, as_json: bool) -> None:
    """Submit customers to the remote sync service."""
    from timeledger.core.services.customer_sync import HttpCustomerService
    from timeledger.core.use_cases.customers import retry_failed, sync_directory

    settings = get_settings(ctx)
    url = endpoint or settings.sync.endpoint
    if not url:
        fail("No sync endpoint configured. Set sync.endpoint in timeledger.yml or pass --endpoint.")

    service = HttpCustomerService(url, timeout=settings.sync.timeout)
    session = get_session(ctx)
    queue = get_retry_queue(ctx)
    result = (retry_failed if retry else sync_directory)(session, service, queue)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    summary = result.summary
    click.secho(
        f"🔄 Synced {summary.success_count}, failed {summary.failure_count}",
        fg="green" if summary.failure_count == 0 else "yellow",
        bold=True,
    )
    for failure in summary.failures:
        click.echo(f"   • {failure.customer_name}: {failure.reason}")
    if result.queued:
        click.echo(f"   {result.queued} customer(s) queued for retry")
    for name in result.exhausted:
        click.secho(f"   ✗ Gave up on '{name}' after repeated failures", fg="red")
