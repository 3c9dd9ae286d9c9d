"""Bank reconciliation commands."""

from pathlib import Path

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.reconciliation import START_BATCH_SIZE, ReconciliationService
from cashbook.utils.amount_parser import parse_amount
from cashbook.utils.date_parser import parse_date


@click.group()
def reconcile_group():
    """Reconcile accounts against bank statements."""
    pass


@reconcile_group.command("list")
@click.pass_context
def list_reconciliations(ctx):
    """List reconciliations, newest first."""
    service = ReconciliationService(ctx.obj["db"])
    rows = service.list_reconciliations(ctx.obj["company_id"])
    if not rows:
        click.echo("No reconciliations found.")
        return
    for row in rows:
        rec = row.reconciliation
        click.echo(
            f"ID: {rec.id:3d} | {rec.reconciliation_date} | {row.account_name or '-':20s} | "
            f"Statement: {rec.statement_balance:>12,.2f} | Book: {rec.book_balance:>12,.2f} | "
            f"Difference: {rec.difference:>10,.2f} | {rec.status.value}"
        )


@reconcile_group.command("open")
@click.argument("account_id", type=int)
@click.argument("statement_balance")
@click.option("--date", "rec_date", default="today", help="Statement date (default: today)")
@click.option("--notes")
@click.pass_context
def open_reconciliation(ctx, account_id: int, statement_balance: str, rec_date: str, notes: str | None):
    """Open a reconciliation with the statement's closing balance.

    Examples:
        cashbook --company 1 reconcile open 1 5230.10 --date 2024-01-31
    """
    service = ReconciliationService(ctx.obj["db"])
    try:
        reconciliation_id = service.open(
            ctx.obj["company_id"],
            account_id,
            parse_date(rec_date),
            parse_amount(statement_balance),
            notes=notes,
        )
        rec = service.require_reconciliation(ctx.obj["company_id"], reconciliation_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Opened reconciliation {reconciliation_id}")
    click.echo(f"  Book balance: {rec.book_balance:,.2f}")
    click.echo(f"  Difference:   {rec.difference:,.2f}")


@reconcile_group.command("start")
@click.argument("reconciliation_id", type=int)
@click.option("--limit", type=int, default=START_BATCH_SIZE, show_default=True)
@click.pass_context
def start_reconciliation(ctx, reconciliation_id: int, limit: int):
    """Add recent confirmed transactions as items."""
    service = ReconciliationService(ctx.obj["db"])
    try:
        created = service.start(ctx.obj["company_id"], reconciliation_id, limit=limit)
        click.echo(f"Added {created} transaction item(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reconcile_group.command("import")
@click.argument("reconciliation_id", type=int)
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_statement(ctx, reconciliation_id: int, statement_file: str):
    """Import an OFX or CSV bank statement."""
    service = ReconciliationService(ctx.obj["db"])
    path = Path(statement_file)
    try:
        imported = service.import_statement(
            ctx.obj["company_id"], reconciliation_id, path.name, path.read_bytes()
        )
        click.echo(f"Imported {imported} statement line(s)")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reconcile_group.command("items")
@click.argument("reconciliation_id", type=int)
@click.option("--pending", "only_pending", is_flag=True, help="Only unreconciled items")
@click.pass_context
def list_items(ctx, reconciliation_id: int, only_pending: bool):
    """List the items of a reconciliation."""
    service = ReconciliationService(ctx.obj["db"])
    company_id = ctx.obj["company_id"]
    try:
        items = service.list_items(company_id, reconciliation_id, reconciled=False if only_pending else None)
        remaining = service.remaining_difference(company_id, reconciliation_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not items:
        click.echo("No items found.")
    for item in items:
        mark = "x" if item.is_reconciled else " "
        click.echo(
            f"[{mark}] {item.id:5d} | {item.origin.value:10s} | {str(item.date or ''):10s} | "
            f"{item.value:>12,.2f} | {item.description}"
        )
    click.echo(f"\nRemaining difference: {remaining:,.2f}")


def _set_reconciled(ctx, item_ids: tuple[int, ...], reconciled: bool) -> None:
    service = ReconciliationService(ctx.obj["db"])
    try:
        for item_id in item_ids:
            service.reconcile_item(ctx.obj["company_id"], item_id, reconciled)
    except ValueError as e:
        handle_domain_error(ctx, e)
    state = "reconciled" if reconciled else "unreconciled"
    click.echo(f"Marked {len(item_ids)} item(s) {state}")


@reconcile_group.command("mark")
@click.argument("item_ids", type=int, nargs=-1, required=True)
@click.pass_context
def mark_items(ctx, item_ids: tuple[int, ...]):
    """Mark items as reconciled."""
    _set_reconciled(ctx, item_ids, True)


@reconcile_group.command("unmark")
@click.argument("item_ids", type=int, nargs=-1, required=True)
@click.pass_context
def unmark_items(ctx, item_ids: tuple[int, ...]):
    """Mark items as not reconciled."""
    _set_reconciled(ctx, item_ids, False)


@reconcile_group.command("adjust")
@click.argument("reconciliation_id", type=int)
@click.argument("description")
@click.argument("value")
@click.pass_context
def add_adjustment(ctx, reconciliation_id: int, description: str, value: str):
    """Add a manual adjustment item (signed VALUE)."""
    service = ReconciliationService(ctx.obj["db"])
    try:
        item_id = service.add_adjustment(
            ctx.obj["company_id"], reconciliation_id, description, parse_amount(value)
        )
        click.echo(f"Added adjustment item {item_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reconcile_group.command("remaining")
@click.argument("reconciliation_id", type=int)
@click.pass_context
def remaining_difference(ctx, reconciliation_id: int):
    """Show the difference still to be explained."""
    service = ReconciliationService(ctx.obj["db"])
    try:
        remaining = service.remaining_difference(ctx.obj["company_id"], reconciliation_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    balanced = " (balanced)" if abs(remaining) <= service.tolerance else ""
    click.echo(f"Remaining difference: {remaining:,.2f}{balanced}")


@reconcile_group.command("complete")
@click.argument("reconciliation_id", type=int)
@click.option("--force", is_flag=True, help="Complete even if not balanced")
@click.pass_context
def complete_reconciliation(ctx, reconciliation_id: int, force: bool):
    """Mark a reconciliation as reconciled.

    Refuses while the remaining difference is above 0.01 unless --force is given.
    """
    service = ReconciliationService(ctx.obj["db"])
    try:
        service.complete(ctx.obj["company_id"], reconciliation_id, require_balanced=not force)
        click.echo(f"Reconciliation {reconciliation_id} completed")
    except ValueError as e:
        handle_domain_error(ctx, e)


@reconcile_group.command("delete")
@click.argument("reconciliation_id", type=int)
@click.pass_context
def delete_reconciliation(ctx, reconciliation_id: int):
    """Delete a reconciliation and its items."""
    service = ReconciliationService(ctx.obj["db"])
    try:
        service.delete(ctx.obj["company_id"], reconciliation_id)
        click.echo(f"Deleted reconciliation {reconciliation_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register reconciliation commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
