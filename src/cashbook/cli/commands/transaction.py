"""Transaction management commands."""

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.entities import TransactionStatus, TransactionType
from cashbook.domain.transaction import TransactionService
from cashbook.utils.amount_parser import parse_amount
from cashbook.utils.date_parser import parse_date

TYPE_CHOICE = click.Choice([t.value for t in TransactionType], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in TransactionStatus], case_sensitive=False)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.argument("account_id", type=int)
@click.argument("type", type=TYPE_CHOICE)
@click.argument("value")
@click.option("--date", "txn_date", default="today", help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--status", type=STATUS_CHOICE, default=TransactionStatus.FORECAST.value, show_default=True)
@click.option("--chart", "chart_account_id", type=int, help="Chart account ID")
@click.option("--cost-center", "cost_center_id", type=int, help="Cost center ID (expenses only)")
@click.option("--description", help="Transaction description")
@click.option("--payment-method", help="Payment method (e.g., pix, card, cash)")
@click.pass_context
def add_transaction(
    ctx,
    account_id: int,
    type: str,
    value: str,
    txn_date: str,
    status: str,
    chart_account_id: int | None,
    cost_center_id: int | None,
    description: str | None,
    payment_method: str | None,
):
    """Add a transaction. VALUE is the positive amount.

    A confirmed transaction is posted to the account balance immediately.

    Examples:
        cashbook --company 1 transaction add 1 income 1200 --status confirmed
        cashbook --company 1 transaction add 1 expense 89.90 --chart 4 --date yesterday
    """
    service = TransactionService(ctx.obj["db"])
    try:
        transaction_id = service.create_transaction(
            ctx.obj["company_id"],
            account_id=account_id,
            type=type,
            date=parse_date(txn_date),
            value=parse_amount(value),
            status=status,
            chart_account_id=chart_account_id,
            cost_center_id=cost_center_id,
            description=description,
            payment_method=payment_method,
        )
        click.echo(f"Created transaction {transaction_id} ({status})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", "account_id", type=int, help="Account ID")
@click.option("--status", type=STATUS_CHOICE)
@click.option("--type", "txn_type", type=TYPE_CHOICE)
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account_id: int | None,
    status: str | None,
    txn_type: str | None,
):
    """View transactions with optional filters, newest first."""
    service = TransactionService(ctx.obj["db"])
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        rows = service.list_transactions(
            ctx.obj["company_id"],
            start_date=start,
            end_date=end,
            account_id=account_id,
            status=status,
            type=txn_type,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(rows)} transaction(s):")
    click.echo("-" * 110)
    for row in rows:
        txn = row.transaction
        chart = row.chart_account_name or "-"
        if row.chart_account_type is not None:
            chart = f"{chart} ({row.chart_account_type.value})"
        click.echo(
            f"{txn.id:5d} | {txn.date} | {txn.type.value:8s} | {txn.value:>12,.2f} | "
            f"{txn.status.value:9s} | {row.account_name or '-':15s} | {chart:25s} | "
            f"{txn.description or ''}"
        )


@transaction_group.command("status")
@click.argument("transaction_id", type=int)
@click.argument("status", type=STATUS_CHOICE)
@click.pass_context
def update_status(ctx, transaction_id: int, status: str) -> None:
    """Move a transaction between forecast and confirmed."""
    service = TransactionService(ctx.obj["db"])
    try:
        changed = service.update_status(ctx.obj["company_id"], transaction_id, status)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if changed:
        click.echo(f"Transaction {transaction_id} is now {status}")
    else:
        click.echo(f"Transaction {transaction_id} already {status}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction, reversing its balance effect if confirmed."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(ctx.obj["company_id"], transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
