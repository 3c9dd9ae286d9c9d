"""Summary command."""

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.summary import FinancialSummaryService


def _echo_breakdown(title: str, totals: dict, base=None) -> None:
    click.echo(f"\n{title}:")
    if not totals:
        click.echo("  (none)")
        return
    for label, value in sorted(totals.items(), key=lambda item: item[1], reverse=True):
        share = f" ({value / base * 100:.1f}%)" if base else ""
        click.echo(f"  {label:30s} {value:>12,.2f}{share}")


@click.command("summary")
@click.argument("period", metavar="YYYY-MM")
@click.pass_context
def summary(ctx, period: str):
    """Show the financial summary of a month's confirmed transactions."""
    service = FinancialSummaryService(ctx.obj["db"])
    try:
        report = service.build_period_summary(ctx.obj["company_id"], period)
    except ValueError as e:
        handle_domain_error(ctx, e)

    outcome = "profit" if report.result >= 0 else "loss"
    click.echo(f"\nSummary for {report.period} ({report.start_date} to {report.end_date})")
    click.echo("=" * 60)
    click.echo(f"Total income:     {report.total_income:>12,.2f}")
    click.echo(f"Total expenses:   {report.total_expenses:>12,.2f}")
    click.echo(f"Result:           {report.result:>12,.2f} ({outcome})")
    click.echo(f"Operating margin: {report.operating_margin}%")
    click.echo(
        f"Transactions:     {report.transaction_count} "
        f"({report.income_count} income, {report.expense_count} expense)"
    )

    _echo_breakdown("Income by category", report.income_by_category)
    _echo_breakdown("Expenses by category", report.expenses_by_category, report.total_expenses)
    _echo_breakdown("Expenses by type", report.expenses_by_type, report.total_expenses)

    click.echo("\nAccount balances:")
    for balance in report.account_balances:
        click.echo(f"  {balance.name:30s} {balance.current_balance:>12,.2f}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
