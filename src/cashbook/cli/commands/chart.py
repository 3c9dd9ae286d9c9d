"""Chart of accounts commands."""

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.chart_of_accounts import ChartOfAccountsService
from cashbook.domain.entities import ChartAccountType

CHART_TYPE_CHOICE = click.Choice([t.value for t in ChartAccountType], case_sensitive=False)


@click.group()
def chart_group():
    """Manage the chart of accounts."""
    pass


def _print_tree(nodes, indent: int = 0) -> None:
    for node in nodes:
        prefix = "  " * indent
        click.echo(f"{prefix}{node.code} {node.name} [{node.type.value}] (ID: {node.id})")
        _print_tree(node.children, indent + 1)


@chart_group.command("list")
@click.option("--type", "chart_type", type=CHART_TYPE_CHOICE, help="Only accounts of this type")
@click.option("--tree", is_flag=True, help="Show the hierarchy")
@click.pass_context
def list_chart(ctx, chart_type: str | None, tree: bool):
    """List chart accounts ordered by code."""
    service = ChartOfAccountsService(ctx.obj["db"])
    company_id = ctx.obj["company_id"]

    if tree:
        nodes = service.get_chart_tree(company_id)
        if not nodes:
            click.echo("No chart accounts found.")
            return
        _print_tree(nodes)
        return

    charts = service.list_chart_accounts(company_id, type=chart_type)
    if not charts:
        click.echo("No chart accounts found.")
        return
    known_ids = {chart.id for chart in service.list_chart_accounts(company_id)}
    for chart in charts:
        parent = f" | Parent: {chart.parent_id}" if chart.parent_id in known_ids else ""
        click.echo(f"ID: {chart.id:3d} | {chart.code:10s} | {chart.name:30s} | {chart.type.value}{parent}")


@chart_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--type", "chart_type", type=CHART_TYPE_CHOICE, help="Type (inherited from --parent when omitted)")
@click.option("--parent", "parent_id", type=int, help="Parent chart account ID")
@click.option("--description", help="Free text description")
@click.pass_context
def create_chart(ctx, code: str, name: str, chart_type: str | None, parent_id: int | None, description: str | None):
    """Create a chart account.

    Examples:
        cashbook --company 1 chart create 4 "Operating costs" --type cost
        cashbook --company 1 chart create 4.1 "Raw materials" --parent 1
    """
    service = ChartOfAccountsService(ctx.obj["db"])
    try:
        chart_id = service.create_chart_account(
            ctx.obj["company_id"],
            code=code,
            name=name,
            type=chart_type,
            parent_id=parent_id,
            description=description,
        )
        click.echo(f"Created chart account '{code} {name}' (ID: {chart_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@chart_group.command("update")
@click.argument("chart_account_id", type=int)
@click.option("--code")
@click.option("--name")
@click.option("--type", "chart_type", type=CHART_TYPE_CHOICE)
@click.option("--parent", "parent_id", type=int, help="New parent chart account ID")
@click.option("--no-parent", is_flag=True, help="Make this a top-level account")
@click.option("--description")
@click.pass_context
def update_chart(
    ctx,
    chart_account_id: int,
    code: str | None,
    name: str | None,
    chart_type: str | None,
    parent_id: int | None,
    no_parent: bool,
    description: str | None,
):
    """Update a chart account. Only provided fields change."""
    service = ChartOfAccountsService(ctx.obj["db"])
    try:
        service.update_chart_account(
            ctx.obj["company_id"],
            chart_account_id,
            code=code,
            name=name,
            type=chart_type,
            parent_id=parent_id,
            description=description,
            clear_parent=no_parent,
        )
        click.echo(f"Updated chart account {chart_account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@chart_group.command("delete")
@click.argument("chart_account_id", type=int)
@click.pass_context
def delete_chart(ctx, chart_account_id: int):
    """Delete a chart account no transaction references.

    Child accounts are kept and become top-level accounts.
    """
    service = ChartOfAccountsService(ctx.obj["db"])
    try:
        service.delete_chart_account(ctx.obj["company_id"], chart_account_id)
        click.echo(f"Deleted chart account {chart_account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register chart of accounts commands with main CLI."""
    cli.add_command(chart_group, name="chart")
