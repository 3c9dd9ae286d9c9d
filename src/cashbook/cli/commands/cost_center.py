"""Cost center commands."""

import click
from decimal import Decimal
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.cost_center import CostCenterService


@click.group()
def cost_center_group():
    """Manage cost centers."""
    pass


@cost_center_group.command("list")
@click.pass_context
def list_cost_centers(ctx):
    """List cost centers with usage."""
    service = CostCenterService(ctx.obj["db"])
    company_id = ctx.obj["company_id"]

    centers = service.list_cost_centers(company_id)
    if not centers:
        click.echo("No cost centers found.")
        return

    usage = service.get_usage(company_id)
    for center in centers:
        stats = usage.get(center.id)
        count = stats.transaction_count if stats else 0
        total = stats.total_expenses if stats else Decimal("0")
        state = "active" if center.is_active else "inactive"
        click.echo(
            f"ID: {center.id:3d} | {center.code:8s} | {center.name:25s} | {state:8s} | "
            f"{count} transaction(s) | Expenses: {total:,.2f}"
        )


@cost_center_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--description")
@click.pass_context
def create_cost_center(ctx, code: str, name: str, description: str | None):
    """Create a cost center."""
    service = CostCenterService(ctx.obj["db"])
    try:
        center_id = service.create_cost_center(ctx.obj["company_id"], code, name, description)
        click.echo(f"Created cost center '{name}' (ID: {center_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("update")
@click.argument("cost_center_id", type=int)
@click.option("--code")
@click.option("--name")
@click.option("--description")
@click.option("--active/--inactive", "is_active", default=None)
@click.pass_context
def update_cost_center(
    ctx, cost_center_id: int, code: str | None, name: str | None, description: str | None, is_active: bool | None
):
    """Update a cost center."""
    service = CostCenterService(ctx.obj["db"])
    try:
        service.update_cost_center(
            ctx.obj["company_id"],
            cost_center_id,
            code=code,
            name=name,
            description=description,
            is_active=is_active,
        )
        click.echo(f"Updated cost center {cost_center_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@cost_center_group.command("delete")
@click.argument("cost_center_id", type=int)
@click.pass_context
def delete_cost_center(ctx, cost_center_id: int):
    """Delete a cost center no transaction references."""
    service = CostCenterService(ctx.obj["db"])
    try:
        service.delete_cost_center(ctx.obj["company_id"], cost_center_id)
        click.echo(f"Deleted cost center {cost_center_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register cost center commands with main CLI."""
    cli.add_command(cost_center_group, name="cost-center")
