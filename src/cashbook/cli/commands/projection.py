"""Cash-flow projection commands."""

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.entities import ProjectionType
from cashbook.domain.projection import ProjectionService
from cashbook.utils.amount_parser import parse_amount
from cashbook.utils.date_parser import parse_date, parse_period

PROJECTION_TYPE_CHOICE = click.Choice([t.value for t in ProjectionType], case_sensitive=False)


@click.group()
def projection_group():
    """Manage cash-flow projections."""
    pass


@projection_group.command("list")
@click.option("--month", help="Only projections in this month (YYYY-MM)")
@click.pass_context
def list_projections(ctx, month: str | None):
    """List projections, latest first."""
    service = ProjectionService(ctx.obj["db"])
    start = end = None
    if month:
        try:
            start, end = parse_period(month)
        except ValueError as e:
            handle_domain_error(ctx, e)

    projections = service.list_projections(ctx.obj["company_id"], start, end)
    if not projections:
        click.echo("No projections found.")
        return
    for p in projections:
        actual = f"{p.actual_value:>12,.2f}" if p.actual_value is not None else f"{'-':>12}"
        recurring = " (recurring)" if p.is_recurring else ""
        click.echo(
            f"ID: {p.id:3d} | {p.date} | {p.type.value:7s} | Projected: {p.projected_value:>12,.2f} | "
            f"Actual: {actual} | {p.description}{recurring}"
        )


@projection_group.command("add")
@click.argument("date")
@click.argument("type", type=PROJECTION_TYPE_CHOICE)
@click.argument("value")
@click.argument("description")
@click.option("--chart", "chart_account_id", type=int, help="Chart account ID")
@click.option("--account", "account_id", type=int, help="Account ID")
@click.option("--recurring", is_flag=True)
@click.option("--pattern", "recurrence_pattern", help="Recurrence description (e.g., monthly)")
@click.pass_context
def add_projection(
    ctx,
    date: str,
    type: str,
    value: str,
    description: str,
    chart_account_id: int | None,
    account_id: int | None,
    recurring: bool,
    recurrence_pattern: str | None,
):
    """Add a projection."""
    service = ProjectionService(ctx.obj["db"])
    try:
        projection_id = service.create_projection(
            ctx.obj["company_id"],
            date=parse_date(date),
            description=description,
            type=type,
            projected_value=parse_amount(value),
            chart_account_id=chart_account_id,
            account_id=account_id,
            is_recurring=recurring,
            recurrence_pattern=recurrence_pattern,
        )
        click.echo(f"Created projection {projection_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@projection_group.command("update")
@click.argument("projection_id", type=int)
@click.option("--actual", help="Actual value realized")
@click.option("--value", "projected_value", help="New projected value")
@click.option("--date", "new_date")
@click.option("--description")
@click.option("--chart", "chart_account_id", type=int, help="New chart account ID")
@click.option("--account", "account_id", type=int, help="New account ID")
@click.option("--clear-actual", is_flag=True, help="Forget the recorded actual value")
@click.option("--no-chart", is_flag=True, help="Remove the chart account link")
@click.option("--no-account", is_flag=True, help="Remove the account link")
@click.pass_context
def update_projection(
    ctx,
    projection_id: int,
    actual: str | None,
    projected_value: str | None,
    new_date: str | None,
    description: str | None,
    chart_account_id: int | None,
    account_id: int | None,
    clear_actual: bool,
    no_chart: bool,
    no_account: bool,
):
    """Update a projection, typically recording its actual value."""
    service = ProjectionService(ctx.obj["db"])
    try:
        service.update_projection(
            ctx.obj["company_id"],
            projection_id,
            date=parse_date(new_date) if new_date else None,
            description=description,
            projected_value=parse_amount(projected_value) if projected_value else None,
            actual_value=parse_amount(actual) if actual else None,
            chart_account_id=chart_account_id,
            account_id=account_id,
            clear_actual_value=clear_actual,
            clear_chart_account=no_chart,
            clear_account=no_account,
        )
        click.echo(f"Updated projection {projection_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@projection_group.command("delete")
@click.argument("projection_id", type=int)
@click.pass_context
def delete_projection(ctx, projection_id: int):
    """Delete a projection."""
    service = ProjectionService(ctx.obj["db"])
    try:
        service.delete_projection(ctx.obj["company_id"], projection_id)
        click.echo(f"Deleted projection {projection_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@projection_group.command("generate")
@click.option("--month", help="Target month (YYYY-MM, default: next month)")
@click.pass_context
def generate_projections(ctx, month: str | None):
    """Generate recurring projections from the last 90 days of history."""
    service = ProjectionService(ctx.obj["db"])
    try:
        target = parse_period(month)[0] if month else None
        generated = service.generate_automatic(ctx.obj["company_id"], target_month=target)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Generated {generated} projection(s)")


def register_commands(cli):
    """Register projection commands with main CLI."""
    cli.add_command(projection_group, name="projection")
