"""Main CLI entry point."""

import logging

import click
from cashbook.database.factories import create_sqlite_database
from cashbook.cli.error_handling import BoundaryGroup

# Import and register all commands at module level
from cashbook.cli.commands import (
    account,
    transaction,
    chart,
    cost_center,
    reconcile,
    projection,
    summary,
)

COMPANY_ENV_VAR = "CASHBOOK_COMPANY_ID"


@click.group(cls=BoundaryGroup)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CASHBOOK_DB_PATH environment variable)",
    envvar="CASHBOOK_DB_PATH",
)
@click.option(
    "--company",
    "company_id",
    type=int,
    help="Company ID every command operates on (or CASHBOOK_COMPANY_ID)",
    envvar=COMPANY_ENV_VAR,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, company_id: int | None, verbose: bool):
    """Cashbook - small-business bookkeeping.

    Keep account balances in step with confirmed transactions, classify them
    in a chart of accounts, reconcile bank statements and project recurring
    cash flow.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        if company_id is None:
            raise click.UsageError(f"--company is required (or set {COMPANY_ENV_VAR})")
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["company_id"] = company_id


# Register all commands
account.register_commands(cli)
transaction.register_commands(cli)
chart.register_commands(cli)
cost_center.register_commands(cli)
reconcile.register_commands(cli)
projection.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
