"""Account management commands."""

import click
from cashbook.cli.error_handling import handle_domain_error
from cashbook.domain.account import AccountService
from cashbook.domain.entities import AccountKind
from cashbook.utils.amount_parser import parse_amount

KIND_CHOICE = click.Choice([kind.value for kind in AccountKind], case_sensitive=False)


@click.group()
def account_group():
    """Manage cash accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--kind", type=KIND_CHOICE, default=AccountKind.BANK.value, show_default=True)
@click.option("--initial-balance", default="0", help="Opening balance (e.g., 1500.00)")
@click.pass_context
def create_account(ctx, name: str, kind: str, initial_balance: str):
    """Create a new account.

    Examples:
        cashbook --company 1 account create "Main Checking"
        cashbook --company 1 account create "Petty Cash" --kind wallet --initial-balance 200
    """
    service = AccountService(ctx.obj["db"])
    try:
        account_id = service.create_account(
            ctx.obj["company_id"], name=name, kind=kind, initial_balance=parse_amount(initial_balance)
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(ctx.obj["company_id"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.kind.value:6s} | "
            f"Initial: {acc.initial_balance:>12,.2f} | Balance: {acc.current_balance:>12,.2f}"
        )


@account_group.command("update")
@click.argument("account_id", type=int)
@click.option("--name", help="New account name")
@click.option("--kind", type=KIND_CHOICE)
@click.option("--initial-balance", help="New opening balance; the current balance moves with it")
@click.pass_context
def update_account(ctx, account_id: int, name: str | None, kind: str | None, initial_balance: str | None):
    """Update an account."""
    service = AccountService(ctx.obj["db"])
    try:
        service.update_account(
            ctx.obj["company_id"],
            account_id,
            name=name,
            kind=kind,
            initial_balance=parse_amount(initial_balance) if initial_balance is not None else None,
        )
        click.echo(f"Updated account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account_id: int, yes: bool) -> None:
    """Delete an account.

    The account can only be deleted if no transaction or reconciliation
    references it.
    """
    service = AccountService(ctx.obj["db"])
    company_id = ctx.obj["company_id"]

    try:
        account_obj = service.require_account(company_id, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(company_id, account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("verify")
@click.argument("account_id", type=int)
@click.pass_context
def verify_account(ctx, account_id: int) -> None:
    """Check the stored balance against confirmed transactions."""
    service = AccountService(ctx.obj["db"])
    company_id = ctx.obj["company_id"]
    try:
        account_obj = service.require_account(company_id, account_id)
        expected = service.expected_balance(company_id, account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if expected == account_obj.current_balance:
        click.echo(f"Account '{account_obj.name}' is consistent: {expected:,.2f}")
    else:
        click.echo(
            f"Error: Account '{account_obj.name}' balance {account_obj.current_balance:,.2f} "
            f"differs from expected {expected:,.2f}",
            err=True,
        )
        ctx.exit(1)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
