"""Account domain service."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from cashbook.domain.entities import Account as AccountEntity, AccountKind, TransactionStatus
from cashbook.domain.errors import (
    DependencyError,
    NotFoundError,
    account_delete_blocked,
    account_not_found,
)
from cashbook.domain.transaction import signed_value
from cashbook.domain.validation import coerce_decimal, parse_choice, require_text

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing cash accounts."""

    def __init__(self, db: "Database"):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        company_id: int,
        name: str,
        kind: AccountKind | str,
        initial_balance: Decimal | int | str = Decimal("0"),
    ) -> int:
        """Create a new account.

        The current balance starts equal to the initial balance.

        Args:
            company_id: Owning company
            name: Account name
            kind: wallet, bank or card
            initial_balance: Opening balance

        Returns:
            Account ID

        Raises:
            ValidationError: If name, kind or balance is invalid
        """
        name = require_text(name, "name")
        account_kind = parse_choice(AccountKind, kind, "account kind")
        opening = coerce_decimal(initial_balance, "initial balance")

        account_id = self.db.create_account(
            company_id=company_id, name=name, kind=account_kind.value, initial_balance=opening
        )
        logger.info("Created account %s for company %s", account_id, company_id)
        return account_id

    def get_account(self, company_id: int, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(company_id, account_id)

    def require_account(self, company_id: int, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(company_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, company_id: int) -> list[AccountEntity]:
        """List all accounts of a company, oldest first."""
        return self.db.list_accounts(company_id)

    def update_account(
        self,
        company_id: int,
        account_id: int,
        name: Optional[str] = None,
        kind: Optional[AccountKind | str] = None,
        initial_balance: Optional[Decimal | int | str] = None,
    ) -> None:
        """Update an account.

        Changing the initial balance moves the current balance by the same
        amount so that confirmed transactions stay accounted for.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a new value is invalid
        """
        with self.db.unit_of_work():
            account = self.require_account(company_id, account_id)
            new_name = require_text(name, "name") if name is not None else account.name
            new_kind = parse_choice(AccountKind, kind, "account kind") if kind is not None else account.kind
            new_initial = (
                coerce_decimal(initial_balance, "initial balance")
                if initial_balance is not None
                else account.initial_balance
            )

            self.db.update_account(
                company_id=company_id,
                account_id=account_id,
                name=new_name,
                kind=new_kind.value,
                initial_balance=new_initial,
            )
            delta = new_initial - account.initial_balance
            if delta != 0:
                self.db.adjust_account_balance(company_id, account_id, delta)
        logger.info("Updated account %s", account_id)

    def delete_account(self, company_id: int, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If transactions or reconciliations reference it
        """
        self.require_account(company_id, account_id)

        transaction_count = self.db.get_account_transaction_count(company_id, account_id)
        reconciliation_count = self.db.get_account_reconciliation_count(company_id, account_id)
        if transaction_count > 0 or reconciliation_count > 0:
            raise DependencyError(
                account_delete_blocked(account_id, transaction_count, reconciliation_count)
            )

        self.db.delete_account(company_id, account_id)
        logger.info("Deleted account %s", account_id)

    def expected_balance(self, company_id: int, account_id: int) -> Decimal:
        """Recompute the balance from the initial balance and confirmed transactions."""
        account = self.require_account(company_id, account_id)
        confirmed = self.db.list_transactions(
            company_id, account_id=account_id, status=TransactionStatus.CONFIRMED.value
        )
        return account.initial_balance + sum(
            (signed_value(txn.type, txn.value) for txn in confirmed), Decimal("0")
        )
