"""Bank reconciliation domain service.

A reconciliation freezes the gap between a bank statement balance and the
book balance of an account at the moment it is opened. Items (statement
lines, book transactions and manual adjustments) are then marked as
reconciled until the remaining difference reaches zero. Nothing here
changes account balances.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from cashbook.domain.entities import (
    BankReconciliation,
    ItemOrigin,
    ReconciliationDetail,
    ReconciliationItem,
    ReconciliationStatus,
    TransactionStatus,
)
from cashbook.domain.errors import (
    ConflictError,
    NotFoundError,
    account_not_found,
    reconciliation_already_completed,
    reconciliation_item_not_found,
    reconciliation_not_found,
)
from cashbook.domain.statement_import import StatementImportService
from cashbook.domain.transaction import signed_value
from cashbook.domain.validation import coerce_date, coerce_decimal, require_text

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")
START_BATCH_SIZE = 50


class ReconciliationService:
    """Service for bank reconciliations and their items."""

    def __init__(self, db: "Database", tolerance: Decimal = BALANCE_TOLERANCE):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            tolerance: Largest remaining difference still considered balanced
        """
        self.db = db
        self.tolerance = tolerance
        self.statement_import = StatementImportService(db)

    def list_reconciliations(self, company_id: int) -> list[ReconciliationDetail]:
        return self.db.list_reconciliations(company_id)

    def get_reconciliation(
        self, company_id: int, reconciliation_id: int
    ) -> Optional[BankReconciliation]:
        return self.db.get_reconciliation(company_id, reconciliation_id)

    def require_reconciliation(self, company_id: int, reconciliation_id: int) -> BankReconciliation:
        """Get reconciliation by ID or raise NotFoundError."""
        reconciliation = self.db.get_reconciliation(company_id, reconciliation_id)
        if reconciliation is None:
            raise NotFoundError(reconciliation_not_found(reconciliation_id))
        return reconciliation

    def open(
        self,
        company_id: int,
        account_id: int,
        reconciliation_date: date_type | str,
        statement_balance: Decimal | int | str,
        notes: Optional[str] = None,
    ) -> int:
        """Open a pending reconciliation for an account.

        The book balance is the account's current balance right now, and the
        difference (statement - book) is frozen with it.

        Returns:
            Reconciliation ID

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the date or balance is invalid
        """
        reconciliation_date = coerce_date(reconciliation_date, "reconciliation date")
        statement = coerce_decimal(statement_balance, "statement balance")

        with self.db.unit_of_work():
            account = self.db.get_account(company_id, account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            book = account.current_balance
            reconciliation_id = self.db.create_reconciliation(
                company_id=company_id,
                account_id=account_id,
                reconciliation_date=reconciliation_date,
                statement_balance=statement,
                book_balance=book,
                difference=statement - book,
                status=ReconciliationStatus.PENDING.value,
                notes=notes,
            )

        logger.info(
            "Opened reconciliation %s for account %s (difference %s)",
            reconciliation_id,
            account_id,
            statement - book,
        )
        return reconciliation_id

    def start(self, company_id: int, reconciliation_id: int, limit: int = START_BATCH_SIZE) -> int:
        """Add the latest confirmed transactions of the account as system items.

        Transactions dated after the reconciliation date are ignored, and a
        transaction that is already an item is not added again.

        Returns:
            Number of items created
        """
        reconciliation = self._require_pending(company_id, reconciliation_id)

        with self.db.unit_of_work():
            existing = {
                item.transaction_id
                for item in self.db.list_reconciliation_items(company_id, reconciliation_id)
                if item.transaction_id is not None
            }
            transactions = self.db.list_transactions(
                company_id,
                account_id=reconciliation.account_id,
                status=TransactionStatus.CONFIRMED.value,
                end_date=reconciliation.reconciliation_date,
                limit=limit,
            )
            created = 0
            for txn in transactions:
                if txn.id in existing:
                    continue
                self.db.create_reconciliation_item(
                    company_id=company_id,
                    reconciliation_id=reconciliation_id,
                    description=txn.description or "Transaction",
                    value=signed_value(txn.type, txn.value),
                    origin=ItemOrigin.SYSTEM.value,
                    transaction_id=txn.id,
                    date=txn.date,
                )
                created += 1

        logger.info("Reconciliation %s: %d system items added", reconciliation_id, created)
        return created

    def import_statement(
        self, company_id: int, reconciliation_id: int, filename: str, content: bytes | str
    ) -> int:
        """Import an OFX or delimited statement file. Returns count imported."""
        return self.statement_import.import_statement(
            company_id, reconciliation_id, filename, content
        )

    def list_items(
        self, company_id: int, reconciliation_id: int, reconciled: Optional[bool] = None
    ) -> list[ReconciliationItem]:
        self.require_reconciliation(company_id, reconciliation_id)
        return self.db.list_reconciliation_items(company_id, reconciliation_id, reconciled)

    def reconcile_item(self, company_id: int, item_id: int, reconciled: bool = True) -> None:
        """Set the reconciled flag of an item.

        Raises:
            NotFoundError: If the item does not exist
            ConflictError: If its reconciliation is already reconciled
        """
        item = self.db.get_reconciliation_item(company_id, item_id)
        if item is None:
            raise NotFoundError(reconciliation_item_not_found(item_id))
        self._require_pending(company_id, item.reconciliation_id)

        self.db.set_reconciliation_item_reconciled(company_id, item_id, reconciled)
        logger.info("Item %s reconciled=%s", item_id, reconciled)

    def add_adjustment(
        self,
        company_id: int,
        reconciliation_id: int,
        description: str,
        value: Decimal | int | str,
    ) -> int:
        """Add a manual adjustment item (bank fees, interest...). Returns item ID."""
        self._require_pending(company_id, reconciliation_id)
        item_id = self.db.create_reconciliation_item(
            company_id=company_id,
            reconciliation_id=reconciliation_id,
            description=require_text(description, "description"),
            value=coerce_decimal(value, "value"),
            origin=ItemOrigin.ADJUSTMENT.value,
        )
        logger.info("Reconciliation %s: adjustment item %s added", reconciliation_id, item_id)
        return item_id

    def remaining_difference(self, company_id: int, reconciliation_id: int) -> Decimal:
        """Frozen difference minus the sum of reconciled item values."""
        reconciliation = self.require_reconciliation(company_id, reconciliation_id)
        reconciled_total = self.db.sum_reconciled_item_values(company_id, reconciliation_id)
        return reconciliation.difference - reconciled_total

    def is_balanced(self, company_id: int, reconciliation_id: int) -> bool:
        return abs(self.remaining_difference(company_id, reconciliation_id)) <= self.tolerance

    def complete(
        self, company_id: int, reconciliation_id: int, require_balanced: bool = False
    ) -> None:
        """Mark a pending reconciliation as reconciled.

        Args:
            require_balanced: Refuse to complete while the remaining
                difference exceeds the tolerance

        Raises:
            NotFoundError: If the reconciliation does not exist
            ConflictError: If it is already reconciled, or not balanced when
                require_balanced is set
        """
        self._require_pending(company_id, reconciliation_id)

        if require_balanced:
            remaining = self.remaining_difference(company_id, reconciliation_id)
            if abs(remaining) > self.tolerance:
                raise ConflictError(
                    f"Reconciliation {reconciliation_id} is not balanced "
                    f"(remaining difference {remaining})"
                )

        self.db.set_reconciliation_status(
            company_id, reconciliation_id, ReconciliationStatus.RECONCILED.value
        )
        logger.info("Reconciliation %s completed", reconciliation_id)

    def delete(self, company_id: int, reconciliation_id: int) -> None:
        """Delete a reconciliation and all of its items, in either state."""
        self.require_reconciliation(company_id, reconciliation_id)
        with self.db.unit_of_work():
            removed = self.db.delete_reconciliation_items(company_id, reconciliation_id)
            self.db.delete_reconciliation(company_id, reconciliation_id)
        logger.info("Deleted reconciliation %s (%d items)", reconciliation_id, removed)

    def _require_pending(self, company_id: int, reconciliation_id: int) -> BankReconciliation:
        reconciliation = self.require_reconciliation(company_id, reconciliation_id)
        if reconciliation.status == ReconciliationStatus.RECONCILED:
            raise ConflictError(reconciliation_already_completed(reconciliation_id))
        return reconciliation
