"""Transaction domain service.

This service is the only code path that changes account balances as a side
effect of transactions. The balance of an account always equals its initial
balance plus the signed values of its confirmed transactions.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from cashbook.domain.entities import (
    TransactionDetail,
    TransactionStatus,
    TransactionType,
)
from cashbook.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    chart_account_not_found,
    cost_center_not_found,
    transaction_not_found,
)
from cashbook.domain.validation import coerce_date, parse_choice, require_positive

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)


def signed_value(txn_type: TransactionType, value: Decimal) -> Decimal:
    """Return the balance effect of a posted transaction: +value for income, -value otherwise."""
    return value if txn_type == TransactionType.INCOME else -value


def status_direction(old_status: TransactionStatus, new_status: TransactionStatus) -> int:
    """Return +1 when a transition posts a transaction, -1 when it unposts it, else 0."""
    if old_status == new_status:
        return 0
    return 1 if new_status == TransactionStatus.CONFIRMED else -1


def balance_delta(txn_type: TransactionType, value: Decimal, direction: int) -> Decimal:
    """Balance change for posting (direction=1) or unposting (direction=-1) a transaction."""
    return direction * signed_value(txn_type, value)


class TransactionService:
    """Service for managing transactions and their effect on balances."""

    def __init__(self, db: "Database"):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        company_id: int,
        account_id: Optional[int],
        type: TransactionType | str,
        date: date_type | str,
        value: Decimal | int | str,
        status: TransactionStatus | str = TransactionStatus.FORECAST,
        chart_account_id: Optional[int] = None,
        cost_center_id: Optional[int] = None,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        A confirmed transaction is stored and posted to its account in one
        unit of work.

        Args:
            company_id: Owning company
            account_id: Account the transaction belongs to
            type: income, expense or transfer
            date: Transaction date (date or parseable string)
            value: Positive magnitude
            status: forecast (default) or confirmed
            chart_account_id: Optional chart account
            cost_center_id: Optional cost center (expenses only)
            description: Optional description
            payment_method: Optional payment method

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the payload is invalid or a reference is missing
            IntegrityError: If the record and the balance could not be saved together
        """
        amount = require_positive(value, "value")
        txn_type = parse_choice(TransactionType, type, "transaction type")
        txn_status = parse_choice(TransactionStatus, status, "transaction status")
        txn_date = coerce_date(date)

        if account_id is None:
            raise ValidationError("Account is required")
        if self.db.get_account(company_id, account_id) is None:
            raise ValidationError(account_not_found(account_id))

        if chart_account_id is not None:
            if self.db.get_chart_account(company_id, chart_account_id) is None:
                raise ValidationError(chart_account_not_found(chart_account_id))

        if cost_center_id is not None:
            if txn_type != TransactionType.EXPENSE:
                raise ValidationError("Cost centers can only be assigned to expenses")
            center = self.db.get_cost_center(company_id, cost_center_id)
            if center is None:
                raise ValidationError(cost_center_not_found(cost_center_id))
            if not center.is_active:
                raise ValidationError(f"Cost center {cost_center_id} is inactive")

        with self.db.unit_of_work():
            transaction_id = self.db.create_transaction(
                company_id=company_id,
                account_id=account_id,
                type=txn_type.value,
                date=txn_date,
                value=amount,
                status=txn_status.value,
                chart_account_id=chart_account_id,
                cost_center_id=cost_center_id,
                description=description,
                payment_method=payment_method,
            )
            if txn_status == TransactionStatus.CONFIRMED:
                delta = balance_delta(txn_type, amount, 1)
                self.db.adjust_account_balance(company_id, account_id, delta)
                logger.info("Posted %s to account %s", delta, account_id)

        logger.info("Created transaction %s (%s)", transaction_id, txn_status.value)
        return transaction_id

    def get_transaction(self, company_id: int, transaction_id: int):
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(company_id, transaction_id)

    def update_status(
        self,
        company_id: int,
        transaction_id: int,
        new_status: TransactionStatus | str,
    ) -> bool:
        """Move a transaction between forecast and confirmed.

        The prior status is read from the store inside the same unit of work
        as the write, and the status UPDATE only matches while the row still
        holds that prior status. If another session got there first the unit
        is rolled back, so a delta is never applied twice.

        Returns:
            True if the status changed, False if it already had new_status

        Raises:
            NotFoundError: If the transaction does not exist
            ValidationError: If new_status is invalid
            IntegrityError: If the transaction changed after it was read
        """
        target = parse_choice(TransactionStatus, new_status, "transaction status")

        with self.db.unit_of_work():
            txn = self.db.get_transaction(company_id, transaction_id, for_update=True)
            if txn is None:
                raise NotFoundError(transaction_not_found(transaction_id))

            direction = status_direction(txn.status, target)
            if direction == 0:
                return False

            self.db.set_transaction_status(
                company_id, transaction_id, target.value, expected_status=txn.status.value
            )
            delta = balance_delta(txn.type, txn.value, direction)
            self.db.adjust_account_balance(company_id, txn.account_id, delta)

        logger.info(
            "Transaction %s: %s -> %s (balance %s on account %s)",
            transaction_id,
            txn.status.value,
            target.value,
            delta,
            txn.account_id,
        )
        return True

    def delete_transaction(self, company_id: int, transaction_id: int) -> None:
        """Delete a transaction, reversing its posting if it was confirmed.

        Raises:
            NotFoundError: If the transaction does not exist
            IntegrityError: If the reversal and the delete could not be saved together
        """
        with self.db.unit_of_work():
            txn = self.db.get_transaction(company_id, transaction_id, for_update=True)
            if txn is None:
                raise NotFoundError(transaction_not_found(transaction_id))

            if txn.status == TransactionStatus.CONFIRMED:
                self.db.adjust_account_balance(
                    company_id, txn.account_id, balance_delta(txn.type, txn.value, -1)
                )
            self.db.delete_transaction(
                company_id, transaction_id, expected_status=txn.status.value
            )

        logger.info("Deleted transaction %s", transaction_id)

    def list_transactions(
        self,
        company_id: int,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
        account_id: Optional[int] = None,
        status: Optional[TransactionStatus | str] = None,
        type: Optional[TransactionType | str] = None,
    ) -> list[TransactionDetail]:
        """List transactions with joined names, newest first."""
        status_value = None
        if status is not None:
            status_value = parse_choice(TransactionStatus, status, "transaction status").value
        type_value = None
        if type is not None:
            type_value = parse_choice(TransactionType, type, "transaction type").value

        return self.db.list_transaction_details(
            company_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            status=status_value,
            type=type_value,
        )
