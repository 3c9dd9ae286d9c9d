"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly; services only need the Database type for hints.
from cashbook.domain.entities import (
    Account,
    BankReconciliation,
    CashFlowProjection,
    ChartAccount,
    CostCenter,
    CostCenterUsage,
    ReconciliationDetail,
    ReconciliationItem,
    Transaction,
    TransactionDetail,
)


class Database(ABC):
    """Abstract database interface for cashbook.

    Every method takes the owning company id; rows of other companies are
    invisible. Mutating methods commit immediately unless they run inside
    :meth:`unit_of_work`, in which case everything is committed together on
    exit and rolled back together on error.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group several mutations into one atomic commit."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self, company_id: int, name: str, kind: str, initial_balance: Decimal
    ) -> int:
        """Create a new account with current balance = initial balance. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, company_id: int, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, company_id: int) -> list[Account]:
        """List all accounts of a company."""
        pass

    @abstractmethod
    def update_account(
        self, company_id: int, account_id: int, name: str, kind: str, initial_balance: Decimal
    ) -> None:
        """Update account name, kind and initial balance."""
        pass

    @abstractmethod
    def adjust_account_balance(self, company_id: int, account_id: int, delta: Decimal) -> None:
        """Add delta to the account's current balance."""
        pass

    @abstractmethod
    def delete_account(self, company_id: int, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, company_id: int, account_id: int) -> int:
        """Get count of transactions on an account."""
        pass

    @abstractmethod
    def get_account_reconciliation_count(self, company_id: int, account_id: int) -> int:
        """Get count of reconciliations on an account."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        company_id: int,
        account_id: int,
        type: str,
        date: date,
        value: Decimal,
        status: str,
        chart_account_id: Optional[int] = None,
        cost_center_id: Optional[int] = None,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(
        self, company_id: int, transaction_id: int, for_update: bool = False
    ) -> Optional[Transaction]:
        """Get transaction by ID, optionally locking the row."""
        pass

    @abstractmethod
    def set_transaction_status(
        self,
        company_id: int,
        transaction_id: int,
        status: str,
        expected_status: Optional[str] = None,
    ) -> None:
        """Update transaction status.

        With expected_status the row is only updated while it still holds
        that status; otherwise IntegrityError is raised.
        """
        pass

    @abstractmethod
    def delete_transaction(
        self, company_id: int, transaction_id: int, expected_status: Optional[str] = None
    ) -> None:
        """Delete a transaction, guarded by expected_status like set_transaction_status."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        company_id: int,
        account_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first."""
        pass

    @abstractmethod
    def list_transaction_details(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        status: Optional[str] = None,
        type: Optional[str] = None,
    ) -> list[TransactionDetail]:
        """List transactions joined with account, chart account and cost center names."""
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_chart_account(
        self,
        company_id: int,
        code: str,
        name: str,
        stored_type: str,
        parent_id: Optional[int],
        description: str,
    ) -> int:
        """Create a chart account. Returns chart account ID."""
        pass

    @abstractmethod
    def get_chart_account(self, company_id: int, chart_account_id: int) -> Optional[ChartAccount]:
        """Get chart account by ID."""
        pass

    @abstractmethod
    def list_chart_accounts(self, company_id: int) -> list[ChartAccount]:
        """List chart accounts ordered by code."""
        pass

    @abstractmethod
    def update_chart_account(
        self,
        company_id: int,
        chart_account_id: int,
        code: str,
        name: str,
        stored_type: str,
        parent_id: Optional[int],
        description: str,
    ) -> None:
        """Update all editable chart account fields."""
        pass

    @abstractmethod
    def delete_chart_account(self, company_id: int, chart_account_id: int) -> None:
        """Delete a chart account."""
        pass

    @abstractmethod
    def get_chart_account_transaction_count(self, company_id: int, chart_account_id: int) -> int:
        """Get count of transactions referencing a chart account."""
        pass

    # Cost center operations
    @abstractmethod
    def create_cost_center(
        self, company_id: int, code: str, name: str, description: Optional[str] = None
    ) -> int:
        """Create a cost center. Returns cost center ID."""
        pass

    @abstractmethod
    def get_cost_center(self, company_id: int, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID."""
        pass

    @abstractmethod
    def list_cost_centers(self, company_id: int) -> list[CostCenter]:
        """List cost centers ordered by code."""
        pass

    @abstractmethod
    def update_cost_center(
        self,
        company_id: int,
        cost_center_id: int,
        code: str,
        name: str,
        description: Optional[str],
        is_active: bool,
    ) -> None:
        """Update cost center fields."""
        pass

    @abstractmethod
    def delete_cost_center(self, company_id: int, cost_center_id: int) -> None:
        """Delete a cost center."""
        pass

    @abstractmethod
    def get_cost_center_transaction_count(self, company_id: int, cost_center_id: int) -> int:
        """Get count of transactions referencing a cost center."""
        pass

    @abstractmethod
    def get_cost_center_usage(self, company_id: int) -> list[CostCenterUsage]:
        """Get transaction count and expense total per cost center."""
        pass

    # Reconciliation operations
    @abstractmethod
    def create_reconciliation(
        self,
        company_id: int,
        account_id: int,
        reconciliation_date: date,
        statement_balance: Decimal,
        book_balance: Decimal,
        difference: Decimal,
        status: str,
        notes: Optional[str] = None,
    ) -> int:
        """Create a reconciliation header. Returns reconciliation ID."""
        pass

    @abstractmethod
    def get_reconciliation(
        self, company_id: int, reconciliation_id: int
    ) -> Optional[BankReconciliation]:
        """Get reconciliation by ID."""
        pass

    @abstractmethod
    def list_reconciliations(self, company_id: int) -> list[ReconciliationDetail]:
        """List reconciliations with account names, newest date first."""
        pass

    @abstractmethod
    def set_reconciliation_status(self, company_id: int, reconciliation_id: int, status: str) -> None:
        """Update reconciliation status."""
        pass

    @abstractmethod
    def delete_reconciliation(self, company_id: int, reconciliation_id: int) -> None:
        """Delete a reconciliation header (items must be removed first)."""
        pass

    @abstractmethod
    def create_reconciliation_item(
        self,
        company_id: int,
        reconciliation_id: int,
        description: str,
        value: Decimal,
        origin: str,
        transaction_id: Optional[int] = None,
        date: Optional[date] = None,
    ) -> int:
        """Create an unreconciled item. Returns item ID."""
        pass

    @abstractmethod
    def get_reconciliation_item(self, company_id: int, item_id: int) -> Optional[ReconciliationItem]:
        """Get reconciliation item by ID."""
        pass

    @abstractmethod
    def list_reconciliation_items(
        self, company_id: int, reconciliation_id: int, reconciled: Optional[bool] = None
    ) -> list[ReconciliationItem]:
        """List items ordered by origin then value descending."""
        pass

    @abstractmethod
    def set_reconciliation_item_reconciled(
        self, company_id: int, item_id: int, reconciled: bool
    ) -> None:
        """Set the reconciled flag on an item."""
        pass

    @abstractmethod
    def delete_reconciliation_items(self, company_id: int, reconciliation_id: int) -> int:
        """Delete every item of a reconciliation. Returns count."""
        pass

    @abstractmethod
    def sum_reconciled_item_values(self, company_id: int, reconciliation_id: int) -> Decimal:
        """Sum the signed values of reconciled items."""
        pass

    # Projection operations
    @abstractmethod
    def create_projection(
        self,
        company_id: int,
        date: date,
        description: str,
        type: str,
        projected_value: Decimal,
        chart_account_id: Optional[int] = None,
        account_id: Optional[int] = None,
        is_recurring: bool = False,
        recurrence_pattern: Optional[str] = None,
    ) -> int:
        """Create a projection. Returns projection ID."""
        pass

    @abstractmethod
    def get_projection(self, company_id: int, projection_id: int) -> Optional[CashFlowProjection]:
        """Get projection by ID."""
        pass

    @abstractmethod
    def list_projections(
        self,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CashFlowProjection]:
        """List projections, latest date first."""
        pass

    @abstractmethod
    def update_projection(
        self,
        company_id: int,
        projection_id: int,
        date: date,
        description: str,
        type: str,
        projected_value: Decimal,
        actual_value: Optional[Decimal],
        chart_account_id: Optional[int],
        account_id: Optional[int],
        is_recurring: bool,
        recurrence_pattern: Optional[str],
    ) -> None:
        """Replace all editable projection fields."""
        pass

    @abstractmethod
    def delete_projection(self, company_id: int, projection_id: int) -> None:
        """Delete a projection."""
        pass

    @abstractmethod
    def projection_exists(
        self,
        company_id: int,
        start_date: date,
        end_date: date,
        type: str,
        chart_account_id: Optional[int],
    ) -> bool:
        """Check for a projection in a date range with the same type and chart account."""
        pass
