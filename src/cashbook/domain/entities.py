"""Domain model entities for cashbook.

These are pure data classes representing business concepts, independent of
database schema. Every entity carries the id of the company that owns it;
services never hand out rows belonging to another company.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountKind(str, Enum):
    """Kind of cash account."""

    WALLET = "wallet"
    BANK = "bank"
    CARD = "card"


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class TransactionStatus(str, Enum):
    """Posting status of a transaction."""

    FORECAST = "forecast"
    CONFIRMED = "confirmed"


class ChartAccountType(str, Enum):
    """Exposed classification of a chart account.

    COST is a subtype of EXPENSE; it is never stored as such.
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    COST = "cost"


class ReconciliationStatus(str, Enum):
    """Reconciliation state. RECONCILED is terminal."""

    PENDING = "pending"
    RECONCILED = "reconciled"


class ItemOrigin(str, Enum):
    """Where a reconciliation item came from."""

    STATEMENT = "statement"
    SYSTEM = "system"
    ADJUSTMENT = "adjustment"


class ProjectionType(str, Enum):
    """Cash-flow direction of a projection."""

    INFLOW = "inflow"
    OUTFLOW = "outflow"


@dataclass(frozen=True)
class Account:
    """Cash account domain entity."""

    id: int
    company_id: int
    name: str
    kind: AccountKind
    initial_balance: Decimal
    current_balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity. ``value`` is always a positive magnitude."""

    id: int
    company_id: int
    account_id: int
    type: TransactionType
    date: date
    value: Decimal
    status: TransactionStatus
    chart_account_id: Optional[int]
    cost_center_id: Optional[int]
    description: Optional[str]
    payment_method: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TransactionDetail:
    """Transaction joined with the names of everything it references."""

    transaction: Transaction
    account_name: Optional[str]
    chart_account_name: Optional[str]
    chart_account_type: Optional[ChartAccountType]
    cost_center_name: Optional[str]


@dataclass(frozen=True)
class ChartAccount:
    """Chart of accounts node. ``type`` is the exposed (derived) type."""

    id: int
    company_id: int
    code: str
    name: str
    type: ChartAccountType
    parent_id: Optional[int]
    description: str
    created_at: datetime


@dataclass(frozen=True)
class ChartTreeNode:
    """Chart account node with nested children for tree output."""

    id: int
    code: str
    name: str
    type: ChartAccountType
    parent_id: Optional[int]
    children: tuple["ChartTreeNode", ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CostCenter:
    """Cost center domain entity."""

    id: int
    company_id: int
    code: str
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class CostCenterUsage:
    """Usage statistics for one cost center."""

    cost_center_id: int
    transaction_count: int
    total_expenses: Decimal


@dataclass(frozen=True)
class BankReconciliation:
    """Bank reconciliation header.

    ``book_balance`` and ``difference`` are frozen when the reconciliation
    is opened and never recomputed.
    """

    id: int
    company_id: int
    account_id: int
    reconciliation_date: date
    statement_balance: Decimal
    book_balance: Decimal
    difference: Decimal
    status: ReconciliationStatus
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ReconciliationDetail:
    """Reconciliation header joined with its account name."""

    reconciliation: BankReconciliation
    account_name: Optional[str]


@dataclass(frozen=True)
class ReconciliationItem:
    """Line being matched inside a reconciliation. ``value`` is signed."""

    id: int
    company_id: int
    reconciliation_id: int
    transaction_id: Optional[int]
    date: Optional[date]
    description: str
    value: Decimal
    origin: ItemOrigin
    is_reconciled: bool


@dataclass(frozen=True)
class StatementLine:
    """One movement parsed from a bank statement file."""

    date: Optional[date]
    amount: Decimal
    memo: str


@dataclass(frozen=True)
class CashFlowProjection:
    """Forecasted cash-flow entry."""

    id: int
    company_id: int
    date: date
    description: str
    type: ProjectionType
    projected_value: Decimal
    actual_value: Optional[Decimal]
    chart_account_id: Optional[int]
    account_id: Optional[int]
    is_recurring: bool
    recurrence_pattern: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class AccountBalance:
    """Name and current balance of an account, for summaries."""

    account_id: int
    name: str
    current_balance: Decimal


@dataclass(frozen=True)
class FinancialSummary:
    """Numeric summary of one month, the input for narrative generation."""

    period: str
    start_date: date
    end_date: date
    total_income: Decimal
    total_expenses: Decimal
    result: Decimal
    operating_margin: Decimal
    transaction_count: int
    income_count: int
    expense_count: int
    income_by_category: dict[str, Decimal]
    expenses_by_category: dict[str, Decimal]
    expenses_by_type: dict[str, Decimal]
    account_balances: tuple[AccountBalance, ...]
