"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic. Chart account types are always
derived here, so a direct fetch and a joined report row classify an account
the same way.
"""

from decimal import Decimal
from typing import Optional

from cashbook.domain import entities as domain
from cashbook.domain.classification import exposed_type
from cashbook.database.models import (
    Account as ORMAccount,
    ChartAccount as ORMChartAccount,
    CostCenter as ORMCostCenter,
    Transaction as ORMTransaction,
    BankReconciliation as ORMBankReconciliation,
    ReconciliationItem as ORMReconciliationItem,
    CashFlowProjection as ORMCashFlowProjection,
)


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _optional_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return _decimal(value)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        name=orm_account.name,
        kind=domain.AccountKind(orm_account.kind),
        initial_balance=_decimal(orm_account.initial_balance),
        current_balance=_decimal(orm_account.current_balance),
        created_at=orm_account.created_at,
    )


def chart_account_to_domain(orm_chart: ORMChartAccount) -> domain.ChartAccount:
    """Convert SQLAlchemy ChartAccount model to domain ChartAccount entity."""
    return domain.ChartAccount(
        id=orm_chart.id,
        company_id=orm_chart.company_id,
        code=orm_chart.code,
        name=orm_chart.name,
        type=exposed_type(orm_chart.type, orm_chart.description),
        parent_id=orm_chart.parent_id,
        description=orm_chart.description or "",
        created_at=orm_chart.created_at,
    )


def cost_center_to_domain(orm_center: ORMCostCenter) -> domain.CostCenter:
    """Convert SQLAlchemy CostCenter model to domain CostCenter entity."""
    return domain.CostCenter(
        id=orm_center.id,
        company_id=orm_center.company_id,
        code=orm_center.code,
        name=orm_center.name,
        description=orm_center.description,
        is_active=bool(orm_center.is_active),
        created_at=orm_center.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        account_id=orm_transaction.account_id,
        type=domain.TransactionType(orm_transaction.type),
        date=orm_transaction.date,
        value=_decimal(orm_transaction.value),
        status=domain.TransactionStatus(orm_transaction.status),
        chart_account_id=orm_transaction.chart_account_id,
        cost_center_id=orm_transaction.cost_center_id,
        description=orm_transaction.description,
        payment_method=orm_transaction.payment_method,
        created_at=orm_transaction.created_at,
    )


def transaction_detail_to_domain(
    orm_transaction: ORMTransaction,
    orm_account: Optional[ORMAccount],
    orm_chart: Optional[ORMChartAccount],
    orm_center: Optional[ORMCostCenter],
) -> domain.TransactionDetail:
    """Convert one joined transaction row to a TransactionDetail."""
    chart_type = None
    if orm_chart is not None:
        chart_type = exposed_type(orm_chart.type, orm_chart.description)
    return domain.TransactionDetail(
        transaction=transaction_to_domain(orm_transaction),
        account_name=orm_account.name if orm_account is not None else None,
        chart_account_name=orm_chart.name if orm_chart is not None else None,
        chart_account_type=chart_type,
        cost_center_name=orm_center.name if orm_center is not None else None,
    )


def reconciliation_to_domain(
    orm_reconciliation: ORMBankReconciliation,
) -> domain.BankReconciliation:
    """Convert SQLAlchemy BankReconciliation model to domain entity."""
    return domain.BankReconciliation(
        id=orm_reconciliation.id,
        company_id=orm_reconciliation.company_id,
        account_id=orm_reconciliation.account_id,
        reconciliation_date=orm_reconciliation.reconciliation_date,
        statement_balance=_decimal(orm_reconciliation.statement_balance),
        book_balance=_decimal(orm_reconciliation.book_balance),
        difference=_decimal(orm_reconciliation.difference),
        status=domain.ReconciliationStatus(orm_reconciliation.status),
        notes=orm_reconciliation.notes,
        created_at=orm_reconciliation.created_at,
    )


def reconciliation_item_to_domain(
    orm_item: ORMReconciliationItem,
) -> domain.ReconciliationItem:
    """Convert SQLAlchemy ReconciliationItem model to domain entity."""
    return domain.ReconciliationItem(
        id=orm_item.id,
        company_id=orm_item.company_id,
        reconciliation_id=orm_item.reconciliation_id,
        transaction_id=orm_item.transaction_id,
        date=orm_item.date,
        description=orm_item.description,
        value=_decimal(orm_item.value),
        origin=domain.ItemOrigin(orm_item.origin),
        is_reconciled=bool(orm_item.is_reconciled),
    )


def projection_to_domain(orm_projection: ORMCashFlowProjection) -> domain.CashFlowProjection:
    """Convert SQLAlchemy CashFlowProjection model to domain entity."""
    return domain.CashFlowProjection(
        id=orm_projection.id,
        company_id=orm_projection.company_id,
        date=orm_projection.date,
        description=orm_projection.description,
        type=domain.ProjectionType(orm_projection.type),
        projected_value=_decimal(orm_projection.projected_value),
        actual_value=_optional_decimal(orm_projection.actual_value),
        chart_account_id=orm_projection.chart_account_id,
        account_id=orm_projection.account_id,
        is_recurring=bool(orm_projection.is_recurring),
        recurrence_pattern=orm_projection.recurrence_pattern,
        created_at=orm_projection.created_at,
    )
