"""Domain layer for cashbook application."""

from cashbook.domain.account import AccountService
from cashbook.domain.chart_of_accounts import ChartOfAccountsService
from cashbook.domain.cost_center import CostCenterService
from cashbook.domain.projection import ProjectionService
from cashbook.domain.reconciliation import ReconciliationService
from cashbook.domain.statement_import import StatementImportService
from cashbook.domain.summary import FinancialSummaryService
from cashbook.domain.transaction import TransactionService

__all__ = [
    "AccountService",
    "TransactionService",
    "ChartOfAccountsService",
    "CostCenterService",
    "ReconciliationService",
    "StatementImportService",
    "ProjectionService",
    "FinancialSummaryService",
]
