"""Financial summary domain service.

Builds the numeric monthly summary (totals, breakdowns and balances) that
report renderers and narrative generators consume.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from cashbook.domain.entities import (
    AccountBalance,
    FinancialSummary,
    TransactionDetail,
    TransactionStatus,
    TransactionType,
)
from cashbook.domain.errors import ValidationError
from cashbook.utils.date_parser import parse_period

if TYPE_CHECKING:
    from cashbook.database.base import Database

OTHER_CATEGORY = "Other"
UNCLASSIFIED_TYPE = "unclassified"


def _add(totals: dict[str, Decimal], key: str, value: Decimal) -> None:
    totals[key] = totals.get(key, Decimal("0")) + value


class FinancialSummaryService:
    """Service for period financial summaries."""

    def __init__(self, db: "Database"):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_period_summary(self, company_id: int, period: str) -> FinancialSummary:
        """Summarize the confirmed transactions of a YYYY-MM period.

        Income and expense breakdowns are keyed by chart account name
        ("Other" when unassigned); expenses are also split by the chart
        account's derived type, so cost and plain expense appear apart.
        Transfers count as transactions but not as income or expense.

        Raises:
            ValidationError: If the period is malformed or has no confirmed transactions
        """
        try:
            start_date, end_date = parse_period(period)
        except ValueError as e:
            raise ValidationError(str(e))

        rows = self.db.list_transaction_details(
            company_id,
            start_date=start_date,
            end_date=end_date,
            status=TransactionStatus.CONFIRMED.value,
        )
        if not rows:
            raise ValidationError(f"No confirmed transactions in {period}")

        income = [row for row in rows if row.transaction.type == TransactionType.INCOME]
        expenses = [row for row in rows if row.transaction.type == TransactionType.EXPENSE]

        total_income = self._total(income)
        total_expenses = self._total(expenses)
        result = total_income - total_expenses

        income_by_category: dict[str, Decimal] = {}
        for row in income:
            _add(income_by_category, row.chart_account_name or OTHER_CATEGORY, row.transaction.value)

        expenses_by_category: dict[str, Decimal] = {}
        expenses_by_type: dict[str, Decimal] = {}
        for row in expenses:
            _add(expenses_by_category, row.chart_account_name or OTHER_CATEGORY, row.transaction.value)
            type_key = row.chart_account_type.value if row.chart_account_type else UNCLASSIFIED_TYPE
            _add(expenses_by_type, type_key, row.transaction.value)

        if total_income > 0:
            margin = (result / total_income * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        else:
            margin = Decimal("0")

        balances = tuple(
            AccountBalance(account_id=account.id, name=account.name, current_balance=account.current_balance)
            for account in self.db.list_accounts(company_id)
        )

        return FinancialSummary(
            period=period,
            start_date=start_date,
            end_date=end_date,
            total_income=total_income,
            total_expenses=total_expenses,
            result=result,
            operating_margin=margin,
            transaction_count=len(rows),
            income_count=len(income),
            expense_count=len(expenses),
            income_by_category=income_by_category,
            expenses_by_category=expenses_by_category,
            expenses_by_type=expenses_by_type,
            account_balances=balances,
        )

    @staticmethod
    def _total(rows: list[TransactionDetail]) -> Decimal:
        return sum((row.transaction.value for row in rows), Decimal("0"))
