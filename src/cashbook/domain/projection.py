"""Cash-flow projection domain service."""

import logging
from collections import Counter
from datetime import date as date_type, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from dateutil.relativedelta import relativedelta

from cashbook.domain.entities import (
    CashFlowProjection,
    ProjectionType,
    TransactionDetail,
    TransactionStatus,
    TransactionType,
)
from cashbook.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    chart_account_not_found,
    projection_not_found,
)
from cashbook.domain.validation import (
    coerce_date,
    coerce_decimal,
    parse_choice,
    require_positive,
    require_text,
)
from cashbook.utils.date_parser import clamp_day, month_bounds

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)

HISTORY_WINDOW_DAYS = 90
MIN_OCCURRENCES = 2
DEFAULT_PROJECTION_DAY = 15
RECURRENCE_PATTERN = "monthly, history-based"


def projection_type_for(txn_type: TransactionType) -> ProjectionType:
    """Income flows in; expenses and transfers flow out."""
    return ProjectionType.INFLOW if txn_type == TransactionType.INCOME else ProjectionType.OUTFLOW


def most_common_day(days: Iterable[int], default: int = DEFAULT_PROJECTION_DAY) -> int:
    """Return the most frequent day of month, smallest day on ties."""
    counts = Counter(days)
    if not counts:
        return default
    return min(counts, key=lambda day: (-counts[day], day))


def average_rounded(values: list[Decimal]) -> Decimal:
    """Mean of values rounded half-up to whole currency units."""
    mean = sum(values, Decimal("0")) / len(values)
    return mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class ProjectionService:
    """Service for cash-flow projections."""

    def __init__(
        self,
        db: "Database",
        window_days: int = HISTORY_WINDOW_DAYS,
        min_occurrences: int = MIN_OCCURRENCES,
    ):
        """Initialize projection service.

        Args:
            db: Database instance
            window_days: Days of history mined by generate_automatic
            min_occurrences: Smallest group size treated as recurring
        """
        self.db = db
        self.window_days = window_days
        self.min_occurrences = min_occurrences

    def list_projections(
        self,
        company_id: int,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
    ) -> list[CashFlowProjection]:
        return self.db.list_projections(company_id, start_date, end_date)

    def require_projection(self, company_id: int, projection_id: int) -> CashFlowProjection:
        projection = self.db.get_projection(company_id, projection_id)
        if projection is None:
            raise NotFoundError(projection_not_found(projection_id))
        return projection

    def create_projection(
        self,
        company_id: int,
        date: date_type | str,
        description: str,
        type: ProjectionType | str,
        projected_value: Decimal | int | str,
        chart_account_id: Optional[int] = None,
        account_id: Optional[int] = None,
        is_recurring: bool = False,
        recurrence_pattern: Optional[str] = None,
    ) -> int:
        """Create a manual projection.

        Returns:
            Projection ID

        Raises:
            ValidationError: If a field is invalid or a reference is missing
        """
        projection_date = coerce_date(date)
        projection_type = parse_choice(ProjectionType, type, "projection type")
        value = require_positive(projected_value, "projected value")
        self._check_references(company_id, chart_account_id, account_id)

        projection_id = self.db.create_projection(
            company_id=company_id,
            date=projection_date,
            description=require_text(description, "description"),
            type=projection_type.value,
            projected_value=value,
            chart_account_id=chart_account_id,
            account_id=account_id,
            is_recurring=is_recurring,
            recurrence_pattern=recurrence_pattern,
        )
        logger.info("Created projection %s", projection_id)
        return projection_id

    def update_projection(
        self,
        company_id: int,
        projection_id: int,
        date: Optional[date_type | str] = None,
        description: Optional[str] = None,
        type: Optional[ProjectionType | str] = None,
        projected_value: Optional[Decimal | int | str] = None,
        actual_value: Optional[Decimal | int | str] = None,
        chart_account_id: Optional[int] = None,
        account_id: Optional[int] = None,
        is_recurring: Optional[bool] = None,
        recurrence_pattern: Optional[str] = None,
        clear_actual_value: bool = False,
        clear_chart_account: bool = False,
        clear_account: bool = False,
    ) -> None:
        """Update the provided projection fields, typically the actual value.

        A None argument keeps the stored value; the clear_* flags set the
        matching optional field back to None.

        Raises:
            NotFoundError: If the projection does not exist
            ValidationError: If a new value is invalid
        """
        current = self.require_projection(company_id, projection_id)
        for field, value, clear in (
            ("actual_value", actual_value, clear_actual_value),
            ("chart_account_id", chart_account_id, clear_chart_account),
            ("account_id", account_id, clear_account),
        ):
            if clear and value is not None:
                raise ValidationError(f"Cannot both set and clear {field}")
        self._check_references(company_id, chart_account_id, account_id)

        new_actual = current.actual_value
        if clear_actual_value:
            new_actual = None
        elif actual_value is not None:
            new_actual = coerce_decimal(actual_value, "actual value")

        new_chart_account_id = current.chart_account_id
        if clear_chart_account:
            new_chart_account_id = None
        elif chart_account_id is not None:
            new_chart_account_id = chart_account_id

        new_account_id = current.account_id
        if clear_account:
            new_account_id = None
        elif account_id is not None:
            new_account_id = account_id

        self.db.update_projection(
            company_id=company_id,
            projection_id=projection_id,
            date=coerce_date(date) if date is not None else current.date,
            description=(
                require_text(description, "description")
                if description is not None
                else current.description
            ),
            type=(
                parse_choice(ProjectionType, type, "projection type").value
                if type is not None
                else current.type.value
            ),
            projected_value=(
                require_positive(projected_value, "projected value")
                if projected_value is not None
                else current.projected_value
            ),
            actual_value=new_actual,
            chart_account_id=new_chart_account_id,
            account_id=new_account_id,
            is_recurring=is_recurring if is_recurring is not None else current.is_recurring,
            recurrence_pattern=(
                recurrence_pattern if recurrence_pattern is not None else current.recurrence_pattern
            ),
        )
        logger.info("Updated projection %s", projection_id)

    def delete_projection(self, company_id: int, projection_id: int) -> None:
        self.require_projection(company_id, projection_id)
        self.db.delete_projection(company_id, projection_id)
        logger.info("Deleted projection %s", projection_id)

    def generate_automatic(
        self,
        company_id: int,
        target_month: Optional[date_type | str] = None,
        as_of: Optional[date_type] = None,
    ) -> int:
        """Project recurring entries for a month from recent confirmed history.

        Confirmed transactions from the trailing window are grouped by
        (type, chart account, account). Each group seen at least
        min_occurrences times yields one recurring projection valued at the
        rounded average, on the most frequent day of month. A group is
        skipped when the target month already holds a projection with the
        same type and chart account, so running twice creates nothing new.

        Args:
            company_id: Owning company
            target_month: Any day in the month to project (default: month after as_of)
            as_of: End of the history window (default: today)

        Returns:
            Number of projections created
        """
        as_of = as_of or date_type.today()
        if target_month is None:
            target = as_of + relativedelta(months=1)
        else:
            target = coerce_date(target_month, "target month")
        month_start, month_end = month_bounds(target)

        history = self.db.list_transaction_details(
            company_id,
            start_date=as_of - timedelta(days=self.window_days),
            end_date=as_of,
            status=TransactionStatus.CONFIRMED.value,
        )

        generated = 0
        with self.db.unit_of_work():
            for (txn_type, chart_account_id, account_id), rows in self._recurring_groups(history):
                projection_type = projection_type_for(txn_type)
                if self.db.projection_exists(
                    company_id, month_start, month_end, projection_type.value, chart_account_id
                ):
                    logger.debug(
                        "Projection for %s/%s already exists in %s",
                        projection_type.value,
                        chart_account_id,
                        month_start.strftime("%Y-%m"),
                    )
                    continue

                day = most_common_day(row.transaction.date.day for row in rows)
                label = rows[0].chart_account_name or "Transaction"
                self.db.create_projection(
                    company_id=company_id,
                    date=clamp_day(month_start.year, month_start.month, day),
                    description=f"{label} (automatic projection)",
                    type=projection_type.value,
                    projected_value=average_rounded([row.transaction.value for row in rows]),
                    chart_account_id=chart_account_id,
                    account_id=account_id,
                    is_recurring=True,
                    recurrence_pattern=RECURRENCE_PATTERN,
                )
                generated += 1

        logger.info(
            "Generated %d automatic projections for %s", generated, month_start.strftime("%Y-%m")
        )
        return generated

    def _recurring_groups(self, history: list[TransactionDetail]):
        """Groups with enough occurrences, most frequent first."""
        groups: dict[tuple, list[TransactionDetail]] = {}
        for row in history:
            txn = row.transaction
            key = (txn.type, txn.chart_account_id, txn.account_id)
            groups.setdefault(key, []).append(row)

        recurring = [
            (key, rows) for key, rows in groups.items() if len(rows) >= self.min_occurrences
        ]
        recurring.sort(
            key=lambda group: (
                -len(group[1]),
                group[0][0].value,
                group[0][1] or 0,
                group[0][2] or 0,
            )
        )
        return recurring

    def _check_references(
        self, company_id: int, chart_account_id: Optional[int], account_id: Optional[int]
    ) -> None:
        if chart_account_id is not None and self.db.get_chart_account(company_id, chart_account_id) is None:
            raise ValidationError(chart_account_not_found(chart_account_id))
        if account_id is not None and self.db.get_account(company_id, account_id) is None:
            raise ValidationError(account_not_found(account_id))
