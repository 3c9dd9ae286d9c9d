"""Tests for cash-flow projections and the recurring generator."""

from datetime import date
from decimal import Decimal

import pytest

from cashbook.domain.entities import ProjectionType
from cashbook.domain.errors import NotFoundError, ValidationError
from cashbook.domain.projection import (
    RECURRENCE_PATTERN,
    average_rounded,
    most_common_day,
)

COMPANY_ID = 1
OTHER_COMPANY_ID = 2
AS_OF = date(2024, 3, 31)


def test_most_common_day_prefers_smallest_on_tie():
    assert most_common_day([20, 3, 3, 20]) == 3
    assert most_common_day([28, 28, 1]) == 28
    assert most_common_day([]) == 15


def test_average_rounded_half_up():
    assert average_rounded([Decimal("2.50")]) == Decimal("3")
    assert average_rounded([Decimal("10.50"), Decimal("10.49")]) == Decimal("10")
    assert average_rounded([Decimal("2001"), Decimal("2002"), Decimal("2003")]) == Decimal("2002")


def test_generate_from_history(projection_service, confirmed_history, sample_charts):
    generated = projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF)

    assert generated == 2
    projections = {p.chart_account_id: p for p in projection_service.list_projections(COMPANY_ID)}

    rent = projections[sample_charts["rent"]]
    assert rent.date == date(2024, 4, 5)
    assert rent.type == ProjectionType.OUTFLOW
    assert rent.projected_value == Decimal("800")
    assert rent.account_id == confirmed_history.id
    assert rent.is_recurring is True
    assert rent.recurrence_pattern == RECURRENCE_PATTERN
    assert rent.description == "Rent (automatic projection)"

    sales = projections[sample_charts["sales"]]
    assert sales.date == date(2024, 4, 20)
    assert sales.type == ProjectionType.INFLOW
    assert sales.projected_value == Decimal("2002")


def test_generate_is_idempotent(projection_service, confirmed_history):
    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) > 0
    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) == 0
    assert len(projection_service.list_projections(COMPANY_ID)) == 2


def test_generate_for_explicit_month(projection_service, confirmed_history):
    assert projection_service.generate_automatic(COMPANY_ID, target_month=date(2024, 6, 1), as_of=AS_OF) == 2
    dates = {p.date for p in projection_service.list_projections(COMPANY_ID)}
    assert dates == {date(2024, 6, 5), date(2024, 6, 20)}


def test_generate_ignores_old_and_single_transactions(
    projection_service, transaction_service, sample_account
):
    # Outside the 90-day window
    for month in (9, 10):
        transaction_service.create_transaction(
            COMPANY_ID, sample_account.id, "expense", date(2023, month, 1), Decimal("10"), status="confirmed"
        )
    # Only one occurrence
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "income", date(2024, 3, 1), Decimal("10"), status="confirmed"
    )
    # Forecasts are not history
    for day in (1, 2):
        transaction_service.create_transaction(
            COMPANY_ID, sample_account.id, "expense", date(2024, 3, day), Decimal("10")
        )

    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) == 0


def test_generate_with_no_history_returns_zero(projection_service):
    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) == 0


def test_generated_day_is_clamped_to_month(projection_service, transaction_service, sample_account):
    for txn_date in (date(2024, 12, 31), date(2025, 1, 31)):
        transaction_service.create_transaction(
            COMPANY_ID, sample_account.id, "expense", txn_date, Decimal("99.99"), status="confirmed"
        )

    assert projection_service.generate_automatic(COMPANY_ID, as_of=date(2025, 1, 31)) == 1

    (projection,) = projection_service.list_projections(COMPANY_ID)
    assert projection.date == date(2025, 2, 28)
    assert projection.description == "Transaction (automatic projection)"
    assert projection.chart_account_id is None
    assert projection.projected_value == Decimal("100")


def test_uncategorized_group_is_idempotent(projection_service, transaction_service, sample_account):
    for day in (3, 17):
        transaction_service.create_transaction(
            COMPANY_ID, sample_account.id, "expense", date(2024, 3, day), Decimal("5"), status="confirmed"
        )

    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) == 1
    assert projection_service.generate_automatic(COMPANY_ID, as_of=AS_OF) == 0


def test_generation_scoped_by_company(projection_service, confirmed_history):
    assert projection_service.generate_automatic(OTHER_COMPANY_ID, as_of=AS_OF) == 0
    assert projection_service.list_projections(OTHER_COMPANY_ID) == []


def test_manual_projection_lifecycle(projection_service, sample_account):
    projection_id = projection_service.create_projection(
        COMPANY_ID,
        date="2024-05-10",
        description="Annual insurance",
        type="outflow",
        projected_value=Decimal("1200"),
        account_id=sample_account.id,
    )

    projection_service.update_projection(COMPANY_ID, projection_id, actual_value=Decimal("1185.40"))

    projection = projection_service.require_projection(COMPANY_ID, projection_id)
    assert projection.actual_value == Decimal("1185.40")
    assert projection.projected_value == Decimal("1200.00")
    assert projection.is_recurring is False

    projection_service.delete_projection(COMPANY_ID, projection_id)
    with pytest.raises(NotFoundError):
        projection_service.require_projection(COMPANY_ID, projection_id)


def test_update_can_clear_optional_fields(projection_service, sample_account, sample_charts):
    projection_id = projection_service.create_projection(
        COMPANY_ID,
        date="2024-05-10",
        description="Rent",
        type="outflow",
        projected_value=Decimal("800"),
        chart_account_id=sample_charts["rent"],
        account_id=sample_account.id,
    )
    projection_service.update_projection(COMPANY_ID, projection_id, actual_value=Decimal("790"))

    projection_service.update_projection(
        COMPANY_ID,
        projection_id,
        clear_actual_value=True,
        clear_chart_account=True,
        clear_account=True,
    )

    projection = projection_service.require_projection(COMPANY_ID, projection_id)
    assert projection.actual_value is None
    assert projection.chart_account_id is None
    assert projection.account_id is None
    assert projection.projected_value == Decimal("800.00")
    assert projection.description == "Rent"


def test_update_rejects_set_and_clear_together(projection_service):
    projection_id = projection_service.create_projection(
        COMPANY_ID, date(2024, 5, 1), "Fees", "outflow", Decimal("10")
    )

    with pytest.raises(ValidationError, match="actual_value"):
        projection_service.update_projection(
            COMPANY_ID, projection_id, actual_value=Decimal("9"), clear_actual_value=True
        )


def test_manual_projection_validation(projection_service):
    with pytest.raises(ValidationError, match="positive"):
        projection_service.create_projection(COMPANY_ID, date(2024, 5, 1), "Zero", "inflow", Decimal("0"))
    with pytest.raises(ValidationError, match="projection type"):
        projection_service.create_projection(COMPANY_ID, date(2024, 5, 1), "Odd", "sideways", Decimal("1"))
    with pytest.raises(ValidationError, match="not found"):
        projection_service.create_projection(
            COMPANY_ID, date(2024, 5, 1), "Ghost", "inflow", Decimal("1"), chart_account_id=404
        )


def test_list_projections_by_range(projection_service):
    for day in (1, 15, 30):
        projection_service.create_projection(
            COMPANY_ID, date(2024, 4, day), f"Day {day}", "inflow", Decimal("10")
        )

    listed = projection_service.list_projections(COMPANY_ID, date(2024, 4, 10), date(2024, 4, 30))
    assert [p.date for p in listed] == [date(2024, 4, 30), date(2024, 4, 15)]
