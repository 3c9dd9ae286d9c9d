"""Tests for the period financial summary."""

from datetime import date
from decimal import Decimal

import pytest

from cashbook.domain.errors import ValidationError

COMPANY_ID = 1


@pytest.fixture
def january(transaction_service, confirmed_history, sample_charts):
    transaction_service.create_transaction(
        COMPANY_ID,
        confirmed_history.id,
        "expense",
        date(2024, 1, 12),
        Decimal("200.00"),
        status="confirmed",
        chart_account_id=sample_charts["materials"],
    )
    transaction_service.create_transaction(
        COMPANY_ID, confirmed_history.id, "expense", date(2024, 1, 13), Decimal("15.00"), status="confirmed"
    )
    transaction_service.create_transaction(
        COMPANY_ID, confirmed_history.id, "transfer", date(2024, 1, 14), Decimal("50.00"), status="confirmed"
    )
    # Forecasts are left out
    transaction_service.create_transaction(
        COMPANY_ID, confirmed_history.id, "income", date(2024, 1, 30), Decimal("999.00")
    )
    return "2024-01"


def test_totals_and_margin(summary_service, january):
    report = summary_service.build_period_summary(COMPANY_ID, january)

    assert report.start_date == date(2024, 1, 1)
    assert report.end_date == date(2024, 1, 31)
    assert report.total_income == Decimal("2001.00")
    assert report.total_expenses == Decimal("1015.00")
    assert report.result == Decimal("986.00")
    assert report.operating_margin == Decimal("49.3")
    assert report.transaction_count == 5
    assert report.income_count == 1
    assert report.expense_count == 3


def test_breakdowns(summary_service, january):
    report = summary_service.build_period_summary(COMPANY_ID, january)

    assert report.income_by_category == {"Sales": Decimal("2001.00")}
    assert report.expenses_by_category == {
        "Rent": Decimal("800.00"),
        "Materials": Decimal("200.00"),
        "Other": Decimal("15.00"),
    }
    assert report.expenses_by_type == {
        "expense": Decimal("800.00"),
        "cost": Decimal("200.00"),
        "unclassified": Decimal("15.00"),
    }


def test_account_balances(summary_service, account_service, january):
    report = summary_service.build_period_summary(COMPANY_ID, january)

    (balance,) = report.account_balances
    account = account_service.list_accounts(COMPANY_ID)[0]
    assert balance.name == "Main Checking"
    assert balance.current_balance == account.current_balance


def test_empty_period(summary_service, confirmed_history):
    with pytest.raises(ValidationError, match="No confirmed transactions"):
        summary_service.build_period_summary(COMPANY_ID, "2023-12")


def test_invalid_period(summary_service):
    with pytest.raises(ValidationError, match="YYYY-MM"):
        summary_service.build_period_summary(COMPANY_ID, "January")


def test_margin_without_income(summary_service, transaction_service, sample_account):
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "expense", date(2024, 2, 1), Decimal("10"), status="confirmed"
    )
    report = summary_service.build_period_summary(COMPANY_ID, "2024-02")
    assert report.operating_margin == Decimal("0")
    assert report.result == Decimal("-10")
