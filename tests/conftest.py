"""Shared pytest fixtures for cashbook tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from cashbook.database.factories import create_sqlite_database
from cashbook.domain.account import AccountService
from cashbook.domain.chart_of_accounts import ChartOfAccountsService
from cashbook.domain.cost_center import CostCenterService
from cashbook.domain.projection import ProjectionService
from cashbook.domain.reconciliation import ReconciliationService
from cashbook.domain.summary import FinancialSummaryService
from cashbook.domain.transaction import TransactionService

COMPANY_ID = 1
OTHER_COMPANY_ID = 2


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_id():
    return COMPANY_ID


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def chart_service(temp_db):
    return ChartOfAccountsService(temp_db)


@pytest.fixture
def cost_center_service(temp_db):
    return CostCenterService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    return ReconciliationService(temp_db)


@pytest.fixture
def projection_service(temp_db):
    return ProjectionService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    return FinancialSummaryService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """A bank account opening at 1000.00."""
    account_id = account_service.create_account(
        COMPANY_ID, name="Main Checking", kind="bank", initial_balance=Decimal("1000.00")
    )
    return account_service.get_account(COMPANY_ID, account_id)


@pytest.fixture
def sample_charts(chart_service):
    """A small chart of accounts keyed by short name."""
    revenue = chart_service.create_chart_account(COMPANY_ID, "3", "Revenue", type="revenue")
    sales = chart_service.create_chart_account(COMPANY_ID, "3.1", "Sales", parent_id=revenue)
    expenses = chart_service.create_chart_account(COMPANY_ID, "4", "Expenses", type="expense")
    rent = chart_service.create_chart_account(COMPANY_ID, "4.1", "Rent", parent_id=expenses)
    costs = chart_service.create_chart_account(COMPANY_ID, "5", "Costs", type="cost")
    materials = chart_service.create_chart_account(COMPANY_ID, "5.1", "Materials", parent_id=costs)
    return {
        "revenue": revenue,
        "sales": sales,
        "expenses": expenses,
        "rent": rent,
        "costs": costs,
        "materials": materials,
    }


@pytest.fixture
def confirmed_history(transaction_service, sample_account, sample_charts):
    """Monthly rent and sales over the quarter before 2024-04-01."""
    for month in (1, 2, 3):
        transaction_service.create_transaction(
            COMPANY_ID,
            account_id=sample_account.id,
            type="expense",
            date=date(2024, month, 5),
            value=Decimal("800.00"),
            status="confirmed",
            chart_account_id=sample_charts["rent"],
            description="Office rent",
        )
        transaction_service.create_transaction(
            COMPANY_ID,
            account_id=sample_account.id,
            type="income",
            date=date(2024, month, 20),
            value=Decimal("2000.00") + month,
            status="confirmed",
            chart_account_id=sample_charts["sales"],
            description="Monthly sales",
        )
    return sample_account


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
