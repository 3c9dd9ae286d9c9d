"""Tests for the bank reconciliation engine."""

from datetime import date
from decimal import Decimal

import pytest

from cashbook.domain.entities import ItemOrigin, ReconciliationStatus
from cashbook.domain.errors import ConflictError, NotFoundError, ParseError

COMPANY_ID = 1
OTHER_COMPANY_ID = 2


@pytest.fixture
def reconciliation(reconciliation_service, sample_account):
    """Pending reconciliation with statement 1120.00 against book 1000.00."""
    reconciliation_id = reconciliation_service.open(
        COMPANY_ID, sample_account.id, date(2024, 1, 31), Decimal("1120.00"), notes="January"
    )
    return reconciliation_service.get_reconciliation(COMPANY_ID, reconciliation_id)


def test_open_freezes_book_balance_and_difference(reconciliation):
    assert reconciliation.book_balance == Decimal("1000.00")
    assert reconciliation.statement_balance == Decimal("1120.00")
    assert reconciliation.difference == Decimal("120.00")
    assert reconciliation.status == ReconciliationStatus.PENDING
    assert reconciliation.notes == "January"


def test_difference_stays_frozen_after_new_transactions(
    reconciliation_service, transaction_service, reconciliation, sample_account
):
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "income", date(2024, 1, 20), Decimal("50"), status="confirmed"
    )

    again = reconciliation_service.get_reconciliation(COMPANY_ID, reconciliation.id)
    assert again.book_balance == Decimal("1000.00")
    assert again.difference == Decimal("120.00")


def test_open_unknown_account(reconciliation_service):
    with pytest.raises(NotFoundError):
        reconciliation_service.open(COMPANY_ID, 404, date(2024, 1, 31), Decimal("1"))


def test_remaining_difference_reaches_zero_and_complete(reconciliation_service, reconciliation):
    first = reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Deposit", Decimal("100.00"))
    second = reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Interest", Decimal("20.00"))

    assert reconciliation_service.remaining_difference(COMPANY_ID, reconciliation.id) == Decimal("120.00")

    reconciliation_service.reconcile_item(COMPANY_ID, first, True)
    reconciliation_service.reconcile_item(COMPANY_ID, second, True)

    remaining = reconciliation_service.remaining_difference(COMPANY_ID, reconciliation.id)
    assert abs(remaining) <= Decimal("0.01")
    assert reconciliation_service.is_balanced(COMPANY_ID, reconciliation.id)

    reconciliation_service.complete(COMPANY_ID, reconciliation.id, require_balanced=True)
    completed = reconciliation_service.get_reconciliation(COMPANY_ID, reconciliation.id)
    assert completed.status == ReconciliationStatus.RECONCILED

    with pytest.raises(ConflictError):
        reconciliation_service.complete(COMPANY_ID, reconciliation.id)


def test_complete_does_not_require_balance_by_default(reconciliation_service, reconciliation):
    reconciliation_service.complete(COMPANY_ID, reconciliation.id)
    assert (
        reconciliation_service.get_reconciliation(COMPANY_ID, reconciliation.id).status
        == ReconciliationStatus.RECONCILED
    )


def test_complete_can_enforce_balance(reconciliation_service, reconciliation):
    with pytest.raises(ConflictError, match="not balanced"):
        reconciliation_service.complete(COMPANY_ID, reconciliation.id, require_balanced=True)


def test_unmarking_restores_remaining_difference(reconciliation_service, reconciliation):
    item_id = reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Fee", Decimal("-5.00"))
    reconciliation_service.reconcile_item(COMPANY_ID, item_id, True)
    assert reconciliation_service.remaining_difference(COMPANY_ID, reconciliation.id) == Decimal("125.00")

    reconciliation_service.reconcile_item(COMPANY_ID, item_id, False)
    assert reconciliation_service.remaining_difference(COMPANY_ID, reconciliation.id) == Decimal("120.00")


def test_start_materializes_confirmed_transactions(
    reconciliation_service, transaction_service, account_service, sample_account, reconciliation
):
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "income", date(2024, 1, 10), Decimal("300"),
        status="confirmed", description="Invoice 12",
    )
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "expense", date(2024, 1, 15), Decimal("80"), status="confirmed"
    )
    # Forecast and future transactions stay out
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "expense", date(2024, 1, 16), Decimal("999")
    )
    transaction_service.create_transaction(
        COMPANY_ID, sample_account.id, "expense", date(2024, 2, 2), Decimal("7"), status="confirmed"
    )
    balance_before = account_service.get_account(COMPANY_ID, sample_account.id).current_balance

    created = reconciliation_service.start(COMPANY_ID, reconciliation.id)

    assert created == 2
    items = reconciliation_service.list_items(COMPANY_ID, reconciliation.id)
    assert {(item.description, item.value) for item in items} == {
        ("Invoice 12", Decimal("300.00")),
        ("Transaction", Decimal("-80.00")),
    }
    assert all(item.origin == ItemOrigin.SYSTEM and not item.is_reconciled for item in items)
    assert account_service.get_account(COMPANY_ID, sample_account.id).current_balance == balance_before

    # Running again adds nothing
    assert reconciliation_service.start(COMPANY_ID, reconciliation.id) == 0


def test_start_respects_limit(reconciliation_service, transaction_service, sample_account, reconciliation):
    for day in (1, 2, 3):
        transaction_service.create_transaction(
            COMPANY_ID, sample_account.id, "expense", date(2024, 1, day), Decimal("1"), status="confirmed"
        )

    assert reconciliation_service.start(COMPANY_ID, reconciliation.id, limit=2) == 2
    dates = sorted(item.date for item in reconciliation_service.list_items(COMPANY_ID, reconciliation.id))
    assert dates == [date(2024, 1, 2), date(2024, 1, 3)]


def test_reconciling_items_never_touches_balance(
    reconciliation_service, account_service, sample_account, reconciliation
):
    item_id = reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Fee", Decimal("-9.90"))
    reconciliation_service.reconcile_item(COMPANY_ID, item_id, True)
    assert account_service.get_account(COMPANY_ID, sample_account.id).current_balance == Decimal("1000.00")


def test_import_spec_delimited_lines(reconciliation_service, reconciliation):
    content = (
        "date,description,amount\n"
        "2024-01-05,Supplier Payment,-150.00\n"
        "2024-01-06,Customer Receipt,300,50\n"
    )

    imported = reconciliation_service.import_statement(COMPANY_ID, reconciliation.id, "january.csv", content)

    assert imported == 2
    items = reconciliation_service.list_items(COMPANY_ID, reconciliation.id)
    values = sorted(item.value for item in items)
    assert values == [Decimal("-150.00"), Decimal("300.50")]
    assert all(item.origin == ItemOrigin.STATEMENT for item in items)
    assert not any(item.is_reconciled for item in items)


def test_import_unsupported_extension(reconciliation_service, reconciliation):
    with pytest.raises(ParseError, match="Unsupported"):
        reconciliation_service.import_statement(COMPANY_ID, reconciliation.id, "statement.pdf", b"%PDF")
    assert reconciliation_service.list_items(COMPANY_ID, reconciliation.id) == []


def test_item_changes_rejected_after_completion(reconciliation_service, reconciliation):
    item_id = reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Fee", Decimal("-1"))
    reconciliation_service.complete(COMPANY_ID, reconciliation.id)

    with pytest.raises(ConflictError):
        reconciliation_service.reconcile_item(COMPANY_ID, item_id, True)
    with pytest.raises(ConflictError):
        reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Late", Decimal("1"))
    with pytest.raises(ConflictError):
        reconciliation_service.start(COMPANY_ID, reconciliation.id)
    with pytest.raises(ConflictError):
        reconciliation_service.import_statement(
            COMPANY_ID, reconciliation.id, "x.csv", "h\n2024-01-01,a,1\n"
        )


def test_delete_removes_items_in_any_state(reconciliation_service, temp_db, reconciliation):
    reconciliation_service.add_adjustment(COMPANY_ID, reconciliation.id, "Fee", Decimal("-1"))
    reconciliation_service.complete(COMPANY_ID, reconciliation.id)

    reconciliation_service.delete(COMPANY_ID, reconciliation.id)

    assert reconciliation_service.get_reconciliation(COMPANY_ID, reconciliation.id) is None
    assert temp_db.list_reconciliation_items(COMPANY_ID, reconciliation.id) == []


def test_reconciliation_scoped_by_company(reconciliation_service, reconciliation):
    assert reconciliation_service.get_reconciliation(OTHER_COMPANY_ID, reconciliation.id) is None
    with pytest.raises(NotFoundError):
        reconciliation_service.complete(OTHER_COMPANY_ID, reconciliation.id)
    with pytest.raises(NotFoundError):
        reconciliation_service.delete(OTHER_COMPANY_ID, reconciliation.id)


def test_list_reconciliations_includes_account_name(reconciliation_service, reconciliation):
    rows = reconciliation_service.list_reconciliations(COMPANY_ID)
    assert [row.reconciliation.id for row in rows] == [reconciliation.id]
    assert rows[0].account_name == "Main Checking"
