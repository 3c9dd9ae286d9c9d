"""Tests for the chart of accounts classifier."""

from datetime import date
from decimal import Decimal

import pytest

from cashbook.domain.classification import (
    COST_MARKER,
    exposed_type,
    has_cost_marker,
    storage_fields,
    strip_cost_marker,
)
from cashbook.domain.entities import ChartAccountType
from cashbook.domain.errors import ConflictError, NotFoundError, ValidationError

COMPANY_ID = 1


def test_storage_fields_for_cost():
    assert storage_fields(ChartAccountType.COST, "Direct costs") == ("expense", "Direct costs [COST]")
    assert storage_fields(ChartAccountType.COST, None) == ("expense", "[COST]")
    assert storage_fields(ChartAccountType.COST, "Twice [COST] [COST]") == ("expense", "Twice [COST]")


def test_storage_fields_strips_marker_for_other_types():
    assert storage_fields(ChartAccountType.EXPENSE, "Direct [COST] costs") == ("expense", "Direct costs")
    assert storage_fields(ChartAccountType.ASSET, "[CUSTO]") == ("asset", "")


def test_exposed_type():
    assert exposed_type("expense", "Materials [COST]") == ChartAccountType.COST
    assert exposed_type("expense", "Legacy [CUSTO]") == ChartAccountType.COST
    assert exposed_type("expense", "Rent") == ChartAccountType.EXPENSE
    # Only expense rows can be costs
    assert exposed_type("revenue", "[COST]") == ChartAccountType.REVENUE


def test_marker_helpers():
    assert has_cost_marker("a [COST]")
    assert not has_cost_marker(None)
    assert strip_cost_marker("  [COST]  Freight ") == "Freight"


def test_cost_round_trip_keeps_single_marker(chart_service):
    chart_id = chart_service.create_chart_account(
        COMPANY_ID, "5", "Production", type="cost", description="Factory floor"
    )
    chart = chart_service.get_chart_account(COMPANY_ID, chart_id)
    assert chart.type == ChartAccountType.COST
    assert chart.description.count(COST_MARKER) == 1

    chart_service.update_chart_account(COMPANY_ID, chart_id, name="Production costs")
    chart_service.update_chart_account(COMPANY_ID, chart_id, description="Factory floor and tools")

    chart = chart_service.get_chart_account(COMPANY_ID, chart_id)
    assert chart.type == ChartAccountType.COST
    assert chart.name == "Production costs"
    assert chart.description.count(COST_MARKER) == 1
    assert chart.description.startswith("Factory floor and tools")


def test_switching_cost_to_expense_removes_marker(chart_service):
    chart_id = chart_service.create_chart_account(COMPANY_ID, "5", "Production", type="cost")

    chart_service.update_chart_account(COMPANY_ID, chart_id, type="expense")

    chart = chart_service.get_chart_account(COMPANY_ID, chart_id)
    assert chart.type == ChartAccountType.EXPENSE
    assert COST_MARKER not in chart.description


def test_legacy_marker_is_read_and_rewritten(temp_db, chart_service):
    chart_id = temp_db.create_chart_account(
        company_id=COMPANY_ID,
        code="6",
        name="Old costs",
        stored_type="expense",
        parent_id=None,
        description="Imported [CUSTO]",
    )
    assert chart_service.get_chart_account(COMPANY_ID, chart_id).type == ChartAccountType.COST

    chart_service.update_chart_account(COMPANY_ID, chart_id, name="Old production costs")

    chart = chart_service.get_chart_account(COMPANY_ID, chart_id)
    assert chart.type == ChartAccountType.COST
    assert chart.description == "Imported [COST]"


def test_list_filters_by_derived_type(chart_service, sample_charts):
    costs = chart_service.list_chart_accounts(COMPANY_ID, type="cost")
    assert {c.id for c in costs} == {sample_charts["costs"], sample_charts["materials"]}

    expenses = chart_service.list_chart_accounts(COMPANY_ID, type="expense")
    assert {c.id for c in expenses} == {sample_charts["expenses"], sample_charts["rent"]}


def test_joined_rows_and_direct_fetch_agree(chart_service, transaction_service, sample_account, sample_charts):
    transaction_service.create_transaction(
        COMPANY_ID,
        sample_account.id,
        "expense",
        date(2024, 1, 2),
        Decimal("10"),
        chart_account_id=sample_charts["materials"],
    )
    row = transaction_service.list_transactions(COMPANY_ID)[0]
    direct = chart_service.get_chart_account(COMPANY_ID, sample_charts["materials"])
    assert row.chart_account_type == direct.type == ChartAccountType.COST


def test_child_inherits_parent_type(chart_service, sample_charts):
    child = chart_service.get_chart_account(COMPANY_ID, sample_charts["materials"])
    assert child.type == ChartAccountType.COST
    assert child.parent_id == sample_charts["costs"]


def test_child_type_must_match_parent(chart_service, sample_charts):
    with pytest.raises(ValidationError, match="does not match parent"):
        chart_service.create_chart_account(
            COMPANY_ID, "3.2", "Services", type="expense", parent_id=sample_charts["revenue"]
        )


def test_top_level_requires_type(chart_service):
    with pytest.raises(ValidationError, match="Type is required"):
        chart_service.create_chart_account(COMPANY_ID, "9", "Misc")


def test_missing_parent_rejected(chart_service):
    with pytest.raises(ValidationError, match="Parent"):
        chart_service.create_chart_account(COMPANY_ID, "9.1", "Misc", type="asset", parent_id=404)


def test_cycle_is_rejected(chart_service, sample_charts):
    with pytest.raises(ValidationError, match="own ancestor"):
        chart_service.update_chart_account(
            COMPANY_ID, sample_charts["revenue"], parent_id=sample_charts["sales"]
        )
    with pytest.raises(ValidationError, match="own ancestor"):
        chart_service.update_chart_account(
            COMPANY_ID, sample_charts["revenue"], parent_id=sample_charts["revenue"]
        )


def test_preexisting_type_mismatch_is_tolerated(temp_db, chart_service, sample_charts):
    # Written before the editing rules existed
    child_id = temp_db.create_chart_account(
        company_id=COMPANY_ID,
        code="3.9",
        name="Misfiled",
        stored_type="asset",
        parent_id=sample_charts["revenue"],
        description="",
    )

    chart_service.update_chart_account(COMPANY_ID, child_id, name="Still misfiled")

    chart = chart_service.get_chart_account(COMPANY_ID, child_id)
    assert chart.name == "Still misfiled"
    assert chart.type == ChartAccountType.ASSET
    assert chart.parent_id == sample_charts["revenue"]


def test_delete_referenced_chart_account_conflicts(
    chart_service, transaction_service, sample_account, sample_charts
):
    txn_id = transaction_service.create_transaction(
        COMPANY_ID,
        sample_account.id,
        "expense",
        date(2024, 1, 2),
        Decimal("10"),
        chart_account_id=sample_charts["rent"],
    )

    with pytest.raises(ConflictError):
        chart_service.delete_chart_account(COMPANY_ID, sample_charts["rent"])

    assert chart_service.get_chart_account(COMPANY_ID, sample_charts["rent"]) is not None
    txn = transaction_service.get_transaction(COMPANY_ID, txn_id)
    assert txn.chart_account_id == sample_charts["rent"]


def test_delete_parent_leaves_dangling_pointer(chart_service, sample_charts):
    chart_service.delete_chart_account(COMPANY_ID, sample_charts["costs"])

    materials = chart_service.get_chart_account(COMPANY_ID, sample_charts["materials"])
    assert materials.parent_id == sample_charts["costs"]
    assert materials.type == ChartAccountType.COST

    roots = {node.id: node for node in chart_service.get_chart_tree(COMPANY_ID)}
    assert sample_charts["materials"] in roots
    assert roots[sample_charts["materials"]].parent_id is None


def test_delete_missing_chart_account(chart_service):
    with pytest.raises(NotFoundError):
        chart_service.delete_chart_account(COMPANY_ID, 404)


def test_tree_nests_children(chart_service, sample_charts):
    tree = chart_service.get_chart_tree(COMPANY_ID)
    by_id = {node.id: node for node in tree}

    assert set(by_id) == {sample_charts["revenue"], sample_charts["expenses"], sample_charts["costs"]}
    assert [child.id for child in by_id[sample_charts["revenue"]].children] == [sample_charts["sales"]]
    assert by_id[sample_charts["costs"]].children[0].type == ChartAccountType.COST


def test_dangling_parent_is_treated_as_no_parent(temp_db, chart_service):
    # Parent row removed outside the service
    orphan_id = temp_db.create_chart_account(
        company_id=COMPANY_ID,
        code="7.1",
        name="Orphan",
        stored_type="asset",
        parent_id=999,
        description="",
    )

    tree = chart_service.get_chart_tree(COMPANY_ID)
    assert [node.id for node in tree] == [orphan_id]
    assert tree[0].parent_id is None

    chart_service.update_chart_account(COMPANY_ID, orphan_id, name="Adopted")
    assert chart_service.get_chart_account(COMPANY_ID, orphan_id).parent_id is None
