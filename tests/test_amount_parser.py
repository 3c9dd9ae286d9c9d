"""Tests for amount parsing helpers."""

import pytest
from decimal import Decimal
from cashbook.utils.amount_parser import parse_amount, parse_statement_amount


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("R$ 99.90", Decimal("99.90")),
        ("(50.00)", Decimal("-50.00")),
    ],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_amount_rejects_garbage():
    with pytest.raises(ValueError):
        parse_amount("")
    with pytest.raises(ValueError):
        parse_amount("twelve")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-150.00", Decimal("-150.00")),
        ("300,50", Decimal("300.50")),
        ("1.234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ('"R$ -12,00"', Decimal("-12.00")),
    ],
)
def test_parse_statement_amount(raw, expected):
    assert parse_statement_amount(raw) == expected


def test_parse_statement_amount_rejects_empty():
    with pytest.raises(ValueError):
        parse_statement_amount("n/a")
