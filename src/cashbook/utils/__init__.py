"""Utility functions for cashbook."""

from cashbook.utils.date_parser import parse_date, parse_period, month_bounds
from cashbook.utils.amount_parser import parse_amount, parse_statement_amount

__all__ = ["parse_date", "parse_period", "month_bounds", "parse_amount", "parse_statement_amount"]
