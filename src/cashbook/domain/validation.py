"""Input validation helpers shared by the domain services."""

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, TypeVar

from cashbook.domain.errors import ValidationError
from cashbook.utils.date_parser import parse_date

E = TypeVar("E", bound=Enum)


def parse_choice(enum_cls: type[E], value: E | str, field_name: str) -> E:
    """Coerce a raw string (or enum member) into an enum member.

    Raises:
        ValidationError: If the value is not one of the enum's values
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}'. Expected one of: {allowed}")


def coerce_decimal(value, field_name: str) -> Decimal:
    """Normalize numeric input to Decimal."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field_name} '{value}'")


def require_positive(value, field_name: str) -> Decimal:
    """Return value as Decimal, rejecting zero, negatives and non-finite numbers."""
    amount = coerce_decimal(value, field_name)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name.capitalize()} must be positive, got {value}")
    return amount


def require_text(value: Optional[str], field_name: str) -> str:
    """Return stripped text, rejecting None and blank strings."""
    if value is None or not value.strip():
        raise ValidationError(f"{field_name.capitalize()} is required")
    return value.strip()


def coerce_date(value, field_name: str = "date") -> date:
    """Accept a date or a parseable date string."""
    if value is None:
        raise ValidationError(f"{field_name.capitalize()} is required")
    if isinstance(value, date):
        return value
    try:
        return parse_date(value)
    except ValueError as e:
        raise ValidationError(str(e))
