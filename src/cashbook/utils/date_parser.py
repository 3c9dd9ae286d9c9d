"""Date parsing utilities."""

import calendar
import re
from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")
_COMPACT_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative words: "today", "yesterday", "tomorrow", and "last/this/next
    month", which resolve to the first day of that month.

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this month": today.replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str, yearfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_compact_date(token: str) -> date:
    """Parse a YYYYMMDD token (trailing time or zone data is ignored).

    Raises:
        ValueError: If the token does not start with a valid 8-digit date
    """
    match = _COMPACT_PATTERN.match(token.strip())
    if match is None:
        raise ValueError(f"Not a YYYYMMDD date: '{token}'")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing day."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, moving day back to the month's last day when it overflows."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last_day)))


def parse_period(period: str) -> tuple[date, date]:
    """Parse a YYYY-MM period into its first and last day.

    Raises:
        ValueError: If period is not a valid YYYY-MM string
    """
    match = _PERIOD_PATTERN.match(period.strip())
    if match is None:
        raise ValueError(f"Invalid period '{period}'. Expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period '{period}'")
    return month_bounds(date(year, month, 1))
