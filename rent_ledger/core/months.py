"""Calendar-month helpers. Month keys are ``YYYY-MM`` strings."""

import calendar
import re
from datetime import date
from typing import Iterator

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_start(value: date) -> date:
    """Normalize a date to the first day of its month"""
    return value.replace(day=1)


def month_key(value: date) -> str:
    """Format a date as its YYYY-MM month key"""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> date:
    """
    Parse a YYYY-MM month key into the first day of that month.

    Raises:
        ValueError: If the key is not a valid month
    """
    if not MONTH_KEY_PATTERN.match(key):
        raise ValueError(f"Invalid month '{key}', expected YYYY-MM")
    year, month = key.split("-")
    return date(int(year), int(month), 1)


def add_months(value: date, months: int) -> date:
    """Shift a first-of-month date by a number of calendar months"""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month (may be negative)"""
    return (end.year - start.year) * 12 + (end.month - start.month)


def days_in_month(value: date) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def iter_month_keys(start: date, end: date) -> Iterator[str]:
    """Yield month keys from start's month through end's month, inclusive"""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield month_key(current)
        current = add_months(current, 1)
