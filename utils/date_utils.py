"""Calendar helpers for daily record keys."""

import calendar
import re
from datetime import date
from typing import List

from errors import InvalidInputError

_DATE_KEY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def date_key(day: date) -> str:
    """Format a date as a daily record key (YYYY-MM-DD)."""
    return day.strftime("%Y-%m-%d")


def parse_date_key(key: str) -> date:
    """
    Parse a daily record key.

    Args:
        key: Date string in YYYY-MM-DD format

    Returns:
        The calendar date

    Raises:
        InvalidInputError: If the key is not a well-formed calendar date
    """
    if not isinstance(key, str) or not _DATE_KEY_PATTERN.match(key):
        raise InvalidInputError(f"Malformed date key: {key!r}")
    try:
        return date.fromisoformat(key)
    except ValueError:
        raise InvalidInputError(f"Malformed date key: {key!r}") from None


def is_date_key(key: str) -> bool:
    """Check whether key is a well-formed daily record key."""
    try:
        parse_date_key(key)
    except InvalidInputError:
        return False
    return True


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_date_keys(year: int, month: int) -> List[str]:
    """All daily record keys of a month, in calendar order."""
    return [date_key(date(year, month, day)) for day in range(1, days_in_month(year, month) + 1)]
