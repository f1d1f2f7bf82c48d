"""Utility modules for ttree.

This package provides time formatting/parsing and calendar helpers.

Modules:
    time_utils: Clock and hour formatting, manual entry parsing
    date_utils: Daily record keys and month calendars
"""
from utils.time_utils import format_time, format_hours, parse_hours, parse_quantity
from utils.date_utils import date_key, parse_date_key, is_date_key, days_in_month, month_date_keys

__all__ = [
    "format_time",
    "format_hours",
    "parse_hours",
    "parse_quantity",
    "date_key",
    "parse_date_key",
    "is_date_key",
    "days_in_month",
    "month_date_keys",
]
