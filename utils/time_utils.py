"""Time parsing and formatting utilities for ttree."""

import math
import re
from typing import Optional


def _clamp_seconds(seconds) -> float:
    """Treat negative, non-numeric and non-finite input as zero."""
    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
        return 0.0
    if not math.isfinite(seconds) or seconds < 0:
        return 0.0
    return float(seconds)


def format_time(seconds: float) -> str:
    """
    Format seconds as a clock string.

    Returns "HH:MM:SS" with every component truncated toward zero. Hours are
    zero-padded to two digits and grow past two digits when needed.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted clock string, "00:00:00" for negative or non-finite input
    """
    total = int(_clamp_seconds(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_hours(seconds: float) -> str:
    """Format seconds as hours with one decimal place, e.g. "1.5"."""
    total = _clamp_seconds(seconds)
    if total == 0:
        return "0.0"
    return f"{total / 3600:.1f}"


def parse_hours(time_str: str) -> Optional[float]:
    """
    Parse a manual time entry into hours.

    Supports formats:
    - Plain number: "2" or "1.5" -> hours
    - Units: "90m" -> 1.5, "1h30m" -> 1.5, "45s" -> 0.0125

    Args:
        time_str: Time string to parse

    Returns:
        Number of hours, or None if parse fails
    """
    time_str = time_str.strip().lower()
    if not time_str:
        return None

    if re.fullmatch(r'\d*\.?\d+|\d+\.', time_str):
        return float(time_str)

    pattern = r'(?:(\d+(?:\.\d+)?)\s*(?:h|hr|hours?))?\s*(?:(\d+(?:\.\d+)?)\s*(?:m|min|minutes?))?\s*(?:(\d+(?:\.\d+)?)\s*(?:s|sec|seconds?))?'
    match = re.fullmatch(pattern, time_str)
    if not match or not any(match.groups()):
        return None

    hours_str, minutes_str, seconds_str = match.groups()
    total_seconds = 0.0
    if hours_str:
        total_seconds += float(hours_str) * 3600
    if minutes_str:
        total_seconds += float(minutes_str) * 60
    if seconds_str:
        total_seconds += float(seconds_str)
    return total_seconds / 3600


def parse_quantity(value: str) -> Optional[int]:
    """Parse a non-negative whole count, or None."""
    value = value.strip()
    if not re.fullmatch(r'\d+', value):
        return None
    return int(value)
