"""Aggregation of recorded time (and quantities) over the task tree."""
import math
import time
from datetime import date
from typing import Callable, Dict, Optional

from models import Task, TaskType
from utils.date_utils import date_key, is_date_key, month_date_keys

# Seconds represented by one unit of a daily record value, per task type.
# Types missing from this table never contribute time.
SECONDS_PER_UNIT = {
    TaskType.MANUAL_TIME: 3600,
    TaskType.RECORD_TIME: 1,
}

DateFilter = Callable[[str], bool]


def _numeric(value) -> float:
    """Return value as a finite number, or 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return value if math.isfinite(value) else 0.0


def record_seconds(task_type: TaskType, value) -> float:
    """Interpret a daily record value of the given type as seconds."""
    factor = SECONDS_PER_UNIT.get(task_type)
    if factor is None:
        return 0.0
    return _numeric(value) * factor


def _live_seconds(task: Task, now: float, include_date: DateFilter) -> float:
    """Seconds of the running timer on task, if any and in range."""
    if task.task_type != TaskType.RECORD_TIME or not task.is_tracking or task.start_time is None:
        return 0.0
    if task.tracking_date is not None and not include_date(task.tracking_date):
        return 0.0
    return max(0.0, now - task.start_time)


def _aggregate(task: Task, now: float, include_date: DateFilter) -> float:
    if task.subtasks:
        return sum(_aggregate(child, now, include_date) for child in task.subtasks)

    total = sum(
        record_seconds(task.task_type, record.value)
        for key, record in task.daily_data.items()
        if include_date(key)
    )
    return total + _live_seconds(task, now, include_date)


def _all_dates(key: str) -> bool:
    return True


def aggregated_seconds(task: Task, now: Optional[float] = None) -> float:
    """
    Get the total recorded seconds of a task.

    Containers sum their children recursively. Leaves sum their daily records:
    manual-time values are hours, record-time values are seconds, every other
    type contributes 0. A record-time leaf with a running timer also counts the
    time elapsed since the timer started.

    Args:
        task: Task to aggregate
        now: Wall-clock POSIX time used for running timers. Sampled once when
            omitted, so a single call never mixes two clock readings.

    Returns:
        Total seconds (float)
    """
    if now is None:
        now = time.time()
    return _aggregate(task, now, _all_dates)


def seconds_on_date(task: Task, day: date, now: Optional[float] = None) -> float:
    """Total recorded seconds of a task on one calendar day."""
    if now is None:
        now = time.time()
    key = date_key(day)
    return _aggregate(task, now, lambda k: k == key)


def seconds_in_month(task: Task, year: int, month: int, now: Optional[float] = None) -> float:
    """Total recorded seconds of a task within a calendar month."""
    if now is None:
        now = time.time()
    prefix = f"{year:04d}-{month:02d}-"
    return _aggregate(task, now, lambda k: k.startswith(prefix) and is_date_key(k))


def seconds_in_year(task: Task, year: int, now: Optional[float] = None) -> float:
    """Total recorded seconds of a task within a calendar year."""
    if now is None:
        now = time.time()
    prefix = f"{year:04d}-"
    return _aggregate(task, now, lambda k: k.startswith(prefix) and is_date_key(k))


def daily_totals(task: Task, year: int, month: int, now: Optional[float] = None) -> Dict[str, float]:
    """
    Get recorded seconds for every day of a month.

    Returns:
        Dict mapping each date key of the month (in calendar order) to seconds,
        including days with nothing recorded (0.0)
    """
    if now is None:
        now = time.time()
    return {
        key: _aggregate(task, now, lambda k, key=key: k == key)
        for key in month_date_keys(year, month)
    }


def monthly_totals(task: Task, year: int, now: Optional[float] = None) -> Dict[int, float]:
    """Get recorded seconds for each month (1-12) of a year."""
    if now is None:
        now = time.time()
    return {month: seconds_in_month(task, year, month, now) for month in range(1, 13)}


def aggregated_quantity(task: Task) -> float:
    """
    Get the total count recorded by quantity tasks.

    Containers sum their children; quantity leaves sum their daily values;
    every other leaf contributes 0.
    """
    if task.subtasks:
        return sum(aggregated_quantity(child) for child in task.subtasks)
    if task.task_type != TaskType.QUANTITY:
        return 0
    return sum(_numeric(record.value) for record in task.daily_data.values())


def days_with_records(task: Task) -> int:
    """Number of distinct days holding a non-empty record anywhere in the subtree."""
    keys = set()

    def collect(node: Task) -> None:
        keys.update(key for key, record in node.daily_data.items() if not record.is_empty)
        for child in node.subtasks:
            collect(child)

    collect(task)
    return len(keys)
