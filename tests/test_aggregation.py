"""Tests for time and quantity aggregation."""
import math
from datetime import date

from conftest import DAY, NEXT_DAY
from models import DailyRecord, Task, TaskType
from business_logic.aggregation import (
    aggregated_quantity,
    aggregated_seconds,
    daily_totals,
    days_with_records,
    monthly_totals,
    record_seconds,
    seconds_in_month,
    seconds_in_year,
    seconds_on_date,
)
from business_logic.tree_operations import find_task

NOW = 1_000_000.0


class TestRecordSeconds:
    """Test value interpretation per task type."""

    def test_manual_time_is_hours(self):
        assert record_seconds(TaskType.MANUAL_TIME, 1.5) == 5400

    def test_record_time_is_seconds(self):
        assert record_seconds(TaskType.RECORD_TIME, 42) == 42

    def test_other_types_contribute_nothing(self):
        assert record_seconds(TaskType.QUANTITY, 10) == 0
        assert record_seconds(TaskType.UNIQUE, 10) == 0

    def test_missing_or_bad_values_count_as_zero(self):
        assert record_seconds(TaskType.RECORD_TIME, None) == 0
        assert record_seconds(TaskType.RECORD_TIME, math.nan) == 0
        assert record_seconds(TaskType.RECORD_TIME, True) == 0


class TestAggregatedSeconds:
    """Test recursive totals."""

    def test_manual_time_hours_summed(self):
        task = Task(id="m", text="M", task_type=TaskType.MANUAL_TIME, daily_data={
            "2025-11-10": DailyRecord(value=2),
            "2025-11-11": DailyRecord(value=1.5),
        })
        assert aggregated_seconds(task, NOW) == 12600

    def test_container_sums_children(self, sample_tree):
        a = find_task((sample_tree.root,), "a")
        assert aggregated_seconds(a, NOW) == 900 + 5400
        assert aggregated_seconds(sample_tree.root, NOW) == 6300

    def test_empty_task_is_zero(self):
        assert aggregated_seconds(Task(id="x", text="X"), NOW) == 0

    def test_running_timer_adds_elapsed(self):
        task = Task(id="t", text="T", task_type=TaskType.RECORD_TIME,
                    daily_data={DAY: DailyRecord(value=100)},
                    is_tracking=True, start_time=NOW - 60, tracking_date=DAY)
        assert aggregated_seconds(task, NOW) == 160

    def test_running_timer_on_other_type_is_ignored(self):
        task = Task(id="t", text="T", task_type=TaskType.MANUAL_TIME,
                    is_tracking=True, start_time=NOW - 60, tracking_date=DAY)
        assert aggregated_seconds(task, NOW) == 0

    def test_clock_before_start_counts_zero(self):
        task = Task(id="t", text="T", task_type=TaskType.RECORD_TIME,
                    is_tracking=True, start_time=NOW + 60, tracking_date=DAY)
        assert aggregated_seconds(task, NOW) == 0


class TestDateRanges:
    """Test per-day, per-month and per-year totals."""

    def test_seconds_on_date(self, sample_tree):
        assert seconds_on_date(sample_tree.root, date(2025, 11, 10), NOW) == 600 + 5400
        assert seconds_on_date(sample_tree.root, date(2025, 11, 11), NOW) == 300
        assert seconds_on_date(sample_tree.root, date(2025, 11, 12), NOW) == 0

    def test_seconds_in_month_and_year(self, sample_tree):
        assert seconds_in_month(sample_tree.root, 2025, 11, NOW) == 6300
        assert seconds_in_month(sample_tree.root, 2025, 10, NOW) == 0
        assert seconds_in_year(sample_tree.root, 2025, NOW) == 6300
        assert seconds_in_year(sample_tree.root, 2024, NOW) == 0

    def test_live_time_only_counts_on_its_date(self):
        task = Task(id="t", text="T", task_type=TaskType.RECORD_TIME,
                    is_tracking=True, start_time=NOW - 30, tracking_date=NEXT_DAY)
        assert seconds_on_date(task, date(2025, 11, 10), NOW) == 0
        assert seconds_on_date(task, date(2025, 11, 11), NOW) == 30

    def test_daily_totals_cover_whole_month(self, sample_tree):
        totals = daily_totals(sample_tree.root, 2025, 11, NOW)
        assert len(totals) == 30
        assert list(totals)[0] == "2025-11-01"
        assert totals[DAY] == 6000
        assert totals[NEXT_DAY] == 300
        assert totals["2025-11-01"] == 0

    def test_monthly_totals(self, sample_tree):
        totals = monthly_totals(sample_tree.root, 2025, NOW)
        assert list(totals) == list(range(1, 13))
        assert totals[11] == 6300
        assert totals[1] == 0


class TestQuantitiesAndDays:
    """Test counts and recorded days."""

    def test_aggregated_quantity(self, sample_tree):
        assert aggregated_quantity(sample_tree.root) == 50
        assert aggregated_quantity(find_task((sample_tree.root,), "a")) == 0

    def test_days_with_records(self, sample_tree):
        assert days_with_records(sample_tree.root) == 2

    def test_empty_records_are_not_days(self):
        task = Task(id="x", text="X", daily_data={DAY: DailyRecord(value=0, completed=False)})
        assert days_with_records(task) == 0
