"""Tests for the statistics screen."""
from dataclasses import replace
from datetime import date

from conftest import DAY
from models import DailyRecord, Task, TaskTree, TaskType
from ui.statistics_screen import StatisticsScreen

VIEW_DATE = date(2025, 11, 10)


class TestStatisticsText:
    """Test the statistics text for a viewed day."""

    def test_keeps_tree(self, sample_tree):
        screen = StatisticsScreen(sample_tree, VIEW_DATE, now=0)
        assert screen.task_tree is sample_tree

    def test_totals(self, sample_tree):
        text = StatisticsScreen(sample_tree, VIEW_DATE, now=0).get_text()
        assert "Day 2025-11-10:" in text
        assert "01:40:00" in text
        assert "01:45:00" in text
        assert "Days with records:  2" in text
        assert "Quantities logged:  50" in text

    def test_tasks_and_months(self, sample_tree):
        text = StatisticsScreen(sample_tree, VIEW_DATE, now=0).get_text()
        assert "Tasks this month (November 2025)" in text
        assert "Write book" in text
        assert "Push-ups" not in text
        assert "Months of 2025" in text
        assert "Nov" in text

    def test_empty_month(self, empty_tree):
        text = StatisticsScreen(empty_tree, VIEW_DATE, now=0).get_text()
        assert "Nothing recorded this month" in text
        assert "Quantities logged" not in text

    def test_markup_in_task_text_is_escaped(self, empty_tree):
        rent = Task(id="x", text="[red]Rent", task_type=TaskType.MANUAL_TIME,
                    daily_data={DAY: DailyRecord(value=1.0)})
        tree = TaskTree(root=replace(empty_tree.root, subtasks=(rent,)))
        text = StatisticsScreen(tree, VIEW_DATE, now=0).get_text()
        assert "\\[red]Rent" in text
