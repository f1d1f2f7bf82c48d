"""Statistics screen showing day, month and year totals."""
import calendar
import time
from datetime import date
from typing import Optional

from rich.markup import escape

from business_logic.aggregation import (
    aggregated_quantity,
    days_with_records,
    monthly_totals,
    seconds_in_month,
    seconds_in_year,
    seconds_on_date,
)
from models import TaskTree
from ui.widgets import InfoScreen
from utils.time_utils import format_hours, format_time


class StatisticsScreen(InfoScreen):
    """Modal screen showing recorded time totals."""

    TITLE_TEXT = "Time Statistics"

    def __init__(self, tree: TaskTree, view_date: date, now: Optional[float] = None):
        """
        Initialize statistics screen.

        Args:
            tree: The task tree to summarize
            view_date: The day whose day/month/year are shown
            now: Wall-clock time used for a running timer (sampled once if None)
        """
        super().__init__()
        self.task_tree = tree
        self.view_date = view_date
        self.now = time.time() if now is None else now

    @staticmethod
    def _format_total(seconds: float) -> str:
        return f"{format_time(seconds)}  [dim]({format_hours(seconds)}h)[/dim]"

    def get_text(self) -> str:
        """Get formatted statistics text."""
        root = self.task_tree.root
        day = self.view_date
        now = self.now

        lines = [
            "[bold]Totals[/bold]",
            f"Day {day.isoformat()}:       {self._format_total(seconds_on_date(root, day, now))}",
            f"Month {day.strftime('%Y-%m')}:      {self._format_total(seconds_in_month(root, day.year, day.month, now))}",
            f"Year {day.year}:          {self._format_total(seconds_in_year(root, day.year, now))}",
            f"Days with records:  {days_with_records(root)}",
        ]

        quantity = aggregated_quantity(root)
        if quantity:
            lines.append(f"Quantities logged:  {int(quantity)}")

        lines.append("")
        lines.append(f"[bold]Tasks this month ({day.strftime('%B %Y')})[/bold]")
        task_lines = []
        for task in root.subtasks:
            seconds = seconds_in_month(task, day.year, day.month, now)
            if seconds:
                task_lines.append(f"{escape(task.text[:40].ljust(40))} {format_hours(seconds):>7}h")
        lines.extend(task_lines or ["[dim]Nothing recorded this month[/dim]"])

        lines.append("")
        lines.append(f"[bold]Months of {day.year}[/bold]")
        for month, seconds in monthly_totals(root, day.year, now).items():
            lines.append(f"{calendar.month_abbr[month]}  {format_hours(seconds):>7}h")

        lines.append("")
        lines.append("[dim]Press Esc to close this screen[/dim]")
        return "\n".join(lines)

