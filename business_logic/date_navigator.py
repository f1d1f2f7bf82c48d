"""Date navigation and parsing logic for the tracker."""
import re
from datetime import date, timedelta
from typing import Optional, Set

from business_logic.tree_operations import iter_tasks
from config import config
from models import Task
from utils.date_utils import date_key


class DateNavigator:
    """Finds days that hold daily records anywhere in the tree."""

    def __init__(self, root: Task):
        """
        Initialize DateNavigator.

        Args:
            root: Root of the task tree to search
        """
        self.recorded_days: Set[str] = {
            key
            for task in iter_tasks((root,))
            for key, record in task.daily_data.items()
            if not record.is_empty
        }

    def _search(self, start_date: date, step: int, max_days: Optional[int]) -> Optional[date]:
        if max_days is None:
            max_days = config.max_search_days

        check_date = start_date + timedelta(days=step)
        for _ in range(max_days):
            if date_key(check_date) in self.recorded_days:
                return check_date
            check_date += timedelta(days=step)
        return None

    def find_prev_recorded_day(self, start_date: date, max_days: Optional[int] = None) -> Optional[date]:
        """
        Find the previous day that has a non-empty daily record.

        Args:
            start_date: Date to start searching from (not included)
            max_days: Maximum number of days to search backwards (uses config.max_search_days if None)

        Returns:
            Date of previous recorded day, or None if not found
        """
        return self._search(start_date, -1, max_days)

    def find_next_recorded_day(self, start_date: date, max_days: Optional[int] = None) -> Optional[date]:
        """Find the next day that has a non-empty daily record. See find_prev_recorded_day."""
        return self._search(start_date, 1, max_days)


class NaturalDateParser:
    """Parse natural language date inputs."""

    DAY_NAMES = {
        "monday": 0, "mon": 0,
        "tuesday": 1, "tue": 1, "tues": 1,
        "wednesday": 2, "wed": 2,
        "thursday": 3, "thu": 3, "thurs": 3,
        "friday": 4, "fri": 4,
        "saturday": 5, "sat": 5,
        "sunday": 6, "sun": 6,
    }

    MONTH_NAMES = {
        "jan": 1, "january": 1,
        "feb": 2, "february": 2,
        "mar": 3, "march": 3,
        "apr": 4, "april": 4,
        "may": 5,
        "jun": 6, "june": 6,
        "jul": 7, "july": 7,
        "aug": 8, "august": 8,
        "sep": 9, "sept": 9, "september": 9,
        "oct": 10, "october": 10,
        "nov": 11, "november": 11,
        "dec": 12, "december": 12,
    }

    @staticmethod
    def parse(input_str: str, from_date: date, today: Optional[date] = None) -> Optional[date]:
        """
        Parse natural language date input for jumping to a day.

        Supports:
        - Relative offsets: +1, -7 (relative to from_date, the viewed date)
        - ISO format: YYYY-MM-DD
        - Words: today, yesterday, tomorrow, last week, next week (relative to today)
        - Day names: monday, fri (most recent occurrence, today included)
        - Month + day: nov 10, december 25 (this year)

        Time is recorded for days that already happened, so day names look
        backwards from today.

        Args:
            input_str: Natural language date string
            from_date: Reference date for relative offsets
            today: Actual current date (defaults to date.today())

        Returns:
            Parsed date or None if parsing failed
        """
        input_str = input_str.strip().lower()
        today = today or date.today()

        if input_str.startswith('+') or input_str.startswith('-'):
            try:
                return from_date + timedelta(days=int(input_str))
            except ValueError:
                pass

        try:
            return date.fromisoformat(input_str)
        except ValueError:
            pass

        words = {
            "today": 0,
            "yesterday": -1,
            "tomorrow": 1,
            "last week": -7,
            "next week": 7,
        }
        if input_str in words:
            return today + timedelta(days=words[input_str])

        if input_str in NaturalDateParser.DAY_NAMES:
            days_back = (today.weekday() - NaturalDateParser.DAY_NAMES[input_str]) % 7
            return today - timedelta(days=days_back)

        match = re.match(r'^(\w+)\s+(\d{1,2})$', input_str)
        if match:
            month_str, day_str = match.groups()
            if month_str in NaturalDateParser.MONTH_NAMES:
                try:
                    return date(today.year, NaturalDateParser.MONTH_NAMES[month_str], int(day_str))
                except ValueError:
                    pass

        return None
