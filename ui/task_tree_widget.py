"""Task tree widget for displaying and navigating tasks."""
import time
from datetime import date
from typing import Callable, List, Optional, Set, Tuple

from rich.markup import escape
from textual.widgets import Static

from business_logic.aggregation import aggregated_quantity, aggregated_seconds
from business_logic.task_sorter import TaskSorter
from business_logic.time_tracker import project_tracking
from config import config
from models import Task, TaskTree, TaskType
from ui.task_input import TYPE_LABELS
from utils.date_utils import date_key
from utils.time_utils import format_time


class TaskTreeWidget(Static):
    """Widget to display the task tree for one viewed day.

    Each row shows the task with its group colour and type, the record of the
    viewed day and the task's aggregated time. Rows are built from the view
    projection (sorted by group, optionally without completed tasks).
    """

    def __init__(self, tree: TaskTree, view_date: date, hide_completed: bool = False,
                 clock: Optional[Callable[[], float]] = None):
        super().__init__()
        self.task_tree = tree
        self.view_date = view_date
        self.hide_completed = hide_completed
        self.clock = clock or time.time
        self.selected_index = 0
        self.folded_ids: Set[str] = set()
        self.rows: List[Tuple[Task, int]] = []
        self.rebuild_rows()

    def rebuild_rows(self) -> None:
        """Recompute the display rows from the tree, keeping the selected task."""
        selected = self.get_selected_task()
        root = project_tracking(self.task_tree.root, self.task_tree.active_tracker)
        projected = TaskSorter.project(root, self.hide_completed)
        self.rows = TaskSorter.flatten_visible(projected, self.folded_ids)
        if selected is not None and self.select_task(selected.id):
            return
        self.selected_index = min(self.selected_index, max(0, len(self.rows) - 1))

    def update_tree(self, tree: TaskTree, view_date: Optional[date] = None,
                    hide_completed: Optional[bool] = None) -> None:
        """Show a new tree (and optionally another day or filter)."""
        self.task_tree = tree
        if view_date is not None:
            self.view_date = view_date
        if hide_completed is not None:
            self.hide_completed = hide_completed
        self.rebuild_rows()
        self.refresh(layout=True)

    def select_task(self, task_id: str) -> bool:
        """Move the selection to task_id if it is visible."""
        for index, (task, _) in enumerate(self.rows):
            if task.id == task_id:
                self.selected_index = index
                return True
        return False

    def get_selected_task(self) -> Optional[Task]:
        """Get the currently selected task."""
        if 0 <= self.selected_index < len(self.rows):
            return self.rows[self.selected_index][0]
        return None

    def move_selection(self, delta: int) -> None:
        """Move the selection up or down, stopping at the ends."""
        if not self.rows:
            return
        self.selected_index = max(0, min(self.selected_index + delta, len(self.rows) - 1))
        self.refresh()

    def toggle_fold(self, task_id: str) -> bool:
        """Collapse or expand the subtasks of task_id. Returns False for leaves."""
        row = next((task for task, _ in self.rows if task.id == task_id), None)
        if row is None or not row.subtasks:
            return False
        if task_id in self.folded_ids:
            self.folded_ids.discard(task_id)
        else:
            self.folded_ids.add(task_id)
        self.rebuild_rows()
        return True

    def format_day_cell(self, task: Task, now: float) -> str:
        """
        Format the viewed day's record of a leaf task.

        Returns Rich-formatted string like:
        - Unique/repetitive: [green]✓[/green] when done that day
        - Manual time: 1.5h
        - Quantity: ×3
        - Record time: 00:12:30, in yellow with ⏱ while the timer runs
        """
        if task.subtasks:
            return ""

        key = date_key(self.view_date)
        record = task.record_for(key)

        if task.task_type in (TaskType.UNIQUE, TaskType.REPETITIVE):
            return " [green]✓[/green]" if record.completed else ""
        if task.task_type == TaskType.MANUAL_TIME:
            return f" [dim]{record.value:.1f}h[/dim]" if record.value else ""
        if task.task_type == TaskType.QUANTITY:
            return f" [dim]×{int(record.value)}[/dim]" if record.value else ""
        if task.task_type == TaskType.RECORD_TIME:
            seconds = record.value or 0
            if task.is_tracking and task.tracking_date == key and task.start_time is not None:
                seconds += max(0.0, now - task.start_time)
                return f" [yellow]⏱ {format_time(seconds)}[/yellow]"
            return f" [dim]{format_time(seconds)}[/dim]" if seconds else ""
        return ""

    def format_total(self, task: Task, now: float) -> str:
        """Format the task's aggregated total (time, or count for quantities)."""
        if task.is_leaf and task.task_type == TaskType.QUANTITY:
            total = aggregated_quantity(task)
            return f" [#8b5cf6]Σ{int(total)}[/#8b5cf6]" if total else ""
        if task.is_leaf and task.task_type not in (TaskType.MANUAL_TIME, TaskType.RECORD_TIME):
            return ""
        seconds = aggregated_seconds(task, now)
        if not seconds and not task.is_leaf:
            return ""
        return f" [#0abdc6]\\[{format_time(seconds)}][/#0abdc6]"

    def render(self) -> str:
        """Render the task tree."""
        if not self.rows:
            if self.hide_completed and self.task_tree.root.subtasks:
                return "[dim]All tasks are completed. Press 'f' to show them.[/dim]"
            return "[dim]No tasks yet. Press 'a' to add one.[/dim]"

        now = self.clock()
        lines = []
        for i, (task, depth) in enumerate(self.rows):
            marker = ">" if i == self.selected_index else " "
            indent = "[dim]" + "   │" * depth + "[/dim]" if depth else ""
            fold_indicator = "  "
            if task.subtasks:
                fold_indicator = "▶ " if task.id in self.folded_ids else "▼ "
            checkbox = "\\[x]" if task.completed else "\\[ ]"

            color = config.group_colors.get(task.group.value, config.color_text)
            content = f"[{color}]{escape(task.text)}[/{color}]"
            if task.completed:
                content = f"[strike]{content}[/strike]"

            type_tag = "" if task.subtasks else f" [dim]({TYPE_LABELS.get(task.task_type, '?')})[/dim]"
            line = (f"{marker} {indent}[#0abdc6]{fold_indicator}[/#0abdc6]{checkbox} {content}"
                    f"{type_tag}{self.format_day_cell(task, now)}{self.format_total(task, now)}")

            if i == self.selected_index:
                line = f"[on #2d2d44]{line}[/on #2d2d44]"
            lines.append(line)

        return "\n".join(lines)
