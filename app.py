"""Main TUI application for the task tree tracker."""
import logging
import sys
from datetime import date, timedelta
from typing import Callable, Optional

from rich.markup import escape
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Header, Input, Static

from business_logic.date_navigator import DateNavigator, NaturalDateParser
from business_logic.task_manager import TaskManager
from config import config, configure_logging
from errors import DataIntegrityError, TaskTreeError
from models import Task, TaskTree, TaskType
from task_store import TaskStore
from ui.help_screen import HelpScreen
from ui.statistics_screen import StatisticsScreen
from ui.task_input import parse_task_input
from ui.task_tree_widget import TaskTreeWidget
from ui.widgets import DEFAULT_FOOTER, CenteredFooter
from utils.date_utils import date_key
from utils.time_utils import parse_hours, parse_quantity

logger = logging.getLogger(__name__)


class TaskTreeApp(App):
    """A terminal task tree with daily records and time tracking."""

    TITLE = "tTree"

    CSS = """
    Screen {
        background: #1a1a2e;
    }

    Header {
        background: #2d2d44;
        color: #0abdc6;
    }

    #date_header {
        height: 3;
        content-align: center middle;
        background: #0abdc6;
        color: #ffffff;
        text-style: bold;
    }

    #task_list {
        height: 1fr;
        padding: 1 2;
        overflow-y: auto;
        background: #1a1a2e;
    }

    TaskTreeWidget {
        height: auto;
        color: #e2e8f0;
    }

    #input_container {
        height: auto;
        padding: 1;
        background: #1a1a2e;
    }

    Input {
        margin: 0 1;
        background: #2d2d44;
        color: #ffffff;
        border: tall #8b5cf6;
    }

    Input:focus {
        border: tall #0abdc6;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=False),
        Binding("h", "show_help", "Help", show=False),
        Binding("a", "add_task", "Add", show=False),
        Binding("s", "add_subtask", "Subtask", show=False),
        Binding("r", "rename_task", "Rename", show=False),
        Binding("x", "toggle_complete", "Complete", show=False),
        Binding("space", "toggle_complete", "Complete", show=False),
        Binding("d", "delete_task", "Delete", show=False),
        Binding("f", "toggle_hide_completed", "Filter", show=False),
        Binding("z", "toggle_fold", "Fold", show=False),
        Binding("j", "move_down", "Down", show=False),
        Binding("k", "move_up", "Up", show=False),
        Binding("down", "move_down", "Down", show=False),
        Binding("up", "move_up", "Up", show=False),
        Binding("left", "prev_day", "Prev Day", show=False),
        Binding("right", "next_day", "Next Day", show=False),
        Binding("shift+left", "prev_recorded_day", "S-← Skip", show=False),
        Binding("shift+right", "next_recorded_day", "S-→ Skip", show=False),
        Binding("g", "today", "Today", show=False),
        Binding("o", "jump_to_date", "Go to date", show=False),
        # Daily records
        Binding("t", "toggle_timer", "Timer", show=False),
        Binding("v", "set_value", "Value", show=False),
        Binding("c", "toggle_daily_done", "Done today", show=False),
        Binding("S", "show_statistics", "Stats", show=False),
    ]

    def __init__(self, store: Optional[TaskStore] = None, manager: Optional[TaskManager] = None,
                 tree: Optional[TaskTree] = None):
        super().__init__()
        self.store = store or TaskStore()
        self.manager = manager or TaskManager()
        self.task_tree = tree if tree is not None else self.store.load()
        self.view_date = date.today()
        self.hide_completed = config.hide_completed

        # Input mode state
        self.adding_task = False
        self.add_parent_id: Optional[str] = None
        self.renaming_task = False
        self.setting_value = False
        self.jumping_to_date = False
        self.input_task_id: Optional[str] = None
        self.timer_refresh_interval = None

    def compose(self) -> ComposeResult:
        """Compose the UI."""
        yield Header()
        yield Static(id="date_header")
        yield Container(
            TaskTreeWidget(self.task_tree, self.view_date, self.hide_completed,
                           clock=self.manager.time_tracker.clock),
            id="task_list"
        )
        yield Container(id="input_container")
        yield CenteredFooter()

    def on_mount(self) -> None:
        """Set up the app after mounting."""
        self.update_date_header()
        # Live refresh of a running timer (every second)
        self.timer_refresh_interval = self.set_interval(1.0, self._refresh_timer_display)

    def _refresh_timer_display(self) -> None:
        """Refresh the task tree if a timer is running (for live seconds update)."""
        if self.task_tree.active_tracker is None or len(self.screen_stack) > 1:
            return
        self.query_one(TaskTreeWidget).refresh()

    @property
    def view_key(self) -> str:
        return date_key(self.view_date)

    def update_date_header(self) -> None:
        """Update the date header."""
        header = self.query_one("#date_header", Static)
        date_str = self.view_date.strftime("%A, %B %d, %Y")
        if self.view_date == date.today():
            date_str += "  (today)"
        header.update(date_str)

    def show_message(self, message: str) -> None:
        """Show a message in the footer until the next action."""
        self.query_one(CenteredFooter).update(message)

    def show_error(self, message: str) -> None:
        self.show_message(f"[#ff006e]{escape(message)}[/#ff006e]")

    def refresh_task_tree(self) -> None:
        """Push the current tree, day and filter into the widget."""
        task_widget = self.query_one(TaskTreeWidget)
        task_widget.update_tree(self.task_tree, self.view_date, self.hide_completed)

    def save_and_refresh(self) -> None:
        """Save the tree and refresh the display."""
        try:
            self.store.save(self.task_tree)
        except IOError as e:
            logger.error("Save failed: %s", e)
            self.refresh_task_tree()
            self.show_error(str(e))
            return
        self.refresh_task_tree()

    def _mutate(self, change: Callable[[TaskTree], TaskTree]) -> bool:
        """
        Apply a change to the tree, then save and refresh.

        Rejected changes leave the tree untouched and are shown in the footer.

        Returns:
            True if the change was applied
        """
        try:
            self.task_tree = change(self.task_tree)
        except TaskTreeError as e:
            logger.debug("Rejected change: %s", e)
            self.show_error(str(e))
            return False
        self.show_message(DEFAULT_FOOTER)
        self.save_and_refresh()
        return True

    def _selected_task(self) -> Optional[Task]:
        return self.query_one(TaskTreeWidget).get_selected_task()

    def action_move_down(self) -> None:
        """Move selection down."""
        self.query_one(TaskTreeWidget).move_selection(1)

    def action_move_up(self) -> None:
        """Move selection up."""
        self.query_one(TaskTreeWidget).move_selection(-1)

    def action_toggle_complete(self) -> None:
        """Toggle completion of the selected leaf task."""
        task = self._selected_task()
        if task is None:
            return
        if task.subtasks:
            self.show_message("[dim]Parent tasks complete when all their subtasks are done[/dim]")
            return
        self._mutate(lambda tree: self.manager.toggle_completed(tree, task.id))

    def action_delete_task(self) -> None:
        """Delete the selected task and its subtasks."""
        task = self._selected_task()
        if task is None:
            return
        self._mutate(lambda tree: self.manager.delete_task(tree, task.id)[0])

    def action_toggle_fold(self) -> None:
        """Collapse or expand the selected task's subtasks."""
        task = self._selected_task()
        if task is None:
            return
        task_widget = self.query_one(TaskTreeWidget)
        if task_widget.toggle_fold(task.id):
            task_widget.refresh(layout=True)

    def action_toggle_hide_completed(self) -> None:
        """Show or hide completed tasks."""
        self.hide_completed = not self.hide_completed
        self.refresh_task_tree()

    def _navigate_to_date(self, new_date: date) -> None:
        """Switch the viewed day. The running timer keeps its own date."""
        self.view_date = new_date
        self.update_date_header()
        self.refresh_task_tree()

    def action_next_day(self) -> None:
        """Navigate to next day."""
        self._navigate_to_date(self.view_date + timedelta(days=1))

    def action_prev_day(self) -> None:
        """Navigate to previous day."""
        self._navigate_to_date(self.view_date - timedelta(days=1))

    def action_prev_recorded_day(self) -> None:
        """Navigate to the previous day with records."""
        prev_date = DateNavigator(self.task_tree.root).find_prev_recorded_day(self.view_date)
        if prev_date:
            self._navigate_to_date(prev_date)

    def action_next_recorded_day(self) -> None:
        """Navigate to the next day with records."""
        next_date = DateNavigator(self.task_tree.root).find_next_recorded_day(self.view_date)
        if next_date:
            self._navigate_to_date(next_date)

    def action_today(self) -> None:
        """Navigate to today."""
        self._navigate_to_date(date.today())

    def action_show_help(self) -> None:
        """Show the help screen."""
        self.push_screen(HelpScreen())

    def action_show_statistics(self) -> None:
        """Show the statistics modal screen."""
        self.push_screen(StatisticsScreen(self.task_tree, self.view_date,
                                          now=self.manager.time_tracker.clock()))

    def _input_active(self) -> bool:
        return self.adding_task or self.renaming_task or self.setting_value or self.jumping_to_date

    def _open_input(self, placeholder: str, value: str = "") -> None:
        container = self.query_one("#input_container")
        input_widget = Input(value=value, placeholder=placeholder)
        container.mount(input_widget)
        input_widget.focus()

    def action_add_task(self) -> None:
        """Show input to add a top-level task."""
        if self._input_active():
            return
        self.adding_task = True
        self.add_parent_id = None
        self._open_input("New task (#group !type optional)...")

    def action_add_subtask(self) -> None:
        """Show input to add a subtask under the selected task."""
        task = self._selected_task()
        if task is None or self._input_active():
            return
        if task.completed:
            self.show_error("Cannot add a subtask to a completed task")
            return
        self.adding_task = True
        self.add_parent_id = task.id
        self._open_input(f"Subtask of '{task.text}' (!type optional)...")

    def action_rename_task(self) -> None:
        """Edit the selected task's text."""
        task = self._selected_task()
        if task is None or self._input_active():
            return
        self.renaming_task = True
        self.input_task_id = task.id
        self._open_input("Rename task...", value=task.text)

    def action_set_value(self) -> None:
        """Show input for the viewed day's hours or count."""
        task = self._selected_task()
        if task is None or self._input_active():
            return
        if task.subtasks:
            self.show_message("[dim]Values are recorded on leaf tasks[/dim]")
            return
        if task.task_type == TaskType.MANUAL_TIME:
            placeholder = f"Hours on {self.view_key} (e.g. 1.5, 90m, 1h30m; empty clears)..."
        elif task.task_type == TaskType.QUANTITY:
            placeholder = f"Count on {self.view_key} (empty clears)..."
        else:
            self.show_message("[dim]Values apply to !hours and !count tasks[/dim]")
            return
        record = task.record_for(self.view_key)
        current = ""
        if record.value is not None:
            current = f"{record.value:g}"
        self.setting_value = True
        self.input_task_id = task.id
        self._open_input(placeholder, value=current)

    def action_jump_to_date(self) -> None:
        """Show input to jump to a date."""
        if self._input_active():
            return
        self.jumping_to_date = True
        self._open_input("Go to date (today, -3, friday, nov 10, 2025-11-10)...")

    def action_toggle_timer(self) -> None:
        """
        Start or stop the timer of the selected task on the viewed day.

        Starting a timer stops (and records) any other running timer first.
        """
        task = self._selected_task()
        if task is None:
            return
        if task.subtasks or task.task_type != TaskType.RECORD_TIME:
            self.show_message("[dim]Timers run on !timer leaf tasks[/dim]")
            return
        if task.completed:
            self.show_message("[dim]Re-open the task to track time on it[/dim]")
            return
        self._mutate(lambda tree: self.manager.toggle_tracking(tree, task.id, self.view_key)[0])

    def action_toggle_daily_done(self) -> None:
        """Toggle the viewed day's done mark."""
        task = self._selected_task()
        if task is None:
            return
        if task.subtasks or task.task_type not in (TaskType.UNIQUE, TaskType.REPETITIVE):
            self.show_message("[dim]Done marks apply to !once and !repeat tasks[/dim]")
            return
        self._mutate(lambda tree: self.manager.toggle_daily_completed(tree, task.id, self.view_key))

    def _handle_add_task_input(self, value: str) -> None:
        if not value:
            return
        try:
            text, task_type, group = parse_task_input(value)
        except TaskTreeError as e:
            self.show_error(str(e))
            return
        task_type = task_type or TaskType.UNIQUE
        created = []

        def add(tree: TaskTree) -> TaskTree:
            if self.add_parent_id is None:
                tree, task_id = self.manager.add_task(tree, text, task_type, group)
            else:
                tree, task_id = self.manager.add_subtask(tree, self.add_parent_id, text, task_type)
            created.append(task_id)
            return tree

        if self._mutate(add):
            self.query_one(TaskTreeWidget).select_task(created[0])

    def _handle_rename_input(self, value: str) -> None:
        task_id = self.input_task_id
        self._mutate(lambda tree: self.manager.rename_task(tree, task_id, value))

    def _handle_value_input(self, value: str) -> None:
        task_id = self.input_task_id
        task = self._selected_task()
        if task is None or task.id != task_id:
            return
        if not value:
            amount = None
        elif task.task_type == TaskType.MANUAL_TIME:
            amount = parse_hours(value)
            if amount is None:
                self.show_error(f"Invalid hours: {value}")
                return
        else:
            amount = parse_quantity(value)
            if amount is None:
                self.show_error(f"Invalid count: {value}")
                return
        self._mutate(lambda tree: self.manager.update_daily_data(tree, task_id, self.view_key, value=amount))

    def _handle_jump_input(self, value: str) -> None:
        if not value:
            return
        target = NaturalDateParser.parse(value, self.view_date)
        if target is None:
            self.show_error(f"Unknown date: {value}")
            return
        self._navigate_to_date(target)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle input submission by dispatching to appropriate handler."""
        value = event.value.strip()

        if self.adding_task:
            handler = self._handle_add_task_input
        elif self.renaming_task:
            handler = self._handle_rename_input
        elif self.setting_value:
            handler = self._handle_value_input
        elif self.jumping_to_date:
            handler = self._handle_jump_input
        else:
            handler = None

        event.input.remove()
        if handler is not None:
            handler(value)
        self._clear_input_state()

    def _clear_input_state(self) -> None:
        """Clear all input mode state flags."""
        self.adding_task = False
        self.add_parent_id = None
        self.renaming_task = False
        self.setting_value = False
        self.jumping_to_date = False
        self.input_task_id = None

    def on_key(self, event: events.Key) -> None:
        """Cancel input on Escape."""
        focused = self.focused
        if isinstance(focused, Input) and event.key == "escape":
            focused.remove()
            self._clear_input_state()
            event.prevent_default()
            event.stop()


def main():
    """Run the application."""
    configure_logging()
    try:
        store = TaskStore()
        tree = store.load()
    except DataIntegrityError as e:
        logger.error("Cannot load task tree: %s", e)
        print(f"ttree: {e}", file=sys.stderr)
        sys.exit(1)
    app = TaskTreeApp(store=store, tree=tree)
    app.run()


if __name__ == "__main__":
    main()
