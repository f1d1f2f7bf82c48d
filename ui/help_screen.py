"""Help screen widget showing keyboard shortcuts."""
from ui.widgets import InfoScreen


class HelpScreen(InfoScreen):
    """Modal screen showing keyboard shortcuts."""

    TITLE_TEXT = "Keyboard Shortcuts"

    def get_text(self) -> str:
        """Get formatted help text."""
        return """[bold]Navigation[/bold]
↑/↓ or j/k    Move selection up/down
←/→           Previous/next day
Shift+←       Previous day with records (skip empty days)
Shift+→       Next day with records (skip empty days)
g             Jump to today
o             Jump to a date
              • Relative: +1, -7
              • Words: yesterday, last week, friday
              • Month + day: nov 10, or YYYY-MM-DD

[bold]Tasks[/bold]
a             Add top-level task
s             Add subtask under selected task (inherits its group)
              • Markers: #urgent #routine #project #other
              • Types: !once !repeat !hours !timer !count
              • Example: Write report #project !timer
r             Rename selected task
Space or x    Toggle completion (leaf tasks only)
              • Parents complete when all their leaf subtasks are done
d             Delete selected task and its subtasks
f             Show/hide completed tasks
z             Collapse/expand subtasks of selected task

[bold]Daily Records (viewed day)[/bold]
t             Start/stop timer (timer tasks)
              • Starting another timer stops the running one
              • Completing a timed task stops its timer first
v             Set value (hours for !hours, count for !count)
              • Hours: 1.5, 90m, 1h30m
c             Toggle done mark (!once and !repeat tasks)
              • For !once tasks this completes the task

[bold]General[/bold]
Shift+S       Day / month / year totals
h             Show this help
q             Quit

[dim]Press Esc to close this help[/dim]"""
