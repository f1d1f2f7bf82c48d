"""Custom UI widgets for ttree."""
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Static
from textual import events

DEFAULT_FOOTER = "[dim]Press[/dim] [bold]h[/bold] [dim]for Help  •  [/dim][bold]q[/bold] [dim]to Quit[/dim]"


class CenteredFooter(Static):
    """Custom footer with centered content."""

    def __init__(self):
        super().__init__()
        self.update(DEFAULT_FOOTER)

    DEFAULT_CSS = """
    CenteredFooter {
        background: transparent;
        color: #0abdc6;
        dock: bottom;
        height: 1;
        text-align: center;
    }
    """


class InfoScreen(Screen):
    """Modal screen showing a block of read-only text.

    Subclasses set TITLE_TEXT and implement get_text().
    """

    TITLE_TEXT = ""

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=False),
    ]

    DEFAULT_CSS = """
    InfoScreen {
        align: center middle;
        background: rgba(26, 26, 46, 0.9);
    }

    #info_container {
        width: 80;
        height: auto;
        max-height: 90%;
        background: #2d2d44;
        border: thick #0abdc6;
        padding: 1 2;
    }

    #info_title {
        text-align: center;
        text-style: bold;
        color: #0abdc6;
        margin-bottom: 1;
    }

    #info_content {
        height: auto;
        color: #e2e8f0;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the screen."""
        with VerticalScroll(id="info_container"):
            yield Static(self.TITLE_TEXT, id="info_title")
            yield Static(self.get_text(), id="info_content")

    def get_text(self) -> str:
        raise NotImplementedError

    def on_key(self, event: events.Key) -> None:
        """Handle key events - block all except Esc and arrow keys."""
        # Allow Esc (handled by binding) and arrow keys (for scrolling)
        if event.key not in ("escape", "up", "down"):
            event.prevent_default()
            event.stop()

    def action_dismiss(self) -> None:
        """Close the screen."""
        self.dismiss()
