"""Help screen showing all keyboard shortcuts."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, override

from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.binding import BindingType

HELP_TEXT = """\
[bold]Log groups[/bold]
  Up/Down, k/j                          Move selection
  PgUp/PgDn                             Page up/down
  Home/End, g/G                         First/last group
  Enter                                 Open the selected group
  /                                     Search (fuzzy); type to filter
  Backspace                             Delete last search character
  Esc                                   Clear search, or quit when not searching
  r                                     Reload the group list

[bold]Log viewer[/bold]
  k/Up                                  Scroll towards older lines
  j/Down                                Scroll towards newer lines
  Ctrl+U / Ctrl+D                       Scroll 10 lines older/newer
  PgUp/PgDn                             Page older/newer
  Home/g                                Oldest line
  End/G                                 Newest line
  r                                     Run the query again
  Esc                                   Back to the group list

  The newest line is at the bottom and is highlighted while scrolling.
  CLI: --start/-s and --end/-e set the time range, --query the Insights query.

[bold]General[/bold]
  t                                     Toggle dark/light theme
  h                                     Show this help
  q                                     Quit
"""


class HelpScreen(ModalScreen[None]):
    """Modal help screen with keyboard shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > VerticalScroll {
        width: 70%;
        height: 90%;
        max-height: 32;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        ("escape", "dismiss_help", "Close"),
        ("h", "dismiss_help", "Close"),
        ("q", "dismiss_help", "Close"),
    ]

    @override
    def compose(self) -> ComposeResult:
        with VerticalScroll():
            yield Static(HELP_TEXT, markup=True)

    def action_dismiss_help(self) -> None:
        self.dismiss(None)
