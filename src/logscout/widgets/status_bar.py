"""Bottom status bar."""

from __future__ import annotations

from rich.cells import cell_len
from rich.text import Text
from textual.widget import Widget

from logscout.models import RetrievalSnapshot, RetrievalStatus
from logscout.utils import format_elapsed

_MILLION = 1_000_000
_TEN_THOUSAND = 10_000
_THOUSAND = 1_000

_SPINNER = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

_STATUS_STYLES: dict[RetrievalStatus, str] = {
    RetrievalStatus.FAILED: "bold red",
    RetrievalStatus.TIMED_OUT: "bold yellow",
    RetrievalStatus.LOADED: "bold",
}


def _format_count(n: int) -> str:
    """Format a line count compactly: 1234 -> '1,234', 1234567 -> '1.2M'."""
    if n >= _MILLION:
        return f"{n / _MILLION:.1f}M"
    if n >= _TEN_THOUSAND:
        return f"{n / _THOUSAND:.0f}K"
    return f"{n:,}"


class StatusBar(Widget):
    """Bottom status bar showing the active view, retrieval status and source."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $primary;
        color: $text;
        padding: 0 1;
    }
    """

    def __init__(self, source: str = "", id: str | None = None) -> None:  # noqa: A002
        super().__init__(id=id)
        self._source = source
        self._view = "groups"
        self._log_group: str | None = None
        self._snapshot = RetrievalSnapshot()
        self._elapsed: float | None = None
        self._frame = 0

    def set_view(self, view: str, log_group: str | None = None) -> None:
        """Set which view has focus ("groups" or "logs")."""
        self._view = view
        self._log_group = log_group
        self.refresh()

    def set_snapshot(self, snapshot: RetrievalSnapshot) -> None:
        """Show the status of the retrieval backing the active view."""
        self._snapshot = snapshot
        if not snapshot.status.in_progress:
            self._elapsed = None
        self.refresh()

    def tick(self, elapsed: float | None) -> None:
        """Advance the spinner and elapsed time while a retrieval runs."""
        self._elapsed = elapsed
        self._frame += 1
        self.refresh()

    def render(self) -> Text:
        text = Text()
        snapshot = self._snapshot

        if self._view == "logs" and self._log_group:
            text.append(" LOGS ", style="bold reverse")
            text.append(f" {self._log_group}  ")
        else:
            text.append(" GROUPS ", style="bold reverse")
            text.append(" ")

        if snapshot.status.in_progress:
            text.append(f"{_SPINNER[self._frame % len(_SPINNER)]} ", style="bold")
        text.append(snapshot.label, style=_STATUS_STYLES.get(snapshot.status, ""))

        noun = "lines" if self._view == "logs" else "groups"
        if snapshot.lines or snapshot.status == RetrievalStatus.LOADED:
            text.append(f"  {_format_count(len(snapshot.lines))} {noun}")

        if self._elapsed is not None and snapshot.status.in_progress:
            text.append(f"  {format_elapsed(self._elapsed)}", style="italic")

        right_part = self._source
        if right_part:
            padding = max(1, self.size.width - text.cell_len - cell_len(right_part))
            text.append(" " * padding)
            text.append(right_part)

        return text
