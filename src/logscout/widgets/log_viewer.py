"""Tail-style viewer for the lines of one log group."""

from __future__ import annotations

from typing import Any, ClassVar

from textual.binding import Binding, BindingType
from textual.message import Message

from logscout.models import RetrievalSnapshot, RetrievalStatus
from logscout.viewport import Anchor
from logscout.widgets.viewport_table import Frame, ViewportTable


class LogViewer(ViewportTable):
    """Shows the newest lines at the bottom; scrolling up walks back in time."""

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("up,k", "scroll_older", "Older", show=False),
        Binding("down,j", "scroll_newer", "Newer", show=False),
        Binding("ctrl+u", "scroll_older(10)", "Older x10", show=False),
        Binding("ctrl+d", "scroll_newer(10)", "Newer x10", show=False),
        Binding("pageup", "page_older", "Page Up", show=False),
        Binding("pagedown", "page_newer", "Page Down", show=False),
        Binding("home,g", "oldest", "Oldest", show=False),
        Binding("end,G", "newest", "Newest", show=False),
        Binding("r", "rerun", "Rerun"),
        Binding("escape", "close", "Back"),
    ]

    class Closed(Message):
        """The user left the viewer."""

    class RerunRequested(Message):
        """The user asked for the query to be run again."""

    def __init__(self, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(anchor=Anchor.BOTTOM, **kwargs)
        self.log_group = ""
        self._snapshot = RetrievalSnapshot()

    @property
    def snapshot(self) -> RetrievalSnapshot:
        return self._snapshot

    def open(self, log_group: str) -> None:
        """Point the viewer at a new log group and forget any previous lines."""
        self.log_group = log_group
        self._snapshot = RetrievalSnapshot()
        self.viewport.set_lines(())
        self.viewport.scroll_end()
        self.refresh()

    def set_snapshot(self, snapshot: RetrievalSnapshot) -> None:
        """Swap in the lines carried by ``snapshot`` (no copy is made)."""
        self._snapshot = snapshot
        self.viewport.set_lines(snapshot.lines)
        self.refresh()

    def frame(self) -> Frame:
        snapshot = self._snapshot
        count = len(snapshot.lines)
        status = snapshot.label
        if count:
            status = f"{status} · {count} lines"

        if snapshot.status.in_progress:
            placeholder = "Loading…"
        elif snapshot.status in {RetrievalStatus.FAILED, RetrievalStatus.TIMED_OUT}:
            placeholder = f"{snapshot.label} (r to retry, esc to go back)"
        elif snapshot.status == RetrievalStatus.LOADED:
            placeholder = "No log lines in this time range"
        else:
            placeholder = None

        return Frame(
            title=self.log_group,
            status=status,
            footer="esc back · r rerun",
            hint="q to quit",
            placeholder=placeholder,
        )

    def action_scroll_older(self, amount: int = 1) -> None:
        self.viewport.scroll_up(amount)
        self.refresh()

    def action_scroll_newer(self, amount: int = 1) -> None:
        self.viewport.scroll_down(amount)
        self.refresh()

    def action_page_older(self) -> None:
        self.viewport.scroll_page_up()
        self.refresh()

    def action_page_newer(self) -> None:
        self.viewport.scroll_page_down()
        self.refresh()

    def action_oldest(self) -> None:
        self.viewport.scroll_home()
        self.refresh()

    def action_newest(self) -> None:
        self.viewport.scroll_end()
        self.refresh()

    def action_rerun(self) -> None:
        self.post_message(self.RerunRequested())

    def action_close(self) -> None:
        self.post_message(self.Closed())
