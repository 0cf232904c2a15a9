"""Log group list with incremental fuzzy search."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from textual.binding import Binding, BindingType
from textual.message import Message

from logscout.models import RetrievalSnapshot, RetrievalStatus
from logscout.selector import GroupSelector
from logscout.viewport import Anchor
from logscout.widgets.viewport_table import Frame, ViewportTable

if TYPE_CHECKING:
    from textual import events


class GroupList(ViewportTable):
    """Scrollable list of log group names; Enter selects, / searches."""

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("up,k", "cursor_up", "Up", show=False),
        Binding("down,j", "cursor_down", "Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
        Binding("home,g", "first", "First", show=False),
        Binding("end,G", "last", "Last", show=False),
        Binding("enter", "select", "Open"),
        Binding("slash", "search", "Search"),
        Binding("r", "reload", "Reload"),
        Binding("escape", "app.quit", "Quit", show=False),
    ]

    class Selected(Message):
        """A log group was chosen."""

        def __init__(self, log_group: str) -> None:
            super().__init__()
            self.log_group = log_group

    class ReloadRequested(Message):
        """The user asked for the group list to be fetched again."""

    def __init__(self, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(anchor=Anchor.TOP, **kwargs)
        self.selector = GroupSelector()
        self._snapshot = RetrievalSnapshot()

    @property
    def snapshot(self) -> RetrievalSnapshot:
        return self._snapshot

    def set_snapshot(self, snapshot: RetrievalSnapshot) -> None:
        """Show the group names and status carried by ``snapshot``."""
        self._snapshot = snapshot
        if snapshot.lines != self.selector.candidates:
            self.selector.set_candidates(snapshot.lines)
        self._sync()

    def _sync(self) -> None:
        self.viewport.set_lines(self.selector.names)
        self.viewport.reveal(self.selector.cursor)
        self.refresh()

    def frame(self) -> Frame:
        selector = self.selector
        total = len(selector.candidates)
        shown = len(selector.names)
        counts = f"{shown}/{total}" if selector.term else f"{total}"
        status = self._snapshot.label
        if self._snapshot.status != RetrievalStatus.IDLE:
            status = f"{status} · {counts}"

        if self._snapshot.status.in_progress and not total:
            placeholder = "Loading log groups…"
        elif self._snapshot.status in {RetrievalStatus.FAILED, RetrievalStatus.TIMED_OUT}:
            placeholder = f"{self._snapshot.label} (r to retry)"
        elif selector.term and total:
            placeholder = f"No log groups match {selector.term!r}"
        elif self._snapshot.status == RetrievalStatus.LOADED:
            placeholder = "No log groups found"
        else:
            placeholder = None

        return Frame(
            title="Log Groups",
            status=status,
            footer=f"/{selector.term}" if selector.searching else "",
            hint="q to quit",
            placeholder=placeholder,
            cursor=selector.cursor if selector.names else None,
            emphasis=selector.emphasis,
        )

    def on_resize(self, event: events.Resize) -> None:
        super().on_resize(event)
        self.viewport.reveal(self.selector.cursor)

    def on_key(self, event: events.Key) -> None:
        """While searching, printable keys edit the term instead of triggering bindings."""
        if not self.selector.searching:
            return
        if event.key == "escape":
            self.selector.cancel_search()
        elif event.key == "backspace":
            self.selector.backspace()
        elif event.is_printable and event.character:
            self.selector.type_char(event.character)
        else:
            return
        event.stop()
        event.prevent_default()
        self._sync()

    def action_cursor_up(self) -> None:
        self.selector.move_up()
        self._sync()

    def action_cursor_down(self) -> None:
        self.selector.move_down()
        self._sync()

    def action_page_up(self) -> None:
        self.selector.move_up(max(1, self.viewport.inner_height))
        self._sync()

    def action_page_down(self) -> None:
        self.selector.move_down(max(1, self.viewport.inner_height))
        self._sync()

    def action_first(self) -> None:
        self.selector.move_first()
        self._sync()

    def action_last(self) -> None:
        self.selector.move_last()
        self._sync()

    def action_search(self) -> None:
        self.selector.start_search()
        self.refresh()

    def action_select(self) -> None:
        if (name := self.selector.selected) is not None:
            self.post_message(self.Selected(name))

    def action_reload(self) -> None:
        self.post_message(self.ReloadRequested())
