"""Textual application for logscout."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.message import Message
from textual.widgets import Footer
from textual.worker import Worker, WorkerState

from logscout.config import load_config, save_config
from logscout.fetcher import PollingFetcher
from logscout.jobs import GroupListingJob, LogQueryJob
from logscout.models import AppConfig, RetrievalSnapshot, RetrievalStatus
from logscout.state import ResultState
from logscout.utils import parse_time, to_epoch_ms
from logscout.widgets.group_list import GroupList
from logscout.widgets.help_screen import HelpScreen
from logscout.widgets.log_viewer import LogViewer
from logscout.widgets.status_bar import StatusBar

if TYPE_CHECKING:
    from collections.abc import Callable

    from logscout.jobs import LogService

logger = logging.getLogger(__name__)

GROUPS = "groups"
LOGS = "logs"

_TICK_SECONDS = 0.25
_THEMES = ("textual-dark", "textual-light")
_WORKER_DONE = {WorkerState.SUCCESS, WorkerState.ERROR, WorkerState.CANCELLED}


class RetrievalUpdated(Message):
    """A fetcher published a new snapshot for one of the two slots."""

    def __init__(self, slot: str, snapshot: RetrievalSnapshot) -> None:
        super().__init__()
        self.slot = slot
        self.snapshot = snapshot


class LogScoutApp(App[None]):
    """Browse log groups and read their recent lines."""

    ENABLE_COMMAND_PALETTE = False

    DEFAULT_CSS = """
    #log-viewer {
        display: none;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit"),
        Binding("h", "show_help", "Help"),
        Binding("t", "toggle_theme", "Theme", show=False),
    ]

    def __init__(  # noqa: PLR0913
        self,
        service: LogService,
        config: AppConfig | None = None,
        *,
        start: str | None = None,
        end: str | None = None,
        prefix: str | None = None,
        source: str = "",
        persist_config: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self._service = service
        self._config = config or AppConfig()
        self._start = start or self._config.lookback
        self._end = end
        self._prefix = prefix
        self._source = source
        self._persist_config = persist_config
        self._clock = clock
        self._states = {GROUPS: ResultState(), LOGS: ResultState()}
        self._started_at: dict[str, float] = {}
        self._worker_generations: dict[Worker[RetrievalSnapshot], int] = {}
        self._log_group: str | None = None
        self.theme = self._config.theme

    def compose(self) -> ComposeResult:
        yield GroupList(id="group-list")
        yield LogViewer(id="log-viewer")
        yield StatusBar(source=self._source, id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#group-list", GroupList).focus()
        self.set_interval(_TICK_SECONDS, self._tick)
        self._load_groups()

    @property
    def viewing_logs(self) -> bool:
        return self._log_group is not None

    def state(self, slot: str) -> ResultState:
        return self._states[slot]

    # --- Retrieval ---

    def _publish(self, slot: str, snapshot: RetrievalSnapshot) -> None:
        self.post_message(RetrievalUpdated(slot, snapshot))

    def _run_fetcher(self, slot: str, fetcher: PollingFetcher[tuple[str, ...]]) -> None:
        self._started_at[slot] = self._clock()
        worker = self.run_worker(fetcher.run(), name=slot, group=slot, exclusive=True, exit_on_error=False)
        self._worker_generations[worker] = fetcher.generation

    def _load_groups(self) -> None:
        state = self._states[GROUPS]
        generation = state.begin()
        self._show(GROUPS, state.snapshot)
        fetcher = PollingFetcher(
            GroupListingJob(self._service, prefix=self._prefix),
            partial(self._publish, GROUPS),
            generation=generation,
            interval=0,
            timeout=self._config.query_timeout,
        )
        self._run_fetcher(GROUPS, fetcher)

    def _time_range(self) -> tuple[int, int]:
        end = parse_time(self._end) if self._end else datetime.now(tz=UTC)
        start = parse_time(self._start, reference=end)
        return to_epoch_ms(start), to_epoch_ms(end)

    def _load_logs(self) -> None:
        if self._log_group is None:
            return
        state = self._states[LOGS]
        generation = state.begin()
        self._show(LOGS, state.snapshot)
        try:
            start_ms, end_ms = self._time_range()
        except ValueError as exc:
            failed = RetrievalSnapshot(status=RetrievalStatus.FAILED, reason=str(exc), generation=generation)
            self.post_message(RetrievalUpdated(LOGS, failed))
            return
        job = LogQueryJob(
            self._service,
            self._log_group,
            start_ms,
            end_ms,
            self._config.query,
            message_key=self._config.message_key,
        )
        fetcher = PollingFetcher(
            job,
            partial(self._publish, LOGS),
            generation=generation,
            **self._config.poll_settings(),
        )
        logger.info("Querying %s", self._log_group)
        self._run_fetcher(LOGS, fetcher)

    def _show(self, slot: str, snapshot: RetrievalSnapshot) -> None:
        if slot == GROUPS:
            self.query_one("#group-list", GroupList).set_snapshot(snapshot)
        else:
            self.query_one("#log-viewer", LogViewer).set_snapshot(snapshot)
        if (slot == LOGS) == self.viewing_logs:
            self.query_one("#status-bar", StatusBar).set_snapshot(snapshot)

    def on_retrieval_updated(self, message: RetrievalUpdated) -> None:
        if not self._states[message.slot].apply(message.snapshot):
            return
        snapshot = message.snapshot
        self._show(message.slot, snapshot)
        if snapshot.status in {RetrievalStatus.FAILED, RetrievalStatus.TIMED_OUT}:
            self.notify(snapshot.label, severity="error")
        elif snapshot.status == RetrievalStatus.LOADED and message.slot == LOGS and not snapshot.lines:
            self.notify("No log lines in this time range", severity="warning")

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Turn an unexpected crash inside a fetcher into a Failed status."""
        worker = event.worker
        if worker.group not in self._states or event.state not in _WORKER_DONE:
            return
        generation = self._worker_generations.pop(worker, None)
        if event.state != WorkerState.ERROR or generation is None:
            return
        logger.error("Retrieval worker %s crashed", worker.group, exc_info=worker.error)
        state = self._states[worker.group]
        failed = RetrievalSnapshot(
            status=RetrievalStatus.FAILED,
            lines=state.lines if state.generation == generation else (),
            reason=str(worker.error) or type(worker.error).__name__,
            generation=generation,
        )
        self.post_message(RetrievalUpdated(worker.group, failed))

    def _tick(self) -> None:
        slot = LOGS if self.viewing_logs else GROUPS
        if self._states[slot].status.in_progress:
            elapsed = self._clock() - self._started_at.get(slot, self._clock())
            self.query_one("#status-bar", StatusBar).tick(elapsed)

    # --- Focus routing ---

    def on_group_list_selected(self, message: GroupList.Selected) -> None:
        self._log_group = message.log_group
        group_list = self.query_one("#group-list", GroupList)
        viewer = self.query_one("#log-viewer", LogViewer)
        viewer.open(message.log_group)
        group_list.display = False
        viewer.display = True
        viewer.focus()
        self.query_one("#status-bar", StatusBar).set_view(LOGS, message.log_group)
        self._load_logs()

    def on_group_list_reload_requested(self, _message: GroupList.ReloadRequested) -> None:
        if self._states[GROUPS].status.in_progress:
            self.notify("Already loading log groups", severity="warning")
            return
        self._load_groups()

    def on_log_viewer_rerun_requested(self, _message: LogViewer.RerunRequested) -> None:
        self._load_logs()

    def on_log_viewer_closed(self, _message: LogViewer.Closed) -> None:
        self.workers.cancel_group(self, LOGS)
        self._states[LOGS].clear()
        self._log_group = None
        group_list = self.query_one("#group-list", GroupList)
        viewer = self.query_one("#log-viewer", LogViewer)
        viewer.display = False
        viewer.set_snapshot(self._states[LOGS].snapshot)
        group_list.display = True
        group_list.focus()
        status_bar = self.query_one("#status-bar", StatusBar)
        status_bar.set_view(GROUPS)
        status_bar.set_snapshot(self._states[GROUPS].snapshot)

    # --- Misc ---

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_toggle_theme(self) -> None:
        self.theme = _THEMES[1] if self.theme == _THEMES[0] else _THEMES[0]
        if self._persist_config:
            stored = load_config()
            stored.theme = self.theme
            save_config(stored)
