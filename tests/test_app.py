"""UI tests driving the application with Textual's pilot."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from textual.worker import WorkerState
from conftest import SAMPLE_GROUPS, FakeLogService, make_row

from logscout.app import GROUPS, LOGS, LogScoutApp
from logscout.errors import LogServiceError
from logscout.models import AppConfig, QueryPage, QueryRow, QueryStatus, RetrievalStatus
from logscout.widgets.group_list import GroupList
from logscout.widgets.help_screen import HelpScreen
from logscout.widgets.log_viewer import LogViewer
from logscout.widgets.status_bar import StatusBar

if TYPE_CHECKING:
    from textual.pilot import Pilot

FAST = AppConfig(poll_interval=0.01, poll_max_interval=0.01)


def _make_app(service: FakeLogService, **kwargs: object) -> LogScoutApp:
    return LogScoutApp(service, FAST, persist_config=False, **kwargs)  # type: ignore[arg-type]


async def _settle(app: LogScoutApp, pilot: Pilot[None]) -> None:
    """Wait until both retrieval slots have reached a resting status."""
    for _ in range(100):
        await pilot.pause(0.05)
        await app.workers.wait_for_complete()
        await pilot.pause()
        if not any(app.state(slot).status.in_progress for slot in (GROUPS, LOGS)):
            return


class TestGroupListFlow:
    @pytest.mark.asyncio
    async def test_groups_loaded_on_start(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            group_list = app.query_one("#group-list", GroupList)
            assert app.state(GROUPS).status == RetrievalStatus.LOADED
            assert group_list.selector.names == SAMPLE_GROUPS
            assert app.focused is group_list

    @pytest.mark.asyncio
    async def test_prefix_limits_groups(self, service: FakeLogService) -> None:
        app = _make_app(service, prefix="/aws/lambda/")
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            names = app.query_one("#group-list", GroupList).selector.names
            assert names == ["/aws/lambda/api-gateway", "/aws/lambda/auth-service"]

    @pytest.mark.asyncio
    async def test_search_filters_list(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            group_list = app.query_one("#group-list", GroupList)

            await pilot.press("slash", "o", "r", "d")
            assert group_list.selector.searching
            assert group_list.selector.names == ["/aws/rds/orders-db"]

            await pilot.press("backspace", "backspace", "backspace")
            assert group_list.selector.term == ""

            await pilot.press("escape")
            assert not group_list.selector.searching
            assert group_list.selector.names == SAMPLE_GROUPS

    @pytest.mark.asyncio
    async def test_search_captures_binding_keys(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            group_list = app.query_one("#group-list", GroupList)

            await pilot.press("slash", "q", "r", "j")
            assert group_list.selector.term == "qrj"
            assert app.is_running

    @pytest.mark.asyncio
    async def test_cursor_moves(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            group_list = app.query_one("#group-list", GroupList)

            await pilot.press("j", "j")
            assert group_list.selector.selected == SAMPLE_GROUPS[2]
            await pilot.press("k")
            assert group_list.selector.selected == SAMPLE_GROUPS[1]
            await pilot.press("G")
            assert group_list.selector.selected == SAMPLE_GROUPS[-1]

    @pytest.mark.asyncio
    async def test_failed_listing(self) -> None:
        service = FakeLogService()
        service.list_groups = _raise_listing  # type: ignore[method-assign]
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            snapshot = app.state(GROUPS).snapshot
            assert snapshot.status == RetrievalStatus.FAILED
            assert snapshot.reason == "AccessDeniedException: denied"


def _raise_listing(prefix: str | None = None, next_token: str | None = None) -> tuple[list[str], str | None]:
    raise LogServiceError("AccessDeniedException: denied")


class TestLogViewerFlow:
    @pytest.mark.asyncio
    async def test_open_and_close_viewer(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            group_list = app.query_one("#group-list", GroupList)
            viewer = app.query_one("#log-viewer", LogViewer)

            await pilot.press("slash", "a", "u", "t", "h", "enter")
            await _settle(app, pilot)

            assert app.viewing_logs
            assert viewer.display
            assert not group_list.display
            assert viewer.log_group == "/aws/lambda/auth-service"
            assert service.queries[0][0] == "/aws/lambda/auth-service"
            assert service.queries[0][3] == FAST.query
            assert app.state(LOGS).status == RetrievalStatus.LOADED
            assert viewer.snapshot.lines == ("first", "second", "third")
            assert app.focused is viewer

            await pilot.press("escape")
            await pilot.pause()

            assert not app.viewing_logs
            assert group_list.display
            assert not viewer.display
            assert app.focused is group_list
            assert app.state(LOGS).status == RetrievalStatus.IDLE

    @pytest.mark.asyncio
    async def test_time_range(self, service: FakeLogService) -> None:
        app = _make_app(service, start="2024-01-15T10:00:00+00:00", end="2024-01-15T11:00:00+00:00")
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            _, start_ms, end_ms, _ = service.queries[0]
            assert (start_ms, end_ms) == (1_705_312_800_000, 1_705_316_400_000)

    @pytest.mark.asyncio
    async def test_relative_start_counts_back_from_end(self, service: FakeLogService) -> None:
        app = _make_app(service, start="1h", end="2024-01-15T11:00:00+00:00")
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            _, start_ms, end_ms, _ = service.queries[0]
            assert end_ms - start_ms == 3_600_000

    @pytest.mark.asyncio
    async def test_scrolling_keys(self) -> None:
        rows_page = QueryPage(
            status=QueryStatus.COMPLETE,
            rows=[_row(i) for i in range(100)],
        )
        service = FakeLogService(pages=[rows_page])
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            viewer = app.query_one("#log-viewer", LogViewer)

            assert viewer.viewport.current_index == 99
            await pilot.press("k", "k")
            assert viewer.viewport.scroll_offset == 2
            await pilot.press("ctrl+u")
            assert viewer.viewport.scroll_offset == 12
            await pilot.press("ctrl+d", "j")
            assert viewer.viewport.scroll_offset == 1
            await pilot.press("G")
            assert viewer.viewport.scroll_offset == 0

    @pytest.mark.asyncio
    async def test_query_failure(self, service: FakeLogService) -> None:
        service.fail_start = "MalformedQueryException: bad query"
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            snapshot = app.state(LOGS).snapshot
            assert snapshot.status == RetrievalStatus.FAILED
            assert snapshot.reason == "MalformedQueryException: bad query"

    @pytest.mark.asyncio
    async def test_rerun(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            await pilot.press("r")
            await _settle(app, pilot)
            assert len(service.queries) == 2
            assert app.state(LOGS).status == RetrievalStatus.LOADED

    @pytest.mark.asyncio
    async def test_worker_crash_marks_failed(self, service: FakeLogService) -> None:
        service.poll_query = _crash_poll  # type: ignore[method-assign]
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            snapshot = app.state(LOGS).snapshot
            assert snapshot.status == RetrievalStatus.FAILED
            assert snapshot.reason == "boom"

    @pytest.mark.asyncio
    async def test_crash_from_superseded_worker_ignored(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("enter")
            await _settle(app, pilot)
            old_generation = app.state(LOGS).generation
            await pilot.press("r")
            await _settle(app, pilot)

            old_worker = MagicMock(group=LOGS, error=RuntimeError("late crash"))
            app._worker_generations[old_worker] = old_generation
            app.on_worker_state_changed(MagicMock(worker=old_worker, state=WorkerState.ERROR))
            await pilot.pause()

            assert app.state(LOGS).status == RetrievalStatus.LOADED
            assert app.state(LOGS).generation != old_generation


def _crash_poll(query_id: str) -> QueryPage:
    msg = "boom"
    raise RuntimeError(msg)


def _row(index: int) -> QueryRow:
    return make_row(f"2024-01-15 10:{index // 60:02d}:{index % 60:02d}.000", f"line {index}")


class TestMisc:
    @pytest.mark.asyncio
    async def test_help_screen(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("h")
            assert isinstance(app.screen, HelpScreen)
            await pilot.press("escape")
            assert not isinstance(app.screen, HelpScreen)

    @pytest.mark.asyncio
    async def test_toggle_theme(self, service: FakeLogService) -> None:
        app = _make_app(service)
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            await pilot.press("t")
            assert app.theme == "textual-light"
            await pilot.press("t")
            assert app.theme == "textual-dark"

    @pytest.mark.asyncio
    async def test_status_bar_aligns_wide_source(self, service: FakeLogService) -> None:
        app = _make_app(service, source="東京 prod")
        async with app.run_test(size=(100, 30)) as pilot:
            await _settle(app, pilot)
            status_bar = app.query_one("#status-bar", StatusBar)
            rendered = status_bar.render()
            assert rendered.plain.endswith("東京 prod")
            assert rendered.cell_len == status_bar.size.width
