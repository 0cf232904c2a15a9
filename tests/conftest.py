"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from logscout.errors import LogServiceError
from logscout.models import QueryPage, QueryRow, QueryStatus

if TYPE_CHECKING:
    from pathlib import Path

SAMPLE_GROUPS = [
    "/aws/lambda/api-gateway",
    "/aws/lambda/auth-service",
    "/aws/ecs/billing",
    "/aws/rds/orders-db",
]


def make_row(timestamp: str | None, message: str | None) -> QueryRow:
    """Build a result row the way the service returns it."""
    fields: list[tuple[str, str]] = []
    if timestamp is not None:
        fields.append(("@timestamp", timestamp))
    if message is not None:
        fields.append(("@message", message))
    fields.append(("@ptr", "ptr"))
    return QueryRow(fields=fields)


SAMPLE_ROWS = [
    make_row("2024-01-15 10:30:02.000", "third"),
    make_row("2024-01-15 10:30:00.000", "first"),
    make_row("2024-01-15 10:30:01.000", "second"),
]


class FakeLogService:
    """In-memory LogService: pages of group names and scripted query pages."""

    def __init__(
        self,
        groups: list[str] | None = None,
        pages: list[QueryPage] | None = None,
        page_size: int = 2,
    ) -> None:
        self.groups = list(SAMPLE_GROUPS if groups is None else groups)
        self.pages = list(pages or [QueryPage(status=QueryStatus.COMPLETE, rows=SAMPLE_ROWS)])
        self.page_size = page_size
        self.queries: list[tuple[str, int, int, str]] = []
        self.fail_start: str | None = None

    def list_groups(self, prefix: str | None = None, next_token: str | None = None) -> tuple[list[str], str | None]:
        names = [g for g in self.groups if not prefix or g.startswith(prefix)]
        offset = int(next_token or 0)
        page = names[offset : offset + self.page_size]
        rest = offset + self.page_size
        return page, str(rest) if rest < len(names) else None

    def start_query(self, log_group: str, start_ms: int, end_ms: int, query: str) -> str:
        if self.fail_start:
            raise LogServiceError(self.fail_start)
        self.queries.append((log_group, start_ms, end_ms, query))
        return f"query-{len(self.queries)}"

    def poll_query(self, query_id: str) -> QueryPage:  # noqa: ARG002
        if len(self.pages) > 1:
            return self.pages.pop(0)
        return self.pages[0]


@pytest.fixture
def service() -> FakeLogService:
    return FakeLogService()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temporary path."""
    directory = tmp_path / "config"
    monkeypatch.setenv("LOGSCOUT_CONFIG_DIR", str(directory))
    return directory
