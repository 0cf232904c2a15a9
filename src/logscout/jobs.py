"""Retrieval jobs run by PollingFetcher: group listing and log queries."""

from __future__ import annotations

import asyncio
import re
import uuid
from typing import TYPE_CHECKING, Protocol

from logscout.fetcher import PollOutcome
from logscout.models import QueryStatus
from logscout.utils import extract_message

if TYPE_CHECKING:
    from collections.abc import Sequence

    from logscout.models import QueryPage, QueryRow

MESSAGE_FIELD = "@message"
TIMESTAMP_FIELD = "@timestamp"

_FIELDS_RE = re.compile(r"^\s*fields\s+", re.IGNORECASE)


class LogService(Protocol):
    """The remote log store. Calls block and raise LogServiceError on failure."""

    def list_groups(self, prefix: str | None = None, next_token: str | None = None) -> tuple[list[str], str | None]: ...

    def start_query(self, log_group: str, start_ms: int, end_ms: int, query: str) -> str: ...

    def poll_query(self, query_id: str) -> QueryPage: ...


def with_timestamp(query: str) -> str:
    """Make sure ``query`` returns the ``@timestamp`` field used for ordering."""
    if TIMESTAMP_FIELD in query:
        return query
    if _FIELDS_RE.match(query):
        return _FIELDS_RE.sub(lambda m: f"{m.group(0)}{TIMESTAMP_FIELD}, ", query, count=1)
    return f"fields {TIMESTAMP_FIELD} | {query}"


def extract_lines(rows: Sequence[QueryRow], message_key: str | None = None) -> tuple[str, ...]:
    """Turn result rows into display lines, oldest first.

    Rows are ordered by their ``@timestamp`` field whatever order the
    service returned them in. A row without a timestamp sorts with the
    nearest timestamped row before it, and the sort is stable, so such rows
    (and rows sharing a timestamp) keep their place.
    """
    keyed: list[tuple[str, QueryRow]] = []
    last = ""
    for row in rows:
        last = row.get(TIMESTAMP_FIELD) or last
        keyed.append((last, row))
    ordered = [row for _, row in sorted(keyed, key=lambda item: item[0])]
    lines: list[str] = []
    for row in ordered:
        message = row.get(MESSAGE_FIELD)
        if message is None:
            continue
        lines.append(extract_message(message.rstrip("\n"), message_key))
    return tuple(lines)


class GroupListingJob:
    """Lists log group names, one page per poll, until no continuation token remains."""

    def __init__(self, service: LogService, prefix: str | None = None) -> None:
        self._service = service
        self._prefix = prefix
        self._names: list[str] = []
        self._next_token: str | None = None

    async def start(self) -> str:
        self._names = []
        self._next_token = None
        return uuid.uuid4().hex

    async def poll(self, handle: str) -> PollOutcome[tuple[str, ...]]:  # noqa: ARG002
        names, self._next_token = await asyncio.to_thread(self._service.list_groups, self._prefix, self._next_token)
        self._names.extend(names)
        status = QueryStatus.RUNNING if self._next_token else QueryStatus.COMPLETE
        return PollOutcome(status=status, result=tuple(self._names))


class LogQueryJob:
    """Runs one Logs Insights query over ``[start_ms, end_ms]`` for a log group."""

    def __init__(  # noqa: PLR0913
        self,
        service: LogService,
        log_group: str,
        start_ms: int,
        end_ms: int,
        query: str,
        message_key: str | None = None,
    ) -> None:
        self._service = service
        self.log_group = log_group
        self._start_ms = start_ms
        self._end_ms = end_ms
        self._query = with_timestamp(query)
        self._message_key = message_key

    async def start(self) -> str:
        return await asyncio.to_thread(
            self._service.start_query, self.log_group, self._start_ms, self._end_ms, self._query
        )

    async def poll(self, handle: str) -> PollOutcome[tuple[str, ...]]:
        page = await asyncio.to_thread(self._service.poll_query, handle)
        return PollOutcome(status=page.status, result=extract_lines(page.rows, self._message_key))
