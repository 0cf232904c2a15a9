"""Submit-then-poll retrieval state machine.

One ``PollingFetcher`` drives one ``RetrievalJob`` through::

    Idle -> Submitted -> Running* -> Loaded | Failed | TimedOut

and publishes an immutable ``RetrievalSnapshot`` after every change. The
fetcher owns its result exclusively; the receiving side only ever sees the
values it was sent.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from logscout.errors import LogServiceError
from logscout.models import QueryStatus, RetrievalSnapshot, RetrievalStatus

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Sequence[str])
T_co = TypeVar("T_co", bound=Sequence[str], covariant=True)

_TRANSITIONS: dict[RetrievalStatus, set[RetrievalStatus]] = {
    RetrievalStatus.IDLE: {RetrievalStatus.SUBMITTED},
    RetrievalStatus.SUBMITTED: {
        RetrievalStatus.RUNNING,
        RetrievalStatus.LOADED,
        RetrievalStatus.FAILED,
        RetrievalStatus.TIMED_OUT,
    },
    RetrievalStatus.RUNNING: {
        RetrievalStatus.RUNNING,
        RetrievalStatus.LOADED,
        RetrievalStatus.FAILED,
        RetrievalStatus.TIMED_OUT,
    },
    RetrievalStatus.LOADED: set(),
    RetrievalStatus.FAILED: set(),
    RetrievalStatus.TIMED_OUT: set(),
}


@dataclass(frozen=True)
class PollOutcome(Generic[T]):
    """What one poll of a job produced: the remote status and the lines so far."""

    status: QueryStatus
    result: T


class RetrievalJob(Protocol[T_co]):
    """A remote operation that is started once and then polled until done."""

    async def start(self) -> str:
        """Submit the operation and return an opaque handle."""
        ...

    async def poll(self, handle: str) -> PollOutcome[T_co]:
        """Fetch the current status and (partial) result for ``handle``."""
        ...


class InvalidTransitionError(RuntimeError):
    """Raised when the state machine is driven out of order."""


class PollingFetcher(Generic[T]):
    """Runs a ``RetrievalJob`` to a terminal status.

    Polls are issued one at a time, so responses are handled strictly in
    the order they were requested. The delay between polls starts at
    ``interval`` and grows by ``backoff`` after every non-terminal poll, up
    to ``max_interval``. If ``timeout`` seconds pass without a terminal
    status the fetcher gives up with ``TimedOut``.
    """

    def __init__(  # noqa: PLR0913
        self,
        job: RetrievalJob[T],
        publish: Callable[[RetrievalSnapshot], None],
        *,
        generation: int = 0,
        interval: float = 0.25,
        backoff: float = 1.5,
        max_interval: float = 2.0,
        timeout: float | None = 300.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._job = job
        self._publish = publish
        self._generation = generation
        self._interval = interval
        self._backoff = backoff
        self._max_interval = max_interval
        self._timeout = timeout
        self._sleep = sleep
        self._clock = clock
        self._snapshot = RetrievalSnapshot(generation=generation)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def status(self) -> RetrievalStatus:
        return self._snapshot.status

    @property
    def snapshot(self) -> RetrievalSnapshot:
        return self._snapshot

    def _transition(self, status: RetrievalStatus, lines: Sequence[str] | None = None, reason: str | None = None) -> None:
        current = self._snapshot.status
        if status not in _TRANSITIONS[current]:
            msg = f"Invalid transition {current.value} -> {status.value}"
            raise InvalidTransitionError(msg)
        new_lines = tuple(lines) if lines is not None else self._snapshot.lines
        if status == current and new_lines == self._snapshot.lines:
            return
        if status != current:
            logger.debug("Retrieval gen %d: %s -> %s", self._generation, current.value, status.value)
        self._snapshot = RetrievalSnapshot(status=status, lines=new_lines, reason=reason, generation=self._generation)
        self._publish(self._snapshot)

    def _fail(self, status: RetrievalStatus, reason: str) -> RetrievalSnapshot:
        logger.warning("Retrieval gen %d %s: %s", self._generation, status.value, reason)
        self._transition(status, reason=reason)
        return self._snapshot

    async def run(self) -> RetrievalSnapshot:
        """Drive the job to a terminal status and return the final snapshot.

        Calling ``run`` again after a terminal status restarts the job from
        ``Submitted``.
        """
        if self._snapshot.status.in_progress:
            msg = "Retrieval already in progress"
            raise InvalidTransitionError(msg)
        self._snapshot = RetrievalSnapshot(generation=self._generation)
        self._transition(RetrievalStatus.SUBMITTED, lines=())

        try:
            handle = await self._job.start()
        except LogServiceError as exc:
            return self._fail(RetrievalStatus.FAILED, str(exc))

        deadline = None if self._timeout is None else self._clock() + self._timeout
        delay = self._interval
        while True:
            await self._sleep(delay)
            if deadline is not None and self._clock() >= deadline:
                return self._fail(RetrievalStatus.TIMED_OUT, f"no result after {self._timeout:g}s")

            try:
                outcome = await self._job.poll(handle)
            except LogServiceError as exc:
                return self._fail(RetrievalStatus.FAILED, str(exc))

            if outcome.status == QueryStatus.COMPLETE:
                self._transition(RetrievalStatus.LOADED, lines=outcome.result)
                logger.debug("Retrieval gen %d loaded %d lines", self._generation, len(outcome.result))
                return self._snapshot
            if outcome.status in {QueryStatus.FAILED, QueryStatus.CANCELLED}:
                return self._fail(RetrievalStatus.FAILED, f"query {outcome.status.value.lower()}")
            if outcome.status == QueryStatus.TIMEOUT:
                return self._fail(RetrievalStatus.TIMED_OUT, "query timed out on the service")

            self._transition(RetrievalStatus.RUNNING, lines=outcome.result)
            delay = min(self._max_interval, delay * self._backoff)
