"""Render-side owner of the latest retrieval result."""

from __future__ import annotations

import itertools
import logging

from logscout.models import RetrievalSnapshot, RetrievalStatus

logger = logging.getLogger(__name__)

_generations = itertools.count(1)


class ResultState:
    """Holds the last snapshot received for one view.

    Fetchers never touch this object: they publish immutable
    ``RetrievalSnapshot`` values tagged with the generation they were started
    for, and the render loop hands them to ``apply``. Starting a new
    retrieval (``begin``) bumps the generation, so anything still arriving
    from a superseded task is dropped instead of racing the new one.
    """

    def __init__(self) -> None:
        self._generation = next(_generations)
        self._snapshot = RetrievalSnapshot(generation=self._generation)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def snapshot(self) -> RetrievalSnapshot:
        return self._snapshot

    @property
    def status(self) -> RetrievalStatus:
        return self._snapshot.status

    @property
    def lines(self) -> tuple[str, ...]:
        return self._snapshot.lines

    def begin(self) -> int:
        """Start a fresh retrieval, returning the generation it must publish under."""
        self._generation = next(_generations)
        self._snapshot = RetrievalSnapshot(status=RetrievalStatus.SUBMITTED, generation=self._generation)
        return self._generation

    def apply(self, snapshot: RetrievalSnapshot) -> bool:
        """Store ``snapshot`` if it belongs to the current generation.

        Returns False (and keeps the current snapshot) for stale snapshots.
        """
        if snapshot.generation != self._generation:
            logger.debug("Dropping stale snapshot (gen %d, current %d)", snapshot.generation, self._generation)
            return False
        self._snapshot = snapshot
        return True

    def clear(self) -> None:
        """Forget the current result; late snapshots for it become no-ops."""
        self._generation = next(_generations)
        self._snapshot = RetrievalSnapshot(generation=self._generation)
