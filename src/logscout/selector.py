"""Log group list state: candidates, search term, filtered view and cursor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from logscout.matcher import filter_candidates

if TYPE_CHECKING:
    from collections.abc import Iterable

    from logscout.models import MatchResult


class GroupSelector:
    """Filters an immutable list of group names as a search term is typed.

    The filtered view is rebuilt from the full candidate list on every
    change of the term; with no term it is the candidate list in its
    original order.
    """

    def __init__(self, candidates: Iterable[str] = ()) -> None:
        self._candidates: tuple[str, ...] = tuple(candidates)
        self._term = ""
        self._searching = False
        self._filtered: list[MatchResult] = []
        self._names: list[str] = []
        self.cursor = 0
        self._refilter()

    @property
    def candidates(self) -> tuple[str, ...]:
        return self._candidates

    @property
    def term(self) -> str:
        return self._term

    @property
    def searching(self) -> bool:
        return self._searching

    @property
    def matches(self) -> list[MatchResult]:
        return self._filtered

    @property
    def names(self) -> list[str]:
        """Names in the filtered view, in display order."""
        return self._names

    @property
    def selected(self) -> str | None:
        if not self._names:
            return None
        return self._names[self.cursor]

    def emphasis(self, index: int) -> tuple[int, ...]:
        """Matched character positions of the name at ``index``."""
        if 0 <= index < len(self._filtered):
            return self._filtered[index].indices
        return ()

    def _refilter(self) -> None:
        self._filtered = filter_candidates(self._candidates, self._term)
        self._names = [m.candidate for m in self._filtered]
        self.cursor = min(self.cursor, max(0, len(self._names) - 1))

    def set_candidates(self, candidates: Iterable[str]) -> None:
        """Replace the candidate list, keeping the current term applied."""
        self._candidates = tuple(candidates)
        self._refilter()

    def start_search(self) -> None:
        self._searching = True

    def set_term(self, term: str) -> None:
        if term == self._term:
            return
        self._term = term
        self.cursor = 0
        self._refilter()

    def type_char(self, char: str) -> None:
        self.set_term(self._term + char)

    def backspace(self) -> None:
        self.set_term(self._term[:-1])

    def cancel_search(self) -> None:
        """Leave search mode and restore the unfiltered list."""
        self._searching = False
        self.set_term("")

    def move_up(self, amount: int = 1) -> None:
        self.cursor = max(0, self.cursor - amount)

    def move_down(self, amount: int = 1) -> None:
        self.cursor = max(0, min(len(self._names) - 1, self.cursor + amount))

    def move_first(self) -> None:
        self.cursor = 0

    def move_last(self) -> None:
        self.cursor = max(0, len(self._names) - 1)
