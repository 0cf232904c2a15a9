"""Fuzzy matcher used to filter and highlight log group names.

Scoring follows the skim/fzf "v2" model: every matched character earns a
base score plus a bonus that depends on where it sits (word boundaries,
camelCase humps, digits after letters), consecutive matches are rewarded,
and gaps between matched characters are penalised. The best alignment is
found with dynamic programming so the returned indices are the ones that
produced the score.

Matching is smart-case: case-insensitive unless the term has an upper case
character.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from logscout.models import MatchResult

if TYPE_CHECKING:
    from collections.abc import Iterable

SCORE_THRESHOLD = 5

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_CAMEL_123 = BONUS_BOUNDARY + SCORE_GAP_EXTENSION
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)
BONUS_FIRST_CHAR_MULTIPLIER = 2

_NEG_INF = -(1 << 30)


class _CharClass(IntEnum):
    NON_WORD = 0
    LOWER = 1
    UPPER = 2
    NUMBER = 3


def _char_class(ch: str) -> _CharClass:
    if ch.islower():
        return _CharClass.LOWER
    if ch.isupper():
        return _CharClass.UPPER
    if ch.isdigit():
        return _CharClass.NUMBER
    if ch.isalpha():
        return _CharClass.LOWER
    return _CharClass.NON_WORD


def _bonus_for(prev: _CharClass, cur: _CharClass) -> int:
    if prev == _CharClass.NON_WORD and cur != _CharClass.NON_WORD:
        return BONUS_BOUNDARY
    if (prev == _CharClass.LOWER and cur == _CharClass.UPPER) or (
        prev != _CharClass.NUMBER and cur == _CharClass.NUMBER
    ):
        return BONUS_CAMEL_123
    if cur == _CharClass.NON_WORD:
        return BONUS_NON_WORD
    return 0


def _bonuses(candidate: str) -> list[int]:
    prev = _CharClass.NON_WORD
    bonuses: list[int] = []
    for ch in candidate:
        cur = _char_class(ch)
        bonuses.append(_bonus_for(prev, cur))
        prev = cur
    return bonuses


def _fold(value: str) -> str:
    # Per character so indices stay aligned with the original string.
    return "".join(low if len(low := ch.lower()) == 1 else ch for ch in value)


def _is_subsequence(term: str, text: str) -> bool:
    it = iter(text)
    return all(ch in it for ch in term)


def fuzzy_match(candidate: str, term: str) -> tuple[int, tuple[int, ...]] | None:
    """Score ``candidate`` against ``term``.

    Returns ``(score, matched_indices)`` or ``None`` when the characters of
    ``term`` do not all appear, in order, in ``candidate``. An empty term
    matches with score 0 and no indices; callers treat it as "no filtering".
    """
    if not term:
        return 0, ()

    case_sensitive = any(ch.isupper() for ch in term)
    text = candidate if case_sensitive else _fold(candidate)
    pattern = term if case_sensitive else _fold(term)
    if not _is_subsequence(pattern, text):
        return None

    n, m = len(text), len(pattern)
    bonuses = _bonuses(candidate)

    # score[i][j]: best score with pattern[i] matched at text[j]
    score = [[_NEG_INF] * n for _ in range(m)]
    # run_bonus[i][j]: bonus of the first character of the consecutive run ending at (i, j)
    run_bonus = [[0] * n for _ in range(m)]
    back = [[-1] * n for _ in range(m)]

    for j in range(n):
        if text[j] == pattern[0]:
            score[0][j] = SCORE_MATCH + bonuses[j] * BONUS_FIRST_CHAR_MULTIPLIER
            run_bonus[0][j] = bonuses[j]

    for i in range(1, m):
        prev_row = score[i - 1]
        gap_best = _NEG_INF
        gap_from = -1
        for j in range(i, n):
            # Gap candidates: previous char matched at k <= j - 2.
            if j >= 2:
                opened = prev_row[j - 2] + SCORE_GAP_START
                extended = gap_best + SCORE_GAP_EXTENSION if gap_best > _NEG_INF else _NEG_INF
                if opened >= extended:
                    gap_best, gap_from = opened, j - 2
                else:
                    gap_best = extended
            if text[j] != pattern[i]:
                continue

            best = _NEG_INF
            if gap_best > _NEG_INF:
                best = gap_best + SCORE_MATCH + bonuses[j]
                back[i][j] = gap_from
                run_bonus[i][j] = bonuses[j]

            if prev_row[j - 1] > _NEG_INF:
                chunk = run_bonus[i - 1][j - 1]
                if bonuses[j] >= BONUS_BOUNDARY and bonuses[j] > chunk:
                    chunk = bonuses[j]
                consecutive = prev_row[j - 1] + SCORE_MATCH + max(chunk, BONUS_CONSECUTIVE, bonuses[j])
                if consecutive >= best:
                    best = consecutive
                    back[i][j] = j - 1
                    run_bonus[i][j] = chunk

            score[i][j] = best

    last = score[m - 1]
    end = max(range(n), key=lambda j: (last[j], -j))
    if last[end] <= _NEG_INF:
        return None

    indices = [end]
    for i in range(m - 1, 0, -1):
        indices.append(back[i][indices[-1]])
    indices.reverse()
    return last[end], tuple(indices)


def filter_candidates(candidates: Iterable[str], term: str) -> list[MatchResult]:
    """Filter ``candidates`` by ``term``, keeping the original order.

    An empty term returns every candidate untouched. Otherwise only
    candidates scoring above SCORE_THRESHOLD are kept.
    """
    if not term:
        return [MatchResult(candidate=c) for c in candidates]

    results: list[MatchResult] = []
    for candidate in candidates:
        matched = fuzzy_match(candidate, term)
        if matched is None:
            continue
        score, indices = matched
        if score > SCORE_THRESHOLD:
            results.append(MatchResult(candidate=candidate, score=score, indices=indices))
    return results
