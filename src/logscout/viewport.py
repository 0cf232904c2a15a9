"""Scroll-aware window over a line sequence, rendered into a bordered frame.

The viewport never copies its line sequence: it keeps a reference to the
sequence it was given and only indexes the rows that are visible. Swapping
in a new sequence (``set_lines``) replaces the reference wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from rich.cells import cell_len, set_cell_size
from rich.segment import Segment
from rich.style import Style
from textual.strip import Strip

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_CONTROL_CHARS = {ord("\n"): "↵", ord("\r"): None, ord("\t"): "    "}
_CONTROL_CHARS.update({c: None for c in range(32) if c not in _CONTROL_CHARS})


class Anchor(StrEnum):
    """Which end of the sequence a zero scroll offset shows."""

    BOTTOM = "bottom"
    TOP = "top"


@dataclass
class ViewportStyles:
    """Rich styles used when rendering rows."""

    base: Style = field(default_factory=Style)
    border: Style = field(default_factory=lambda: Style(dim=True))
    title: Style = field(default_factory=lambda: Style(bold=True))
    status: Style = field(default_factory=Style)
    cursor: Style = field(default_factory=lambda: Style(bgcolor="red", color="white"))
    emphasis: Style = field(default_factory=lambda: Style(bold=True, color="red"))
    placeholder: Style = field(default_factory=lambda: Style(dim=True, italic=True))


def sanitize(line: str) -> str:
    """Make a log line safe for single-row rendering."""
    return line.translate(_CONTROL_CHARS)


def _fit(text: str, cells: int) -> str:
    return text if cell_len(text) <= cells else set_cell_size(text, cells)


def _sanitize_positions(line: str, positions: set[int]) -> tuple[str, set[int]]:
    """Sanitize ``line`` and move ``positions`` along with the characters they point at."""
    parts: list[str] = []
    mapped: set[int] = set()
    offset = 0
    for i, ch in enumerate(line):
        replacement = _CONTROL_CHARS.get(ord(ch), ch) or ""
        if i in positions:
            mapped.update(range(offset, offset + len(replacement)))
        parts.append(replacement)
        offset += len(replacement)
    return "".join(parts), mapped


class Viewport:
    """Owns a scroll offset over a referenced line sequence.

    With ``Anchor.BOTTOM`` (the log viewer) offset 0 shows the most recent
    lines at the bottom and growing offsets move the window towards older
    lines; the bottom visible row is the current line. With ``Anchor.TOP``
    (the group list) offset 0 shows the first lines and the owner keeps an
    explicit cursor visible through ``reveal``.
    """

    def __init__(self, lines: Sequence[str] = (), *, anchor: Anchor = Anchor.BOTTOM) -> None:
        self._lines: Sequence[str] = lines
        self._anchor = anchor
        self._inner_height = 0
        self.scroll_offset = 0

    @property
    def lines(self) -> Sequence[str]:
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def inner_height(self) -> int:
        return self._inner_height

    @property
    def max_offset(self) -> int:
        return max(0, self.line_count - self._inner_height)

    def _clamp(self) -> None:
        self.scroll_offset = min(max(0, self.scroll_offset), self.max_offset)

    def set_lines(self, lines: Sequence[str]) -> None:
        """Swap in a new line sequence and re-clamp the offset."""
        self._lines = lines
        self._clamp()

    def resize(self, height: int) -> None:
        """Record the outer height of the display area (two rows are border)."""
        self._inner_height = max(0, height - 2)
        self._clamp()

    def scroll_up(self, amount: int = 1) -> None:
        """Move the window towards the start (older lines)."""
        if self._anchor == Anchor.BOTTOM:
            self.scroll_offset += amount
        else:
            self.scroll_offset -= amount
        self._clamp()

    def scroll_down(self, amount: int = 1) -> None:
        """Move the window towards the end (newer lines)."""
        if self._anchor == Anchor.BOTTOM:
            self.scroll_offset -= amount
        else:
            self.scroll_offset += amount
        self._clamp()

    def scroll_page_up(self) -> None:
        self.scroll_up(max(1, self._inner_height))

    def scroll_page_down(self) -> None:
        self.scroll_down(max(1, self._inner_height))

    def scroll_home(self) -> None:
        """Show the first lines of the sequence."""
        self.scroll_offset = self.max_offset if self._anchor == Anchor.BOTTOM else 0

    def scroll_end(self) -> None:
        """Show the last lines of the sequence."""
        self.scroll_offset = 0 if self._anchor == Anchor.BOTTOM else self.max_offset

    def reveal(self, index: int) -> None:
        """Scroll the minimum amount needed for ``index`` to be visible."""
        start, stop = self.window()
        if self._anchor == Anchor.TOP:
            if index < start:
                self.scroll_offset = index
            elif index >= stop and self._inner_height:
                self.scroll_offset = index - self._inner_height + 1
        elif index < start:
            self.scroll_offset += start - index
        elif index >= stop:
            self.scroll_offset -= index - stop + 1
        self._clamp()

    def window(self) -> tuple[int, int]:
        """Return the ``[start, stop)`` indices of the visible slice."""
        n = self.line_count
        inner = self._inner_height
        start = min(self.scroll_offset, max(0, n - inner))
        if self._anchor == Anchor.BOTTOM:
            return max(0, n - inner - start), max(0, n - start)
        return start, min(n, start + inner)

    @property
    def current_index(self) -> int | None:
        """Index of the current-line indicator in bottom-anchored mode."""
        if self._anchor != Anchor.BOTTOM or not self._lines or not self._inner_height:
            return None
        return self.window()[1] - 1

    # --- Rendering ---

    def render(
        self,
        width: int,
        height: int,
        *,
        title: str = "",
        status: str = "",
        footer: str = "",
        hint: str = "",
        placeholder: str | None = None,
        cursor: int | None = None,
        emphasis: Callable[[int], Sequence[int]] | None = None,
        styles: ViewportStyles | None = None,
    ) -> list[Strip]:
        """Render every row of a ``width`` x ``height`` area."""
        if height < 1 or width < 1:
            return []
        return [
            self.render_row(
                y,
                width,
                height,
                title=title,
                status=status,
                footer=footer,
                hint=hint,
                placeholder=placeholder,
                cursor=cursor,
                emphasis=emphasis,
                styles=styles,
            )
            for y in range(height)
        ]

    def render_row(  # noqa: PLR0913
        self,
        y: int,
        width: int,
        height: int,
        *,
        title: str = "",
        status: str = "",
        footer: str = "",
        hint: str = "",
        placeholder: str | None = None,
        cursor: int | None = None,
        emphasis: Callable[[int], Sequence[int]] | None = None,
        styles: ViewportStyles | None = None,
    ) -> Strip:
        """Render a single row ``y`` of the frame."""
        styles = styles or ViewportStyles()
        if height < 1 or width < 1 or not 0 <= y < height:
            return Strip.blank(max(0, width), styles.base)
        if self._inner_height != max(0, height - 2):
            self.resize(height)

        if y == 0:
            return self._border_row(width, "┌", "┐", title, status, styles.title, styles)
        if y == height - 1:
            return self._border_row(width, "└", "┘", footer, hint, styles.status, styles)

        inner_width = max(0, width - 2)
        start, stop = self.window()
        index = start + y - 1
        if cursor is None:
            cursor = self.current_index

        if index < stop:
            body = self._line_segments(index, styles, emphasis, highlighted=index == cursor)
        elif not self._lines and placeholder and y == 1:
            body = [Segment(f" {placeholder}", styles.placeholder + styles.base)]
        else:
            body = []

        row_style = styles.base + styles.cursor if index < stop and index == cursor else styles.base
        content = Strip(body).crop(0, inner_width).extend_cell_length(inner_width, row_style)
        left = Segment("│", styles.border)
        right = Segment("│", styles.border)
        return Strip([left, *content, right]).crop(0, width)

    def _line_segments(
        self,
        index: int,
        styles: ViewportStyles,
        emphasis: Callable[[int], Sequence[int]] | None,
        *,
        highlighted: bool,
    ) -> list[Segment]:
        style = styles.base + styles.cursor if highlighted else styles.base
        positions = set(emphasis(index)) if emphasis else set()
        if not positions:
            return [Segment(sanitize(self._lines[index]), style)]
        text, positions = _sanitize_positions(self._lines[index], positions)

        # Group runs of equally-styled characters into single segments.
        segments: list[Segment] = []
        run_start = 0
        run_emph = 0 in positions
        for i in range(1, len(text) + 1):
            emph = i in positions if i < len(text) else not run_emph
            if emph != run_emph:
                segments.append(Segment(text[run_start:i], style + styles.emphasis if run_emph else style))
                run_start, run_emph = i, emph
        return segments

    @staticmethod
    def _border_row(
        width: int,
        left: str,
        right: str,
        label: str,
        right_label: str,
        label_style: Style,
        styles: ViewportStyles,
    ) -> Strip:
        if width < 2:
            return Strip([Segment(left[:width], styles.border)])
        inner = width - 2
        segments = [Segment(left, styles.border)]
        used = 0
        if label and inner > 2:
            text = _fit(f" {sanitize(label)} ", inner)
            segments.append(Segment(text, label_style))
            used = cell_len(text)
        tail = ""
        if right_label and inner - used > 2:
            tail = _fit(f" {sanitize(right_label)} ", inner - used)
        fill = inner - used - cell_len(tail)
        segments.append(Segment("─" * fill, styles.border))
        if tail:
            segments.append(Segment(tail, styles.status))
        segments.append(Segment(right, styles.border))
        return Strip(segments).crop(0, width)
