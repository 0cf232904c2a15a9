"""Line-API widget that draws a Viewport one row at a time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from textual.widget import Widget

from logscout.viewport import Anchor, Viewport, ViewportStyles

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from textual import events
    from textual.strip import Strip


@dataclass
class Frame:
    """Decorations drawn around and inside the viewport for the next render."""

    title: str = ""
    status: str = ""
    footer: str = ""
    hint: str = ""
    placeholder: str | None = None
    cursor: int | None = None
    emphasis: Callable[[int], Sequence[int]] | None = None


class ViewportTable(Widget, can_focus=True):
    """Bordered, virtually rendered table over a line sequence.

    Only the rows inside the widget's height are ever touched; subclasses
    swap the sequence with ``viewport.set_lines`` and describe the frame in
    ``frame``.
    """

    DEFAULT_CSS = """
    ViewportTable {
        background: $surface;
        height: 1fr;
    }

    ViewportTable > .viewport--border {
        color: $primary;
    }

    ViewportTable:focus > .viewport--border {
        color: $accent;
    }

    ViewportTable > .viewport--title {
        text-style: bold;
    }

    ViewportTable > .viewport--status {
        color: $text-muted;
    }

    ViewportTable > .viewport--cursor {
        background: $primary-darken-2;
        color: $text;
    }

    ViewportTable > .viewport--match {
        color: $warning;
        text-style: bold;
    }

    ViewportTable > .viewport--placeholder {
        color: $text-muted;
        text-style: italic;
    }
    """

    COMPONENT_CLASSES: ClassVar[set[str]] = {
        "viewport--border",
        "viewport--title",
        "viewport--status",
        "viewport--cursor",
        "viewport--match",
        "viewport--placeholder",
    }

    def __init__(self, *, anchor: Anchor = Anchor.BOTTOM, **kwargs: Any) -> None:  # noqa: ANN401
        super().__init__(**kwargs)
        self.viewport = Viewport(anchor=anchor)

    def frame(self) -> Frame:
        """Describe the decorations for the current state."""
        return Frame()

    def _viewport_styles(self) -> ViewportStyles:
        return ViewportStyles(
            base=self.rich_style,
            border=self.get_component_rich_style("viewport--border", partial=True),
            title=self.get_component_rich_style("viewport--title", partial=True),
            status=self.get_component_rich_style("viewport--status", partial=True),
            cursor=self.get_component_rich_style("viewport--cursor", partial=True),
            emphasis=self.get_component_rich_style("viewport--match", partial=True),
            placeholder=self.get_component_rich_style("viewport--placeholder", partial=True),
        )

    def render_line(self, y: int) -> Strip:
        width, height = self.size
        frame = self.frame()
        return self.viewport.render_row(
            y,
            width,
            height,
            title=frame.title,
            status=frame.status,
            footer=frame.footer,
            hint=frame.hint,
            placeholder=frame.placeholder,
            cursor=frame.cursor,
            emphasis=frame.emphasis,
            styles=self._viewport_styles(),
        )

    def on_resize(self, event: events.Resize) -> None:
        self.viewport.resize(event.size.height)
        self.refresh()
