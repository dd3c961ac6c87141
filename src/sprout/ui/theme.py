"""Terminal theme for sprout."""

from dataclasses import dataclass
from rich.style import Style
from rich.theme import Theme


@dataclass
class SproutTheme:
    """Color palette."""

    PRIMARY = "#7FD46B"      # Leaf green - main accent
    SECONDARY = "#4FA3D9"    # Sky blue
    ACCENT = "#E0A93B"       # Amber

    SUCCESS = "#7FD46B"
    WARNING = "#E0A93B"
    ERROR = "#E05252"

    TEXT = "#FFFFFF"
    TEXT_DIM = "#808080"

    # Snippet status
    SNIPPET_DONE = "#7FD46B"
    SNIPPET_FOCUSED = "#4FA3D9"
    SNIPPET_PENDING = "#808080"
    SNIPPET_DEFERRED = "#E0A93B"


THEME = Theme({
    "title": Style(color=SproutTheme.PRIMARY, bold=True),
    "path": Style(color=SproutTheme.SECONDARY),
    "field": Style(color=SproutTheme.ACCENT, bold=True),
    "text.dim": Style(color=SproutTheme.TEXT_DIM),

    "status.ok": Style(color=SproutTheme.SUCCESS, bold=True),
    "status.warning": Style(color=SproutTheme.WARNING, bold=True),
    "status.error": Style(color=SproutTheme.ERROR, bold=True),

    "snippet.done": Style(color=SproutTheme.SNIPPET_DONE),
    "snippet.focused": Style(color=SproutTheme.SNIPPET_FOCUSED, bold=True),
    "snippet.pending": Style(color=SproutTheme.SNIPPET_PENDING),
    "snippet.deferred": Style(color=SproutTheme.SNIPPET_DEFERRED),
})


class Symbols:
    """Terminal symbols for status display."""

    DONE = "✓"
    FOCUSED = "→"
    PENDING = "○"
    DEFERRED = "↻"
    FAILED = "✗"
