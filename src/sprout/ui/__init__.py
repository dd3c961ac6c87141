"""Terminal UI for sprout."""

from sprout.ui.theme import SproutTheme, THEME, Symbols
from sprout.ui.session import ChainDriver

__all__ = [
    "SproutTheme",
    "THEME",
    "Symbols",
    "ChainDriver",
]
