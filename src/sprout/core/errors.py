"""Exceptions raised by sprout."""

from pathlib import Path
from typing import Optional


class SproutError(Exception):
    """Base exception for sprout operations."""
    pass


class TargetExists(SproutError):
    """Target directory already exists; expansion never merges into it."""

    def __init__(self, target: Path):
        super().__init__(f"Target directory already exists: {target}")
        self.target = target


class TemplateError(SproutError):
    """A template is malformed."""
    pass


class TemplateSpecError(TemplateError):
    """template.json or _template.py could not be loaded."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class SnippetRenderError(TemplateError):
    """A snippet failed to render."""

    def __init__(self, message: str, source: Optional[Path] = None, lineno: Optional[int] = None):
        where = f"{source}:{lineno}" if source and lineno else (str(source) if source else "<string>")
        super().__init__(f"{where}: {message}")
        self.source = source
        self.lineno = lineno


class ChainPreconditionError(SproutError):
    """A chain operation was called with no focused document."""
    pass


class NoActiveContext(SproutError):
    """current_context() was called outside of a template setup call."""
    pass


class ChainRecordError(SproutError):
    """A saved chain could not be read back."""
    pass
