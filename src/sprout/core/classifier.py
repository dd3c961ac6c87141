"""Classify template files by extension."""

from enum import Enum
from pathlib import Path, PurePath
from typing import Union

# Interactive snippets are filled in by the user, auto snippets render unattended
INTERACTIVE_SUFFIX = ".snip"
AUTO_SUFFIX = ".autosnip"

# Files at the template root that describe the template itself
SPEC_FILE = "template.json"
HOOKS_FILE = "_template.py"
RESERVED_NAMES = (SPEC_FILE, HOOKS_FILE)


class FileKind(Enum):
    """How a template file is materialized."""

    PLAIN = "plain"
    INTERACTIVE = "interactive"
    AUTO = "auto"


def classify(path: Union[str, PurePath]) -> FileKind:
    """Return the kind of a template file based on its extension."""
    suffix = PurePath(path).suffix
    if suffix == INTERACTIVE_SUFFIX:
        return FileKind.INTERACTIVE
    if suffix == AUTO_SUFFIX:
        return FileKind.AUTO
    return FileKind.PLAIN


def output_name(path: Union[str, PurePath]) -> Path:
    """Strip the snippet extension from a path, if it has one."""
    path = Path(path)
    if classify(path) is FileKind.PLAIN:
        return path
    return path.with_suffix("")


def is_reserved(relpath: Union[str, PurePath]) -> bool:
    """True for template metadata files that are never copied."""
    relpath = PurePath(relpath)
    return len(relpath.parts) == 1 and relpath.name in RESERVED_NAMES
