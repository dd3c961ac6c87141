"""Snippet rendering.

Snippets go through two passes:

1. Jinja2, with the copy context's variables. This is where templates put
   conditionals, loops and filters.
2. Placeholder fields, written ``${name}`` or ``${name:default}``. Fields
   that share a name mirror each other. ``\\${`` produces a literal ``${``.

Interactive snippets stop after pass 1 and hand their fields to the user.
Auto snippets fill every field with its default and are written directly.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jinja2

from sprout.core.errors import SnippetRenderError

FIELD_RE = re.compile(r"(?<!\\)\$\{([A-Za-z_][\w-]*)(?::([^}]*))?\}")
ESCAPED_FIELD = "\\${"


@dataclass
class Field:
    """A placeholder the user fills in."""
    name: str
    default: str = ""
    occurrences: int = 1


def create_environment() -> jinja2.Environment:
    """Create the Jinja2 environment snippets are rendered with."""
    return jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )


_env = create_environment()


def render_text(text: str, variables: Mapping[str, Any], source: Optional[Path] = None) -> str:
    """Run the Jinja2 pass over snippet text."""
    try:
        return _env.from_string(text).render(**variables)
    except jinja2.TemplateSyntaxError as e:
        raise SnippetRenderError(e.message or str(e), source, e.lineno) from e
    except jinja2.UndefinedError as e:
        raise SnippetRenderError(str(e), source) from e


def render_snippet(path: Path, variables: Mapping[str, Any]) -> str:
    """Render a snippet file, leaving its fields in place."""
    path = Path(path)
    return render_text(path.read_text(encoding="utf-8"), variables, source=path)


def render_auto(path: Path, variables: Mapping[str, Any]) -> str:
    """Render a snippet file and resolve every field to its default."""
    return fill_fields(render_snippet(path, variables), {})


def parse_fields(text: str) -> List[Field]:
    """Return the distinct fields in text, in order of first appearance.

    When a mirrored field declares several defaults, the first one wins.
    """
    fields: Dict[str, Field] = {}
    for match in FIELD_RE.finditer(text):
        name, default = match.group(1), match.group(2)
        if name in fields:
            fields[name].occurrences += 1
            continue
        fields[name] = Field(name=name, default=default or "")
    return list(fields.values())


def fill_fields(text: str, values: Mapping[str, str], unescape: bool = True) -> str:
    """Substitute field values into text.

    Fields without a value get their first declared default. With
    unescape=False the result is still field text: ``\\${`` stays escaped
    and any ``${`` inside a value is escaped too, so parsing it again finds
    no fields.
    """
    defaults = {f.name: f.default for f in parse_fields(text)}

    def _sub(match: re.Match) -> str:
        name = match.group(1)
        value = str(values[name]) if name in values else defaults.get(name, "")
        return value if unescape else escape_fields(value)

    filled = FIELD_RE.sub(_sub, text)
    return filled.replace(ESCAPED_FIELD, "${") if unescape else filled


def escape_fields(text: str) -> str:
    """Escape every unescaped ``${`` in text."""
    return re.sub(r"(?<!\\)\$\{", lambda m: ESCAPED_FIELD, text)
