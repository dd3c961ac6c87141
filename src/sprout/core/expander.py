"""Template expansion.

expand() materializes a template into a fresh directory:

1. Refuse an existing target (TargetExists), before touching anything
2. Create the target and run the template's init hooks
3. Mirror the directory skeleton
4. Copy plain files, render auto snippets
5. Seed a new SnippetChain with the interactive snippets

All directories and non-interactive files are in place before the first
interactive snippet is opened.
"""

import fnmatch
import logging
import shutil
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, Iterable, List, Optional

from sprout.core.chain import ChainItem, Document, SnippetChain, SnippetEntry
from sprout.core.classifier import FileKind, classify, is_reserved, output_name
from sprout.core.context import CopyContext, load_spec
from sprout.core.errors import TargetExists
from sprout.core.render import render_auto, render_snippet
from sprout.core.walker import mirror_directories, walk_template

logger = logging.getLogger(__name__)

FileCallback = Callable[[Path, FileKind], None]


@dataclass
class Expansion:
    """One template expansion: its context, its chain, and what was written."""
    context: CopyContext
    chain: SnippetChain
    copied: List[Path] = field(default_factory=list)
    rendered: List[Path] = field(default_factory=list)

    @property
    def target(self) -> Path:
        return self.context.target


def open_entry(ctx: CopyContext, entry: SnippetEntry) -> Document:
    """Render an interactive snippet into an editable document."""
    return Document(
        target=entry.target,
        source=entry.source,
        text=render_snippet(entry.source, ctx.variables),
    )


def new_chain(ctx: CopyContext) -> SnippetChain:
    """Create the chain that belongs to ctx's expansion."""
    return SnippetChain(opener=partial(open_entry, ctx), on_finalize=ctx.run_finalize)


def is_ignored(rel: PurePath, patterns: Iterable[str]) -> bool:
    """True if rel, or any directory above it, matches an ignore pattern."""
    candidates = [rel.as_posix(), *rel.parts]
    candidates.extend(p.as_posix() for p in rel.parents if p.parts)
    return any(
        fnmatch.fnmatch(candidate, pattern)
        for pattern in patterns
        for candidate in candidates
    )


def expand(
    template_dir: Path,
    target_dir: Path,
    *,
    variables: Optional[Dict[str, Any]] = None,
    registry=None,
    on_file: Optional[FileCallback] = None,
) -> Expansion:
    """Expand template_dir into target_dir.

    Args:
        template_dir: Template root
        target_dir: Directory to create; must not exist yet
        variables: Extra variables, overriding the template's own
        registry: TemplateRegistry used to resolve inherited templates
        on_file: Called with (relative path, kind) after each file is handled

    Returns:
        The Expansion, whose chain is already started

    Raises:
        TargetExists: target_dir is an existing directory
        TemplateError: the template or one of its snippets is malformed
        OSError: any filesystem failure; partial output is left in place
    """
    template_dir = Path(template_dir)
    target_dir = Path(target_dir)
    if target_dir.is_dir():
        raise TargetExists(target_dir)

    spec = load_spec(template_dir, registry)
    ctx = CopyContext.create(target_dir, spec, template=template_dir, variables=variables)

    target_dir.mkdir(parents=True)
    ctx.run_init()

    paths = (
        rel for rel in walk_template(template_dir)
        if not is_reserved(rel) and not is_ignored(rel, ctx.spec.ignore)
    )
    files = mirror_directories(template_dir, target_dir, paths)

    expansion = Expansion(context=ctx, chain=new_chain(ctx))
    entries: List[SnippetEntry] = []
    for rel in files:
        kind = classify(rel)
        source = template_dir / rel
        dest = target_dir / output_name(rel)
        if kind is FileKind.PLAIN:
            shutil.copy2(source, dest)
            expansion.copied.append(rel)
        elif kind is FileKind.AUTO:
            dest.write_text(render_auto(source, ctx.variables), encoding="utf-8")
            expansion.rendered.append(rel)
        else:
            entries.append(SnippetEntry(source=source, target=dest))
        if on_file is not None:
            on_file(rel, kind)

    logger.info(
        "Expanded %s into %s: %d copied, %d rendered, %d interactive",
        template_dir, target_dir, len(expansion.copied), len(expansion.rendered), len(entries),
    )
    expansion.chain.start(entries)
    return expansion


def reopen(
    template_dir: Path,
    target_dir: Path,
    items: List[ChainItem],
    *,
    variables: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    registry=None,
) -> Expansion:
    """Rebuild an expansion from saved chain items.

    Init hooks are not run again; variables are taken as saved. Finalize
    hooks come from the template spec.
    """
    spec = load_spec(Path(template_dir), registry)
    ctx = CopyContext(
        target=Path(target_dir),
        template=Path(template_dir),
        spec=spec,
        variables=dict(variables or {}),
        metadata=dict(metadata or {}),
        finalize_hooks=list(spec.finalize),
        initialized=True,
    )
    expansion = Expansion(context=ctx, chain=new_chain(ctx))
    expansion.chain.start(items)
    return expansion
