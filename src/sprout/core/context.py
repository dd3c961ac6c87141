"""Per-expansion copy context and template specs.

A template may carry two optional files at its root:

- template.json - declarative settings (inherits, variables, ignore)
- _template.py  - arbitrary Python defining init(ctx) and/or finalize(ctx)

Both are folded into a TemplateSpec. A child template that names a parent
with "inherits" gets the parent's spec merged underneath its own before any
setup logic runs.

Template code is executed as-is. It is not sandboxed.
"""

import json
import logging
import runpy
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from sprout.core.classifier import HOOKS_FILE, SPEC_FILE
from sprout.core.errors import NoActiveContext, TemplateSpecError

logger = logging.getLogger(__name__)

Hook = Callable[["CopyContext"], None]


# =============================================================================
# Template Spec
# =============================================================================

@dataclass
class TemplateSpec:
    """Settings and hooks that shape one template's expansion."""
    name: str = ""
    inherits: Optional[str] = None
    description: str = ""
    variables: Dict[str, Any] = field(default_factory=dict)
    ignore: List[str] = field(default_factory=list)
    init: List[Hook] = field(default_factory=list)
    finalize: List[Hook] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "TemplateSpec":
        return cls(**{
            k: v for k, v in data.items()
            if k in ("name", "inherits", "description", "variables", "ignore")
        })


def merge_specs(parent: TemplateSpec, child: TemplateSpec) -> TemplateSpec:
    """Merge a parent spec underneath a child spec.

    Variables: child keys override parent keys.
    Ignore patterns: union, parent patterns first.
    Hooks: concatenated, parent hooks run first.
    Scalars: child wins unless empty.
    """
    ignore = list(parent.ignore)
    ignore.extend(p for p in child.ignore if p not in ignore)
    return TemplateSpec(
        name=child.name or parent.name,
        inherits=child.inherits,
        description=child.description or parent.description,
        variables={**parent.variables, **child.variables},
        ignore=ignore,
        init=[*parent.init, *child.init],
        finalize=[*parent.finalize, *child.finalize],
    )


def read_spec(template_dir: Path) -> TemplateSpec:
    """Read a template's own spec, without resolving inheritance."""
    template_dir = Path(template_dir)
    spec = TemplateSpec(name=template_dir.name)

    spec_file = template_dir / SPEC_FILE
    if spec_file.exists():
        try:
            data = json.loads(spec_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise TemplateSpecError(f"Invalid {SPEC_FILE}: {e}", spec_file) from e
        if not isinstance(data, dict):
            raise TemplateSpecError(f"{SPEC_FILE} must contain an object", spec_file)
        spec = replace(spec, **{
            k: v for k, v in vars(TemplateSpec.from_dict(data)).items() if v
        })

    hooks_file = template_dir / HOOKS_FILE
    if hooks_file.exists():
        namespace = runpy.run_path(str(hooks_file), run_name=f"sprout_template_{template_dir.name}")
        for hook_name in ("init", "finalize"):
            hook = namespace.get(hook_name)
            if hook is None:
                continue
            if not callable(hook):
                raise TemplateSpecError(f"{hook_name} in {HOOKS_FILE} is not callable", hooks_file)
            getattr(spec, hook_name).append(hook)

    return spec


def load_spec(template_dir: Path, registry=None) -> TemplateSpec:
    """Read a template's spec and merge in every ancestor it inherits from.

    Args:
        template_dir: Template root directory
        registry: TemplateRegistry used to resolve "inherits" keys
    """
    chain = []
    seen = set()
    current: Optional[Path] = Path(template_dir)
    while current is not None:
        resolved = current.resolve()
        if resolved in seen:
            raise TemplateSpecError(f"Inheritance cycle through {current}", current)
        seen.add(resolved)

        spec = read_spec(current)
        chain.append(spec)
        if not spec.inherits:
            break
        if registry is None:
            raise TemplateSpecError(
                f"{current.name} inherits {spec.inherits!r} but no registry was given", current
            )
        current = registry.find_template(spec.inherits)
        if current is None:
            raise TemplateSpecError(f"Parent template not found: {spec.inherits}", template_dir)

    merged = chain.pop()
    while chain:
        merged = merge_specs(merged, chain.pop())
    logger.debug("Loaded spec %s (%d ancestors)", merged.name, len(seen) - 1)
    return merged


# =============================================================================
# Copy Context
# =============================================================================

@dataclass
class CopyContext:
    """State for one template expansion.

    Never shared between expansions. Init hooks may read and mutate it
    freely; anything they register is kept here rather than re-derived.
    """
    target: Path
    template: Optional[Path] = None
    spec: TemplateSpec = field(default_factory=TemplateSpec)
    variables: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    finalize_hooks: List[Hook] = field(default_factory=list)
    initialized: bool = False
    finalized: bool = False

    @classmethod
    def create(
        cls,
        target: Path,
        spec: Optional[TemplateSpec] = None,
        template: Optional[Path] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> "CopyContext":
        """Create a context for expanding into target."""
        spec = spec or TemplateSpec()
        target = Path(target)
        merged = {
            "project_name": target.name,
            "target": str(target),
            "today": date.today().isoformat(),
            "template_name": spec.name,
            **spec.variables,
            **(variables or {}),
        }
        return cls(
            target=target,
            template=Path(template) if template else None,
            spec=spec,
            variables=merged,
            finalize_hooks=list(spec.finalize),
        )

    def add_finalize(self, hook: Hook) -> None:
        """Register an action to run once the snippet chain is exhausted."""
        self.finalize_hooks.append(hook)

    def run_init(self) -> None:
        """Run the spec's init hooks once, with this context bound."""
        if self.initialized:
            return
        self.initialized = True
        with using_context(self):
            for hook in self.spec.init:
                hook(self)

    def run_finalize(self) -> None:
        """Run every finalize hook. Subsequent calls do nothing."""
        if self.finalized:
            return
        self.finalized = True
        with using_context(self):
            for hook in self.finalize_hooks:
                hook(self)


_current: ContextVar[Optional[CopyContext]] = ContextVar("sprout_copy_context", default=None)


@contextmanager
def using_context(ctx: CopyContext) -> Iterator[CopyContext]:
    """Bind ctx as the current context for the duration of the block."""
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


def current_context() -> CopyContext:
    """Return the context bound by the innermost using_context()."""
    ctx = _current.get()
    if ctx is None:
        raise NoActiveContext("No copy context is active outside of template setup")
    return ctx
