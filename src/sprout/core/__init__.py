"""Core modules for sprout.

This package contains the template machinery used by every command:
- classifier: plain / interactive / auto file kinds
- walker: template traversal
- context: copy context and template specs
- render: Jinja2 rendering and placeholder fields
- chain: the snippet chain
- expander: template expansion
- registry: template lookup
- store: saved chains
"""

from sprout.core.errors import (
    SproutError,
    TargetExists,
    TemplateError,
    TemplateSpecError,
    SnippetRenderError,
    ChainPreconditionError,
    NoActiveContext,
    ChainRecordError,
)

from sprout.core.classifier import FileKind, classify, output_name

from sprout.core.context import (
    CopyContext,
    TemplateSpec,
    current_context,
    load_spec,
    merge_specs,
    using_context,
)

from sprout.core.chain import (
    ChainState,
    DeferredDocument,
    Document,
    SnippetChain,
    SnippetEntry,
)

from sprout.core.expander import Expansion, expand, reopen
from sprout.core.registry import TemplateRegistry
from sprout.core.store import ChainRecord, ChainStore

__all__ = [
    # Errors
    "SproutError",
    "TargetExists",
    "TemplateError",
    "TemplateSpecError",
    "SnippetRenderError",
    "ChainPreconditionError",
    "NoActiveContext",
    "ChainRecordError",
    # Classifier
    "FileKind",
    "classify",
    "output_name",
    # Context
    "CopyContext",
    "TemplateSpec",
    "current_context",
    "load_spec",
    "merge_specs",
    "using_context",
    # Chain
    "ChainState",
    "DeferredDocument",
    "Document",
    "SnippetChain",
    "SnippetEntry",
    # Expansion
    "Expansion",
    "expand",
    "reopen",
    "TemplateRegistry",
    "ChainRecord",
    "ChainStore",
]
