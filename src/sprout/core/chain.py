"""Snippet chain: the worklist of interactive snippets for one expansion.

The chain holds two kinds of items:

- SnippetEntry: a snippet that has not been opened yet
- DeferredDocument: a document the user already opened and edited,
  then put aside with defer()

Items are taken from the head. Deferred documents go to the tail, so
everything pending at the time of a deferral is handled before the
deferred document comes back. When the chain runs dry the finalize
action fires, exactly once.

Each expansion owns its own chain. The documents opened by that expansion
share a reference to it; no chain is ever reachable from module state.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Deque, Dict, Iterable, List, Optional, Tuple, Union

from sprout.core.errors import ChainPreconditionError
from sprout.core.render import Field, fill_fields, parse_fields

logger = logging.getLogger(__name__)


# =============================================================================
# Chain items
# =============================================================================

@dataclass(frozen=True)
class SnippetEntry:
    """An interactive snippet waiting to be opened."""
    source: Path
    target: Path


@dataclass
class Document:
    """A materialized snippet the user is editing.

    ``text`` still contains its ``${field}`` placeholders; ``values`` holds
    what the user typed for them. Nothing is written until save().
    """
    target: Path
    text: str
    source: Optional[Path] = None
    values: Dict[str, str] = field(default_factory=dict)
    saved: bool = False

    @property
    def fields(self) -> List[Field]:
        return parse_fields(self.text)

    def set_field(self, name: str, value: str) -> None:
        self.values[name] = value

    def replace_text(self, text: str) -> None:
        """Replace the raw text, dropping values for fields that vanished."""
        self.text = text
        names = {f.name for f in self.fields}
        self.values = {k: v for k, v in self.values.items() if k in names}

    def content(self) -> str:
        """The text as it would be written right now."""
        return fill_fields(self.text, self.values)

    def editable_text(self) -> str:
        """The filled-in text, escaped so replace_text() reads it back literally."""
        return fill_fields(self.text, self.values, unescape=False)

    def save(self) -> None:
        self.target.parent.mkdir(parents=True, exist_ok=True)
        self.target.write_text(self.content(), encoding="utf-8")
        self.saved = True
        logger.debug("Saved %s", self.target)


@dataclass
class DeferredDocument:
    """A document put aside by defer(); already materialized."""
    document: Document

    @property
    def target(self) -> Path:
        return self.document.target


ChainItem = Union[SnippetEntry, DeferredDocument]
Opener = Callable[[SnippetEntry], Document]


class ChainState(Enum):
    """What the head of the chain holds."""
    EMPTY = "empty"
    HAS_PENDING = "has_pending"
    HAS_DEFERRED = "has_deferred"


# =============================================================================
# Snippet Chain
# =============================================================================

class SnippetChain:
    """Ordered, deferrable worklist of interactive snippets.

    Args:
        opener: Materializes a SnippetEntry into a Document
        on_finalize: Called once when the chain is exhausted
    """

    def __init__(self, opener: Opener, on_finalize: Optional[Callable[[], None]] = None):
        self._opener = opener
        self._on_finalize = on_finalize
        self._items: Deque[ChainItem] = deque()
        self._focused: Optional[Document] = None
        self._started = False
        self._finalized = False
        self.history: List[Path] = []

    def __len__(self) -> int:
        """Items not yet handled, including the focused document."""
        return len(self._items) + (1 if self._focused is not None else 0)

    @property
    def focused(self) -> Optional[Document]:
        return self._focused

    @property
    def started(self) -> bool:
        return self._started

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def pending(self) -> Tuple[ChainItem, ...]:
        """Snapshot of the items behind the focused document."""
        return tuple(self._items)

    @property
    def state(self) -> ChainState:
        if not self._items:
            return ChainState.EMPTY
        if isinstance(self._items[0], DeferredDocument):
            return ChainState.HAS_DEFERRED
        return ChainState.HAS_PENDING

    def start(self, entries: Iterable[ChainItem]) -> Optional[Document]:
        """Seed the chain and open its first item.

        An empty seed finalizes immediately.
        """
        if self._started:
            raise ChainPreconditionError("Snippet chain already started")
        self._started = True
        self._items.extend(entries)
        logger.debug("Chain started with %d items", len(self._items))
        return self.advance()

    def advance(self) -> Optional[Document]:
        """Focus the next item, or finalize if there is none.

        Returns the newly focused document, or None once the chain is empty.
        Advancing an exhausted chain again does nothing. If the opener
        raises, the entry goes back to the head and nothing is focused.
        """
        if not self._items:
            self._focused = None
            if not self._finalized:
                self._finalized = True
                logger.debug("Chain exhausted, finalizing")
                if self._on_finalize is not None:
                    self._on_finalize()
            return None

        head = self._items.popleft()
        if isinstance(head, DeferredDocument):
            self._focused = head.document
            return self._focused

        self._focused = None
        try:
            self._focused = self._opener(head)
        except Exception:
            self._items.appendleft(head)
            raise
        return self._focused

    def commit_and_advance(self) -> Optional[Document]:
        """Save the focused document and move on."""
        document = self._require_focus("commit")
        document.save()
        self.history.append(document.target)
        self._focused = None
        return self.advance()

    def defer(self) -> Optional[Document]:
        """Put the focused document at the tail, keeping its edits, and move on."""
        document = self._require_focus("defer")
        self._items.append(DeferredDocument(document))
        self._focused = None
        logger.debug("Deferred %s", document.target)
        return self.advance()

    def snapshot(self) -> List[ChainItem]:
        """Everything still to do, focused document first."""
        items: List[ChainItem] = []
        if self._focused is not None:
            items.append(DeferredDocument(self._focused))
        items.extend(self._items)
        return items

    def _require_focus(self, operation: str) -> Document:
        if self._focused is None:
            raise ChainPreconditionError(f"Cannot {operation}: no document is focused")
        return self._focused
