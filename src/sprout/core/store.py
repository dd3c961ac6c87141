"""Saved snippet chains.

A chain the user walks away from can be written to disk and picked up
again with ``sprout resume``. Each record lives in its own file:

    <state_dir>/chains/<id>.json

Records hold the template, the target, the variables as they stood after
init hooks ran, and the remaining items. Deferred documents keep their
edited text and field values.
"""

import json
import logging
import os
import tempfile
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from filelock import FileLock

from sprout.core.chain import ChainItem, DeferredDocument, Document, SnippetEntry
from sprout.core.errors import ChainRecordError

logger = logging.getLogger(__name__)


def item_to_dict(item: ChainItem) -> dict:
    if isinstance(item, DeferredDocument):
        doc = item.document
        return {
            "kind": "deferred",
            "target": str(doc.target),
            "source": str(doc.source) if doc.source else None,
            "text": doc.text,
            "values": dict(doc.values),
        }
    return {"kind": "entry", "source": str(item.source), "target": str(item.target)}


def item_from_dict(data: dict) -> ChainItem:
    if not isinstance(data, dict):
        raise ChainRecordError(f"Malformed chain item: {data!r}")
    kind = data.get("kind")
    try:
        if kind == "entry":
            return SnippetEntry(source=Path(data["source"]), target=Path(data["target"]))
        if kind == "deferred":
            return DeferredDocument(Document(
                target=Path(data["target"]),
                source=Path(data["source"]) if data.get("source") else None,
                text=str(data["text"]),
                values=dict(data.get("values") or {}),
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise ChainRecordError(f"Malformed {kind} item: {e!r}") from e
    raise ChainRecordError(f"Unknown chain item kind: {kind!r}")


@dataclass
class ChainRecord:
    """A chain saved for later."""
    id: str
    template: str
    target: str
    variables: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    items: List[dict] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def new(cls, template: Path, target: Path, items: List[ChainItem], **kwargs) -> "ChainRecord":
        return cls(
            id=uuid.uuid4().hex[:8],
            template=str(template),
            target=str(target),
            items=[item_to_dict(i) for i in items],
            **kwargs,
        )

    def chain_items(self) -> List[ChainItem]:
        return [item_from_dict(i) for i in self.items]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ChainRecord":
        if not isinstance(data, dict):
            raise ChainRecordError(f"Malformed chain record: expected an object, got {type(data).__name__}")
        if not isinstance(data.get("items", []), list):
            raise ChainRecordError("Malformed chain record: items is not a list")
        try:
            return cls(**{
                k: v for k, v in data.items()
                if k in cls.__dataclass_fields__
            })
        except TypeError as e:
            raise ChainRecordError(f"Malformed chain record: {e}") from e


class ChainStore:
    """Reads and writes saved chains under a state directory.

    Writes go to a temp file, are fsynced, then os.replace()d over the
    record, all under a FileLock shared with other sprout processes.
    """

    CHAINS_DIR = "chains"

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir).expanduser()
        self.chains_dir = self.state_dir / self.CHAINS_DIR
        self._lock = FileLock(str(self.state_dir / "chains.lock"), timeout=30)

    def _path(self, record_id: str) -> Path:
        return self.chains_dir / f"{record_id}.json"

    def save(self, record: ChainRecord) -> Path:
        """Write a record, replacing any earlier version."""
        record.updated_at = datetime.now().isoformat()
        self.chains_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(record.id)

        with self._lock:
            fd = None
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(
                    dir=str(self.chains_dir),
                    suffix=".tmp",
                    prefix="chain_",
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    fd = None  # os.fdopen takes ownership of fd
                    json.dump(record.to_dict(), f, indent=2, default=str)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
                tmp_path = None
            finally:
                if fd is not None:
                    os.close(fd)
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.unlink(tmp_path)

        logger.debug("Saved chain %s to %s", record.id, path)
        return path

    def load(self, record_id: str) -> Optional[ChainRecord]:
        """Read a record by id, or None if there is no such record."""
        path = self._path(record_id)
        if not path.exists():
            return None
        with self._lock:
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise ChainRecordError(f"Corrupted chain record {record_id}: {e}") from e
        return ChainRecord.from_dict(data)

    def list(self) -> List[ChainRecord]:
        """All readable records, oldest first. Unreadable ones are skipped."""
        if not self.chains_dir.exists():
            return []
        records = []
        for path in sorted(self.chains_dir.glob("*.json")):
            try:
                record = self.load(path.stem)
            except ChainRecordError as e:
                logger.warning("Skipping chain record %s: %s", path.name, e)
                continue
            if record is not None:
                records.append(record)
        return sorted(records, key=lambda r: r.created_at)

    def remove(self, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        path = self._path(record_id)
        if not path.exists():
            return False
        with self._lock:
            path.unlink(missing_ok=True)
        return True
