"""Recursive template traversal.

Paths are reported relative to the template root. A directory is always
reported before anything beneath it, so mirroring the directories in the
order they arrive never needs a second pass.
"""

from pathlib import Path
from typing import Iterable, Iterator, List


def walk_template(root: Path) -> Iterator[Path]:
    """Yield every file and directory under root, relative to root.

    Siblings are visited in sorted order to keep expansion deterministic.
    Symlink loops are not detected.
    """
    root = Path(root)
    yield from _walk(root, Path())


def _walk(root: Path, rel: Path) -> Iterator[Path]:
    for child in sorted((root / rel).iterdir(), key=lambda p: p.name):
        child_rel = rel / child.name
        yield child_rel
        if child.is_dir():
            yield from _walk(root, child_rel)


def mirror_directories(root: Path, target: Path, paths: Iterable[Path]) -> List[Path]:
    """Create the directories among paths under target.

    Returns the list of file paths (non-directories) seen, in walk order.
    """
    files = []
    for rel in paths:
        if (root / rel).is_dir():
            (target / rel).mkdir(parents=True, exist_ok=True)
        else:
            files.append(rel)
    return files
