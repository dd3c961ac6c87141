"""Template lookup across search roots.

Templates live at ``<root>/<category>/<name>``. Roots are searched in the
order they are configured; a template present in several roots is reported
once per root.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union


class TemplateRegistry:
    """Finds template directories under a list of search roots."""

    def __init__(self, search_roots: Iterable[Union[str, Path]]):
        self.search_roots = [Path(r).expanduser() for r in search_roots]

    def find_templates(self, key: str) -> List[Path]:
        """All directories matching "category/name", in root order."""
        key = key.strip("/")
        if not key:
            return []
        return [
            root / key
            for root in self.search_roots
            if (root / key).is_dir()
        ]

    def find_template(self, key: str) -> Optional[Path]:
        """First directory matching "category/name", or None."""
        matches = self.find_templates(key)
        return matches[0] if matches else None

    def list_templates(self) -> Dict[str, List[Tuple[str, Path]]]:
        """Map each category to its (name, path) pairs across all roots.

        Categories and names are sorted; a name found in several roots
        appears once per root, in root order.
        """
        catalog: Dict[str, List[Tuple[str, Path]]] = {}
        for root in self.search_roots:
            if not root.is_dir():
                continue
            for category in root.iterdir():
                if not category.is_dir() or category.name.startswith("."):
                    continue
                names = catalog.setdefault(category.name, [])
                for template in category.iterdir():
                    if template.is_dir() and not template.name.startswith("."):
                        names.append((template.name, template))
        # sort is stable, so duplicates keep root order
        return {
            category: sorted(catalog[category], key=lambda item: item[0])
            for category in sorted(catalog)
        }
