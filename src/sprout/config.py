"""Configuration for sprout.

Read from ``$SPROUT_CONFIG`` if set, otherwise
``~/.config/sprout/config.json``:

    {
      "search_roots": ["~/templates", "/usr/share/sprout/templates"],
      "workspaces": {"lang": "~/code", "web": "~/sites"},
      "editor": "vim",
      "state_dir": "~/.local/state/sprout"
    }

``$SPROUT_TEMPLATES`` (os.pathsep separated) is searched before the
configured roots.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

CONFIG_ENV = "SPROUT_CONFIG"
TEMPLATES_ENV = "SPROUT_TEMPLATES"
DEFAULT_CONFIG_PATH = Path("~/.config/sprout/config.json")
DEFAULT_STATE_DIR = "~/.local/state/sprout"


@dataclass
class SproutConfig:
    """User configuration."""
    search_roots: List[str] = field(default_factory=lambda: ["~/.config/sprout/templates"])
    workspaces: Dict[str, str] = field(default_factory=dict)  # category -> directory
    editor: Optional[str] = None
    state_dir: str = DEFAULT_STATE_DIR

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SproutConfig":
        return cls(**{
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__
        })

    @property
    def roots(self) -> List[Path]:
        """Search roots, environment first, with ~ expanded."""
        env = os.environ.get(TEMPLATES_ENV, "")
        extra = [p for p in env.split(os.pathsep) if p]
        return [Path(p).expanduser() for p in [*extra, *self.search_roots]]

    @property
    def state_path(self) -> Path:
        return Path(self.state_dir).expanduser()

    def default_target(self, category: str, name: str, cwd: Optional[Path] = None) -> Path:
        """Where a new project from category would go unless told otherwise."""
        workspace = self.workspaces.get(category)
        base = Path(workspace).expanduser() if workspace else (cwd or Path.cwd())
        return base / name


def config_path() -> Path:
    return Path(os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG_PATH).expanduser()


def load_config(path: Optional[Path] = None) -> SproutConfig:
    """Load configuration, falling back to defaults if missing or unreadable."""
    path = Path(path) if path else config_path()
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return SproutConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning("Config file %s unreadable: %s. Using defaults.", path, e)
    return SproutConfig()
