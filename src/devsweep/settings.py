"""Persistent JSON configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from devsweep.models.project import ProjectKind
from devsweep.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "dev-sweep"
_SETTINGS_FILE = "config.json"


def default_path() -> Path:
    """Return the default config file location."""
    return xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE


class Settings:
    """User configuration backed by a JSON file.

    Recognised keys::

        {
          "ignore_paths": ["~/work/keep-me"],
          "exclude_kinds": ["Go", "Unity"],
          "default_roots": ["~/code"],
          "max_depth": 6
        }

    A missing or malformed file yields defaults; it is never an error.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_path()
        self.ignore_paths: list[Path] = []
        self.exclude_kinds: list[ProjectKind] = []
        self.default_roots: list[Path] = []
        self.max_depth: int | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Read settings from disk, falling back to defaults."""
        settings = cls(path)
        settings._load()
        return settings

    def reset(self) -> None:
        """Restore default values (in memory only)."""
        self.ignore_paths = []
        self.exclude_kinds = []
        self.default_roots = []
        self.max_depth = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ignore_paths": [str(p) for p in self.ignore_paths],
            "exclude_kinds": [k.value for k in self.exclude_kinds],
            "default_roots": [str(p) for p in self.default_roots],
            "max_depth": self.max_depth,
        }

    def save(self) -> None:
        """Persist settings to disk.

        Raises:
            OSError: If the file or its directory cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        log.info("Saved settings to %s", self.path)

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self.path, e)
            return
        if not isinstance(data, dict):
            log.warning("Ignoring settings in %s: expected a JSON object", self.path)
            return

        self.ignore_paths = [Path(p).expanduser() for p in _str_list(data, "ignore_paths")]
        self.default_roots = [Path(p).expanduser() for p in _str_list(data, "default_roots")]

        for name in _str_list(data, "exclude_kinds"):
            try:
                self.exclude_kinds.append(ProjectKind.from_name(name))
            except ValueError:
                log.warning("Ignoring unknown project kind in settings: %s", name)

        max_depth = data.get("max_depth")
        if isinstance(max_depth, int) and not isinstance(max_depth, bool) and max_depth >= 0:
            self.max_depth = max_depth
        elif max_depth is not None:
            log.warning("Ignoring invalid max_depth in settings: %r", max_depth)


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    """Return ``data[key]`` as a list of strings, dropping anything else."""
    value = data.get(key) or []
    if not isinstance(value, list):
        log.warning("Ignoring settings key '%s': expected a list", key)
        return []
    return [item for item in value if isinstance(item, str)]
