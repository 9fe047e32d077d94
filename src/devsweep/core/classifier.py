"""Marker-based project classification."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devsweep.models.project import ProjectKind

log = logging.getLogger(__name__)


def is_glob(pattern: str) -> bool:
    """Whether a pattern is a ``*suffix`` glob."""
    return pattern.startswith("*")


def is_nested(pattern: str) -> bool:
    """Whether a pattern is a relative path below the project root."""
    return "/" in pattern


def is_exact(pattern: str) -> bool:
    return not is_glob(pattern) and not is_nested(pattern)


def marker_exists(directory: Path, pattern: str) -> bool:
    """Check whether a single marker pattern matches inside ``directory``.

    - ``"*suffix"``: any direct child whose name ends with ``suffix``.
    - ``"sub/path"``: the sub-path exists (file or directory).
    - ``"name"``: a regular file called ``name`` exists directly in the
      directory; symlinks to files count, directories do not.
    """
    if is_glob(pattern):
        suffix = pattern.lstrip("*")
        try:
            with os.scandir(directory) as it:
                return any(entry.name.endswith(suffix) for entry in it)
        except OSError:
            log.debug("Cannot read directory: %s", directory)
            return False
    if is_nested(pattern):
        return (directory / pattern).exists()
    return (directory / pattern).is_file()


def detect_project_kind(directory: Path) -> ProjectKind | None:
    """Return the first kind, in priority order, whose markers match."""
    for kind in ProjectKind:
        if any(marker_exists(directory, marker) for marker in kind.markers):
            return kind
    return None
