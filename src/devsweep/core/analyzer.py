"""Per-project analysis: cleanable targets, sizes and timestamps."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from devsweep.core.classifier import is_exact, is_glob
from devsweep.core.walker import SKIP_DIRS
from devsweep.models.project import CleanTarget, ProjectKind, ScannedProject
from devsweep.utils import dir_size

log = logging.getLogger(__name__)

PYCACHE = "__pycache__"

# Not entered by the __pycache__ sub-scan: everything the walker prunes plus
# Python's own artifact directories, whose contents are already counted.
_PYCACHE_SKIP = (SKIP_DIRS | {p for p in ProjectKind.PYTHON.cleanable_dirs if is_exact(p)}) - {PYCACHE}


def resolve_pattern(project_root: Path, pattern: str) -> list[tuple[Path, str]]:
    """Resolve a cleanable-dir pattern into concrete ``(path, name)`` pairs.

    Glob patterns match direct child directories by suffix.  Exact names
    and nested paths resolve to a single directory when it exists.
    Symlinked directories are never targets.
    """
    if is_glob(pattern):
        suffix = pattern.lstrip("*")
        matches: list[tuple[Path, str]] = []
        try:
            with os.scandir(project_root) as it:
                for entry in it:
                    try:
                        if entry.name.endswith(suffix) and entry.is_dir(follow_symlinks=False):
                            matches.append((Path(entry.path), entry.name))
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", project_root)
        return sorted(matches)

    target = project_root / pattern
    try:
        if target.is_dir() and not target.is_symlink():
            return [(target, pattern)]
    except OSError:
        log.debug("Cannot access: %s", target)
    return []


def as_clean_target(path: Path, name: str) -> CleanTarget | None:
    """Build a CleanTarget, or None when the directory holds no bytes."""
    size = dir_size(path)
    if size <= 0:
        return None
    return CleanTarget(path=path, name=name, size_bytes=size)


def find_pycache_recursive(project_root: Path) -> list[CleanTarget]:
    """Find every non-empty ``__pycache__`` below the project root.

    Each target is named by its path relative to the root, so caches at
    different depths stay distinct.
    """
    targets: list[CleanTarget] = []
    stack: list[Path] = [project_root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name, reverse=True)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue

        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                log.debug("Cannot access: %s", entry.path)
                continue

            path = Path(entry.path)
            if entry.name == PYCACHE:
                target = as_clean_target(path, path.relative_to(project_root).as_posix())
                if target is not None:
                    targets.append(target)
            elif entry.name not in _PYCACHE_SKIP:
                stack.append(path)
    return targets


def last_modified(project_root: Path, kind: ProjectKind) -> datetime:
    """Latest mtime among the kind's exact-name marker files.

    Glob and nested markers are ignored.  Falls back to the root
    directory's own mtime when no marker can be stat'd.

    Raises:
        OSError: If the fallback stat of the project root fails.
    """
    latest: float | None = None
    for marker in kind.markers:
        if not is_exact(marker):
            continue
        try:
            mtime = (project_root / marker).stat().st_mtime
        except OSError:
            continue
        if latest is None or mtime > latest:
            latest = mtime

    if latest is None:
        latest = project_root.stat().st_mtime
    return datetime.fromtimestamp(latest).astimezone()


def analyze_project(project_root: Path, kind: ProjectKind) -> ScannedProject:
    """Resolve, size and timestamp the cleanable targets of one project."""
    modified = last_modified(project_root, kind)

    targets: list[CleanTarget] = []
    for pattern in kind.cleanable_dirs:
        for path, name in resolve_pattern(project_root, pattern):
            target = as_clean_target(path, name)
            if target is not None:
                targets.append(target)

    if kind is ProjectKind.PYTHON:
        seen = {t.path for t in targets}
        targets.extend(t for t in find_pycache_recursive(project_root) if t.path not in seen)

    project = ScannedProject.build(project_root, kind, modified, targets)
    log.debug(
        "Analyzed %s: %d targets, %d bytes",
        project.path,
        len(project.clean_targets),
        project.total_cleanable_bytes,
    )
    return project
