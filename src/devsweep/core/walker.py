"""Pruned depth-first walk that discovers project roots."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator

from devsweep.core.classifier import detect_project_kind
from devsweep.models.project import ProjectKind

log = logging.getLogger(__name__)

WalkProgressCallback = Callable[[int], None]  # (directories_visited)

# Report progress every N directories.
PROGRESS_INTERVAL = 200

# Artifact, dependency and VCS directories that are never descended into.
SKIP_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "target",
        ".venv",
        "venv",
        "__pycache__",
        ".gradle",
        "Library",  # Unity
        ".terraform",
        ".godot",
        ".stack-work",
        ".build",
        "zig-cache",
        "zig-out",
    }
)


def should_visit(name: str, depth: int) -> bool:
    """Decide whether a directory may be visited and descended into.

    Hidden directories are skipped below the root; known artifact
    directories are skipped at any depth.
    """
    if name.startswith(".") and depth > 0:
        return False
    return name not in SKIP_DIRS


def walk_projects(
    root: Path,
    max_depth: int | None = None,
    on_progress: WalkProgressCallback | None = None,
) -> Iterator[tuple[Path, ProjectKind]]:
    """Yield ``(directory, kind)`` for every project found under ``root``.

    Pre-order, depth-first, never following symlinks.  A directory exactly
    at ``max_depth`` is still classified but its children are not listed.
    Classified directories are descended into like any other, so nested
    projects are found too.
    """
    if not should_visit(root.name, 0):
        return

    visited = 0
    stack: list[tuple[Path, int]] = [(root, 0)]
    while stack:
        current, depth = stack.pop()
        visited += 1
        if on_progress and visited % PROGRESS_INTERVAL == 0:
            on_progress(visited)

        try:
            kind = detect_project_kind(current)
        except OSError:
            log.debug("Cannot classify: %s", current)
            kind = None
        if kind is not None:
            log.debug("Found %s project: %s", kind, current)
            yield current, kind

        if max_depth is not None and depth >= max_depth:
            continue

        children: list[Path] = []
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False) and should_visit(entry.name, depth + 1):
                            children.append(Path(entry.path))
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue

        # Reverse-sorted so the stack pops children in name order.
        children.sort(reverse=True)
        stack.extend((child, depth + 1) for child in children)

    if on_progress:
        on_progress(visited)
