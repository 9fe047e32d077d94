"""Scanning and cleaning orchestration engine."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterable

from devsweep.core.analyzer import analyze_project
from devsweep.core.cleaner import clean_project, clean_projects
from devsweep.core.walker import walk_projects
from devsweep.models.clean_result import CleanResult
from devsweep.models.project import ProjectKind, ScannedProject
from devsweep.settings import Settings

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (stage, status_message)
Candidate = tuple[Path, ProjectKind]


class InvalidRootError(Exception):
    """Raised when the scan root does not exist or is not a directory."""


def _canonical(path: Path) -> Path:
    return Path(path).expanduser().resolve()


class SweepEngine:
    """Runs the walk → analyze → filter pipeline and cleans its output."""

    def __init__(self, settings: Settings | None = None, max_workers: int | None = None) -> None:
        self.settings = settings or Settings()
        self.max_workers = max_workers or os.cpu_count() or 1

    def scan(
        self,
        root: Path | str,
        max_depth: int | None = None,
        ignore_paths: Iterable[Path | str] = (),
        exclude_kinds: Iterable[ProjectKind] = (),
        on_progress: ProgressCallback | None = None,
    ) -> list[ScannedProject]:
        """Find projects under ``root`` that have something to clean.

        ``max_depth`` falls back to the configured one; ``ignore_paths`` and
        ``exclude_kinds`` are merged with the configured lists.  Projects
        whose analysis fails or that hold zero cleanable bytes are dropped.
        The order of the returned list is unspecified.

        Raises:
            InvalidRootError: If ``root`` is not an existing directory.
        """
        root = Path(root).expanduser()
        if not root.is_dir():
            raise InvalidRootError(f"Path does not exist or is not a directory: {root}")

        if max_depth is None:
            max_depth = self.settings.max_depth
        ignored = {_canonical(p) for p in [*self.settings.ignore_paths, *ignore_paths]}
        excluded = {*self.settings.exclude_kinds, *exclude_kinds}

        if on_progress:
            on_progress("walking", f"Scanning {root}...")

        def on_walk(count: int) -> None:
            if on_progress:
                on_progress("walking", f"Scanning... {count} directories checked")

        candidates = [
            (path, kind)
            for path, kind in walk_projects(root, max_depth=max_depth, on_progress=on_walk)
            if kind not in excluded and _canonical(path) not in ignored
        ]
        log.info("Found %d candidate projects under %s", len(candidates), root)

        if on_progress:
            on_progress("analyzing", f"Found {len(candidates)} projects, calculating sizes...")

        if self.max_workers > 1 and len(candidates) > 1:
            projects = self._analyze_parallel(candidates)
        else:
            projects = self._analyze_sequential(candidates)

        projects = [p for p in projects if p.total_cleanable_bytes > 0]
        if on_progress:
            on_progress("done", f"{len(projects)} projects with cleanable artifacts")
        return projects

    def _analyze_sequential(self, candidates: list[Candidate]) -> list[ScannedProject]:
        """Analyze candidates one at a time."""
        projects: list[ScannedProject] = []
        for path, kind in candidates:
            project = _analyze_or_none(path, kind)
            if project is not None:
                projects.append(project)
        return projects

    def _analyze_parallel(self, candidates: list[Candidate]) -> list[ScannedProject]:
        """Analyze candidates on a thread pool; results arrive in completion order."""
        projects: list[ScannedProject] = []
        max_workers = min(self.max_workers, len(candidates))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_analyze_or_none, path, kind) for path, kind in candidates]
            for future in as_completed(futures):
                project = future.result()
                if project is not None:
                    projects.append(project)
        return projects

    def clean(self, project: ScannedProject, dry_run: bool = False) -> CleanResult:
        """Clean a single project."""
        return clean_project(project, dry_run=dry_run)

    def clean_batch(self, projects: Iterable[ScannedProject], dry_run: bool = False) -> list[CleanResult]:
        """Clean several projects; one failure never stops the rest."""
        return clean_projects(projects, dry_run=dry_run)


def _analyze_or_none(path: Path, kind: ProjectKind) -> ScannedProject | None:
    try:
        return analyze_project(path, kind)
    except Exception:
        log.warning("Dropping %s: analysis failed", path, exc_info=True)
        return None


def scan(
    root: Path | str,
    max_depth: int | None = None,
    ignore_paths: Iterable[Path | str] = (),
    exclude_kinds: Iterable[ProjectKind] = (),
) -> list[ScannedProject]:
    """Scan ``root`` without any persisted configuration."""
    return SweepEngine().scan(root, max_depth=max_depth, ignore_paths=ignore_paths, exclude_kinds=exclude_kinds)


def clean(project: ScannedProject, dry_run: bool = False) -> CleanResult:
    return clean_project(project, dry_run=dry_run)


def clean_batch(projects: Iterable[ScannedProject], dry_run: bool = False) -> list[CleanResult]:
    return clean_projects(projects, dry_run=dry_run)


def sort_by_size(projects: Iterable[ScannedProject]) -> list[ScannedProject]:
    """Largest reclaimable projects first."""
    return sorted(projects, key=lambda p: p.total_cleanable_bytes, reverse=True)


def filter_older_than(
    projects: Iterable[ScannedProject],
    age: timedelta,
    now: datetime | None = None,
) -> list[ScannedProject]:
    """Keep projects last modified more than ``age`` ago."""
    now = now or datetime.now().astimezone()
    return [p for p in projects if p.age(now) > age]


def summarize_by_kind(projects: Iterable[ScannedProject]) -> dict[ProjectKind, tuple[int, int]]:
    """Map each kind to ``(project_count, cleanable_bytes)``."""
    summary: dict[ProjectKind, tuple[int, int]] = {}
    for project in projects:
        count, total = summary.get(project.kind, (0, 0))
        summary[project.kind] = (count + 1, total + project.total_cleanable_bytes)
    return summary
