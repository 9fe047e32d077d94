"""Deletion of resolved clean targets."""

from __future__ import annotations

import logging
import shutil
from typing import Iterable

from devsweep.models.clean_result import CleanResult
from devsweep.models.project import ScannedProject

log = logging.getLogger(__name__)


def clean_project(project: ScannedProject, dry_run: bool = False) -> CleanResult:
    """Remove every clean target of a project.

    A failing target is recorded in ``CleanResult.errors`` and the
    remaining targets are still attempted.  With ``dry_run`` nothing on
    disk is touched and every target counts as cleaned.
    """
    result = CleanResult(project_name=project.name)

    for target in project.clean_targets:
        if dry_run:
            result.targets_cleaned += 1
            result.bytes_freed += target.size_bytes
            continue

        try:
            shutil.rmtree(target.path)
        except OSError as e:
            log.warning("Failed to remove %s: %s", target.path, e)
            result.errors.append(f"Failed to remove {target.path}: {e}")
            continue

        log.info("Removed %s (%d bytes)", target.path, target.size_bytes)
        result.targets_cleaned += 1
        result.bytes_freed += target.size_bytes

    return result


def clean_projects(projects: Iterable[ScannedProject], dry_run: bool = False) -> list[CleanResult]:
    """Clean several projects independently, never aborting the batch."""
    results: list[CleanResult] = []
    for project in projects:
        try:
            results.append(clean_project(project, dry_run=dry_run))
        except Exception as e:
            log.exception("Cleaning crashed for project '%s'", project.name)
            results.append(CleanResult(project_name=project.name, errors=[str(e) or type(e).__name__]))
    return results
