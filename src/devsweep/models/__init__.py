"""dev-sweep data models."""

from devsweep.models.project import CleanTarget, KindPatterns, ProjectKind, ScannedProject
from devsweep.models.clean_result import CleanResult

__all__ = [
    "CleanResult",
    "CleanTarget",
    "KindPatterns",
    "ProjectKind",
    "ScannedProject",
]
