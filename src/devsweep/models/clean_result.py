"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CleanResult:
    """Result of cleaning a single project."""

    project_name: str
    targets_cleaned: int = 0
    bytes_freed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "targets_cleaned": self.targets_cleaned,
            "bytes_freed": self.bytes_freed,
            "errors": list(self.errors),
        }
