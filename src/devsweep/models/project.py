"""Project kinds and scanned project dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any


class ProjectKind(Enum):
    """Kind of development project.

    Declaration order is the detection priority: when a directory carries
    markers for several kinds, the earliest one wins.
    """

    RUST = "Rust"
    NODE = "Node"
    PYTHON = "Python"
    JAVA = "Java"
    DOTNET = "DotNet"
    GO = "Go"
    ZIG = "Zig"
    CMAKE = "CMake"
    SWIFT = "Swift"
    ELIXIR = "Elixir"
    HASKELL = "Haskell"
    DART = "Dart"
    RUBY = "Ruby"
    SCALA = "Scala"
    UNITY = "Unity"
    GODOT = "Godot"
    TERRAFORM = "Terraform"

    @property
    def markers(self) -> tuple[str, ...]:
        """Files or paths whose presence identifies this kind."""
        return _KIND_TABLE[self].markers

    @property
    def cleanable_dirs(self) -> tuple[str, ...]:
        """Artifact directories that are safe to delete for this kind."""
        return _KIND_TABLE[self].cleanable_dirs

    @property
    def display_name(self) -> str:
        return _KIND_TABLE[self].display_name or self.value

    @classmethod
    def from_name(cls, text: str) -> ProjectKind:
        """Look up a kind by its name or display name, ignoring case."""
        needle = text.strip().lower()
        for kind in cls:
            if needle in (kind.value.lower(), kind.name.lower(), kind.display_name.lower()):
                return kind
        raise ValueError(f"Unknown project kind: {text!r}")

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class KindPatterns:
    """Marker and cleanable-dir patterns for one project kind.

    A pattern is an exact file name (``"Cargo.toml"``), a nested relative
    path (``"vendor/bundle"``) or a suffix glob (``"*.csproj"``).
    """

    markers: tuple[str, ...]
    cleanable_dirs: tuple[str, ...]
    display_name: str = ""


_KIND_TABLE: dict[ProjectKind, KindPatterns] = {
    ProjectKind.RUST: KindPatterns(("Cargo.toml",), ("target",)),
    ProjectKind.NODE: KindPatterns(
        ("package.json",),
        ("node_modules", ".next", ".nuxt", "dist", ".cache"),
        "Node.js",
    ),
    ProjectKind.PYTHON: KindPatterns(
        ("pyproject.toml", "setup.py", "requirements.txt"),
        ("__pycache__", ".venv", "venv", ".tox", "*.egg-info", ".mypy_cache", ".pytest_cache"),
    ),
    ProjectKind.JAVA: KindPatterns(("pom.xml", "build.gradle", "build.gradle.kts"), ("target", "build", ".gradle")),
    ProjectKind.DOTNET: KindPatterns(("*.csproj", "*.fsproj", "*.sln"), ("bin", "obj"), ".NET"),
    # Go modules live in a shared cache, nothing per-project to clean
    ProjectKind.GO: KindPatterns(("go.mod",), ()),
    ProjectKind.ZIG: KindPatterns(("build.zig",), ("zig-cache", "zig-out")),
    ProjectKind.CMAKE: KindPatterns(("CMakeLists.txt",), ("build", "cmake-build-debug", "cmake-build-release")),
    ProjectKind.SWIFT: KindPatterns(("Package.swift",), (".build",)),
    ProjectKind.ELIXIR: KindPatterns(("mix.exs",), ("_build", "deps")),
    ProjectKind.HASKELL: KindPatterns(("stack.yaml", "*.cabal"), (".stack-work",)),
    ProjectKind.DART: KindPatterns(("pubspec.yaml",), (".dart_tool", "build")),
    ProjectKind.RUBY: KindPatterns(("Gemfile",), ("vendor/bundle",)),
    ProjectKind.SCALA: KindPatterns(("build.sbt",), ("target", "project/target")),
    ProjectKind.UNITY: KindPatterns(("ProjectSettings/ProjectVersion.txt",), ("Library", "Temp", "Obj", "Logs")),
    ProjectKind.GODOT: KindPatterns(("project.godot",), (".godot",)),
    ProjectKind.TERRAFORM: KindPatterns(("main.tf", "*.tf"), (".terraform",)),
}


@dataclass(frozen=True, slots=True)
class CleanTarget:
    """A resolved artifact directory inside a project."""

    path: Path
    name: str
    size_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "name": self.name, "size_bytes": self.size_bytes}


@dataclass(frozen=True, slots=True)
class ScannedProject:
    """A detected project together with its cleanable targets.

    Use :meth:`build` to construct one; it derives ``total_cleanable_bytes``
    from the targets so the two can never disagree.
    """

    path: Path
    kind: ProjectKind
    name: str
    last_modified: datetime
    clean_targets: tuple[CleanTarget, ...] = field(default_factory=tuple)
    total_cleanable_bytes: int = 0

    @classmethod
    def build(
        cls,
        path: Path,
        kind: ProjectKind,
        last_modified: datetime,
        clean_targets: list[CleanTarget] | tuple[CleanTarget, ...] = (),
        name: str | None = None,
    ) -> ScannedProject:
        targets = tuple(clean_targets)
        return cls(
            path=path,
            kind=kind,
            name=name or path.name or str(path),
            last_modified=last_modified,
            clean_targets=targets,
            total_cleanable_bytes=sum(t.size_bytes for t in targets),
        )

    def age(self, now: datetime | None = None) -> timedelta:
        """Time elapsed since the project was last modified."""
        now = now or datetime.now().astimezone()
        return now - self.last_modified

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "kind": self.kind.value,
            "name": self.name,
            "last_modified": self.last_modified.isoformat(),
            "clean_targets": [t.to_dict() for t in self.clean_targets],
            "total_cleanable_bytes": self.total_cleanable_bytes,
        }
