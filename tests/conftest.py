"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolate_config(tmp_path_factory, monkeypatch):
    """Point XDG_CONFIG_HOME at an empty temp directory."""
    config_home = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dev-sweep" / "config.json"


@pytest.fixture
def make_file():
    """Create a file (and its parents) with ``size`` bytes of content."""

    def _make(path: Path, size: int = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        return path

    return _make
