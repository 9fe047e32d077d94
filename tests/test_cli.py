"""Tests for the command-line interface."""

from __future__ import annotations

import json
from datetime import datetime

import click
import pytest
from click.testing import CliRunner

from devsweep.cli import _format_project, main
from devsweep.models.project import CleanTarget, ProjectKind, ScannedProject


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workspace(tmp_path, make_file):
    root = tmp_path / "code"
    make_file(root / "crate" / "Cargo.toml")
    make_file(root / "crate" / "target" / "debug" / "app", 2048)
    make_file(root / "site" / "package.json")
    make_file(root / "site" / "node_modules" / "lib.js", 100)
    return root


class TestScanCommand:
    def test_table(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace)])
        assert result.exit_code == 0, result.output
        assert "crate" in result.output
        assert "site" in result.output
        assert "2 projects" in result.output

    def test_json_sorted_by_size(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [p["name"] for p in data] == ["crate", "site"]
        assert data[0]["kind"] == "Rust"
        assert data[0]["total_cleanable_bytes"] == 2048
        assert data[0]["clean_targets"][0]["name"] == "target"

    def test_nothing_found(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", str(tmp_path)])
        assert result.exit_code == 0
        assert "No projects" in result.output

    def test_invalid_root(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_older_than_filters_fresh_projects(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--older-than", "30d", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == []

    def test_bad_older_than(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--older-than", "soon"])
        assert result.exit_code == 2
        assert "Invalid age format" in result.output

    def test_max_depth(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "-d", "0", "--json"])
        assert json.loads(result.output) == []

    def test_default_root_from_config(self, runner, workspace, isolate_config):
        isolate_config.parent.mkdir(parents=True)
        isolate_config.write_text(json.dumps({"default_roots": [str(workspace)], "exclude_kinds": ["Node"]}))
        result = runner.invoke(main, ["scan", "--json"])
        assert result.exit_code == 0, result.output
        assert [p["name"] for p in json.loads(result.output)] == ["crate"]


class TestCleanCommand:
    def test_dry_run_all(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all", "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "dry run" in result.output
        assert (workspace / "crate" / "target").is_dir()
        assert (workspace / "site" / "node_modules").is_dir()

    def test_all_with_yes(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all", "--yes"])
        assert result.exit_code == 0, result.output
        assert not (workspace / "crate" / "target").exists()
        assert not (workspace / "site" / "node_modules").exists()
        assert (workspace / "crate" / "Cargo.toml").is_file()

    def test_all_requires_confirmation(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert (workspace / "crate" / "target").is_dir()

    def test_interactive_selection(self, runner, workspace):
        # Sorted by size: [1] crate, [2] site
        result = runner.invoke(main, ["clean", str(workspace)], input="2\ny\n")
        assert result.exit_code == 0, result.output
        assert (workspace / "crate" / "target").is_dir()
        assert not (workspace / "site" / "node_modules").exists()

    def test_empty_selection(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace)], input="\n")
        assert result.exit_code == 0
        assert "Nothing selected" in result.output

    def test_json(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all", "--json", "--dry-run"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data == {"dry_run": True, "projects_cleaned": 2, "total_bytes_freed": 2148, "errors": []}

    def test_json_without_all_is_rejected(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--json"])
        assert result.exit_code == 2
        assert (workspace / "crate" / "target").is_dir()

    def test_json_all_without_yes_is_rejected(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all", "--json"])
        assert result.exit_code == 2
        assert "--yes" in result.output
        assert (workspace / "crate" / "target").is_dir()
        assert (workspace / "site" / "node_modules").is_dir()

    def test_json_all_with_yes(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--all", "--json", "--yes"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["total_bytes_freed"] == 2148
        assert not (workspace / "crate" / "target").exists()

    def test_selection_range(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace)], input="1-2\ny\n")
        assert result.exit_code == 0, result.output
        assert not (workspace / "crate" / "target").exists()
        assert not (workspace / "site" / "node_modules").exists()

    def test_invalid_selection_prompts_again(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace)], input="2,abc,99\n1\ny\n")
        assert result.exit_code == 0, result.output
        assert "Invalid number: 'abc'" in result.output
        assert not (workspace / "crate" / "target").exists()
        assert (workspace / "site" / "node_modules").is_dir()

    def test_out_of_range_selection_cleans_nothing(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace)], input="99\n")
        assert result.exit_code != 0
        assert "Number out of range: 99" in result.output
        assert (workspace / "crate" / "target").is_dir()
        assert (workspace / "site" / "node_modules").is_dir()


class TestTableLayout:
    def test_columns_align_with_styling(self, tmp_path):
        now = datetime.now().astimezone()
        short = ScannedProject.build(
            tmp_path / "a", ProjectKind.RUST, now, [CleanTarget(tmp_path / "a" / "target", "target", 5)]
        )
        long = ScannedProject.build(
            tmp_path / "much-longer-name",
            ProjectKind.NODE,
            now,
            [CleanTarget(tmp_path / "much-longer-name" / "node_modules", "node_modules", 5 * 1024**3)],
        )
        lines = [click.unstyle(_format_project(None, p)) for p in (short, long)]
        assert lines[0].index("Rust") == lines[1].index("Node.js")
        assert lines[0].index("target") == lines[1].index("node_modules")


class TestSummaryCommand:
    def test_json(self, runner, workspace):
        result = runner.invoke(main, ["summary", str(workspace), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_projects"] == 2
        assert data["total_reclaimable_bytes"] == 2148
        assert [k["kind"] for k in data["by_kind"]] == ["Rust", "Node"]

    def test_text(self, runner, workspace):
        result = runner.invoke(main, ["summary", str(workspace)])
        assert result.exit_code == 0, result.output
        assert "Total projects" in result.output
        assert "Node.js" in result.output


class TestConfigCommand:
    def test_show_defaults(self, runner):
        result = runner.invoke(main, ["config", "--show"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "ignore_paths": [],
            "exclude_kinds": [],
            "default_roots": [],
            "max_depth": None,
        }

    def test_reset_writes_file(self, runner, isolate_config):
        isolate_config.parent.mkdir(parents=True)
        isolate_config.write_text(json.dumps({"max_depth": 9}))
        result = runner.invoke(main, ["config", "--reset"])
        assert result.exit_code == 0
        assert json.loads(isolate_config.read_text())["max_depth"] is None

    def test_overview(self, runner, isolate_config):
        result = runner.invoke(main, ["config"])
        assert result.exit_code == 0
        assert str(isolate_config) in result.output
        assert "no (using defaults)" in result.output
