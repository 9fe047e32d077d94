"""CLI interface for dev-sweep."""

from __future__ import annotations

import json
import logging
import sys
from datetime import timedelta
from pathlib import Path

import click

from devsweep.core.engine import (
    InvalidRootError,
    SweepEngine,
    filter_older_than,
    sort_by_size,
    summarize_by_kind,
)
from devsweep.models.clean_result import CleanResult
from devsweep.models.project import ScannedProject
from devsweep.settings import Settings
from devsweep.utils import bytes_to_human, format_age, parse_age, parse_selection, shorten_path


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _parse_age_option(ctx: click.Context, param: click.Parameter, value: str | None) -> timedelta | None:
    if value is None:
        return None
    try:
        return parse_age(value)
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _scan_options(func):
    """Options shared by every command that scans."""
    func = click.argument("path", required=False, type=click.Path(path_type=Path))(func)
    func = click.option("--max-depth", "-d", type=click.IntRange(min=0), default=None, help="Maximum directory depth to scan")(func)
    func = click.option(
        "--older-than",
        "-o",
        callback=_parse_age_option,
        default=None,
        help="Only projects older than this (e.g. 30d, 4w, 3m, 1y)",
    )(func)
    func = click.option("--json", "as_json", is_flag=True, help="Output as JSON")(func)
    return func


def _resolve_root(path: Path | None, settings: Settings) -> Path:
    if path is not None:
        return path.expanduser()
    if settings.default_roots:
        return settings.default_roots[0]
    return Path.cwd()


def _run_scan(path: Path | None, max_depth: int | None, older_than: timedelta | None, quiet: bool) -> list[ScannedProject]:
    """Scan, apply the age filter and sort; exits with status 1 on a bad root."""
    settings = Settings.load()
    engine = SweepEngine(settings)
    root = _resolve_root(path, settings)

    def on_progress(stage: str, message: str) -> None:
        if quiet:
            return
        if stage == "done":
            click.echo("\r\033[2K", nl=False, err=True)
        else:
            click.echo(f"\r\033[2K  {click.style('⠿', fg='cyan')} {message}", nl=False, err=True)

    try:
        projects = engine.scan(root, max_depth=max_depth, on_progress=on_progress)
    except InvalidRootError as e:
        click.echo(f"  {click.style('Error:', fg='red', bold=True)} {e}", err=True)
        sys.exit(1)

    if older_than is not None:
        projects = filter_older_than(projects, older_than)
    return sort_by_size(projects)


def _format_project(index: int | None, project: ScannedProject) -> str:
    prefix = f"[{index}] " if index is not None else ""
    targets = ", ".join(t.name for t in project.clean_targets)
    # Pad before styling; ANSI codes would count towards the field width.
    return (
        f"  {prefix}{click.style(f'{project.name:30s}', fg='cyan', bold=True)}  "
        f"{project.kind.display_name:10s} {format_age(project.age()):>10s}  "
        f"{click.style(f'{bytes_to_human(project.total_cleanable_bytes):>10s}', fg='yellow', bold=True)}  "
        f"{click.style(targets, fg='bright_black')}"
    )


def _print_table(projects: list[ScannedProject]) -> None:
    for project in projects:
        click.echo(_format_project(None, project))
        click.echo(f"      {click.style(shorten_path(project.path), fg='bright_black')}")
    total = sum(p.total_cleanable_bytes for p in projects)
    click.echo(
        f"\n  {len(projects)} projects, "
        f"{click.style(bytes_to_human(total), fg='green', bold=True)} reclaimable\n"
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.version_option(package_name="dev-sweep")
def main(verbose: int) -> None:
    """dev-sweep — find and clean build artifacts & dependency caches across your dev projects."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
def scan(path: Path | None, max_depth: int | None, older_than: timedelta | None, as_json: bool) -> None:
    """Scan for projects and show what can be cleaned (never deletes)."""
    projects = _run_scan(path, max_depth, older_than, quiet=as_json)

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in projects], indent=2))
        return

    if not projects:
        click.echo(f"\n  {click.style('ℹ', fg='blue')} No projects with cleanable artifacts found.\n")
        return

    click.echo()
    _print_table(projects)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--all", "-a", "clean_all", is_flag=True, help="Clean all found projects")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without deleting anything")
def clean(
    path: Path | None,
    max_depth: int | None,
    older_than: timedelta | None,
    as_json: bool,
    clean_all: bool,
    yes: bool,
    dry_run: bool,
) -> None:
    """Select projects and delete their build artifacts."""
    if as_json and not clean_all:
        raise click.UsageError("--json cannot prompt for a selection; combine it with --all")
    if as_json and not dry_run and not yes:
        raise click.UsageError("--json cannot confirm; add --yes or --dry-run")

    projects = _run_scan(path, max_depth, older_than, quiet=as_json)

    if not projects:
        if as_json:
            click.echo(json.dumps({"dry_run": dry_run, "projects_cleaned": 0, "total_bytes_freed": 0, "errors": []}))
        else:
            click.echo(f"\n  {click.style('ℹ', fg='blue')} No projects with cleanable artifacts found.\n")
        return

    if clean_all:
        selected = projects
    else:
        selected = _interactive_select(projects)
        if not selected:
            click.echo("Nothing selected.")
            return

    if not dry_run and not yes:
        total = sum(p.total_cleanable_bytes for p in selected)
        if not click.confirm(
            f"Clean {len(selected)} projects? This will free {bytes_to_human(total)} and cannot be undone!",
            default=False,
        ):
            click.echo("Aborted.")
            return

    if not as_json:
        action = "Would clean" if dry_run else "Cleaning"
        click.echo(f"\n  → {action} {click.style(str(len(selected)), fg='cyan')} projects...\n")

    engine = SweepEngine()
    results = engine.clean_batch(selected, dry_run=dry_run)

    if as_json:
        data = {
            "dry_run": dry_run,
            "projects_cleaned": len(results),
            "total_bytes_freed": sum(r.bytes_freed for r in results),
            "errors": [e for r in results for e in r.errors],
        }
        click.echo(json.dumps(data, indent=2))
        return

    _print_clean_summary(results, dry_run)


def _interactive_select(projects: list[ScannedProject]) -> list[ScannedProject]:
    """Let the user pick which projects to clean."""
    click.echo("\nSelect projects to clean (numbers separated by commas/spaces, ranges like 1,3,5-8, or 'all'):\n")
    for i, project in enumerate(projects, 1):
        click.echo(_format_project(i, project))
    click.echo()
    while True:
        raw = click.prompt("Selection", default="", show_default=False)
        if raw.strip().lower() == "all":
            return list(projects)
        try:
            indices = parse_selection(raw, len(projects))
        except ValueError as e:
            click.echo(f"  {click.style('Error:', fg='red', bold=True)} {e}", err=True)
            continue
        return [projects[i] for i in indices]


def _print_clean_summary(results: list[CleanResult], dry_run: bool) -> None:
    total_freed = 0
    for result in results:
        if result.errors:
            click.echo(
                f"  {click.style('!', fg='yellow')} {result.project_name:35s} — "
                f"freed {bytes_to_human(result.bytes_freed)}, {len(result.errors)} error(s)"
            )
            for error in result.errors:
                click.echo(f"      {click.style(error, fg='red')}")
        else:
            click.echo(
                f"  {click.style('✓', fg='green')} {result.project_name:35s} — "
                f"{result.targets_cleaned} targets, "
                f"{click.style(bytes_to_human(result.bytes_freed), fg='green', bold=True)}"
            )
        total_freed += result.bytes_freed

    label = "Would free" if dry_run else "Total freed"
    click.echo(f"\n{label}: {click.style(bytes_to_human(total_freed), fg='green', bold=True)}")
    if dry_run:
        click.echo("(dry run — no files were deleted)")
    click.echo()


# ── summary ──────────────────────────────────────────────────────────────

@main.command()
@_scan_options
def summary(path: Path | None, max_depth: int | None, older_than: timedelta | None, as_json: bool) -> None:
    """Show a quick summary of reclaimable space."""
    projects = _run_scan(path, max_depth, older_than, quiet=as_json)
    total = sum(p.total_cleanable_bytes for p in projects)
    by_kind = sorted(summarize_by_kind(projects).items(), key=lambda x: x[1][1], reverse=True)

    if as_json:
        data = {
            "total_projects": len(projects),
            "total_reclaimable_bytes": total,
            "total_reclaimable_human": bytes_to_human(total),
            "by_kind": [
                {
                    "kind": kind.value,
                    "projects": count,
                    "reclaimable_bytes": size,
                    "reclaimable_human": bytes_to_human(size),
                }
                for kind, (count, size) in by_kind
            ],
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} Summary\n")
    click.echo(f"  Total projects:     {click.style(str(len(projects)), fg='cyan')}")
    click.echo(f"  Reclaimable space:  {click.style(bytes_to_human(total), fg='yellow', bold=True)}")
    if by_kind:
        click.echo(f"\n  {click.style('By project type:', fg='bright_black')}")
        for kind, (count, size) in by_kind:
            click.echo(f"    {kind.display_name:>12s}  {count} projects, {bytes_to_human(size)}")
    click.echo()


# ── config ───────────────────────────────────────────────────────────────

@main.command("config")
@click.option("--show", is_flag=True, help="Print the current configuration as JSON")
@click.option("--reset", is_flag=True, help="Reset the configuration to defaults")
def config_cmd(show: bool, reset: bool) -> None:
    """Show or reset the configuration."""
    settings = Settings.load()

    if reset:
        settings.reset()
        try:
            settings.save()
        except OSError as e:
            click.echo(f"Could not write {settings.path}: {e}", err=True)
            sys.exit(1)
        click.echo(f"  {click.style('✓', fg='green')} Config reset to defaults.")
        click.echo(f"  → {settings.path}")
        return

    if show:
        click.echo(json.dumps(settings.to_dict(), indent=2))
        return

    exists = click.style("yes", fg="green") if settings.path.exists() else click.style("no (using defaults)", fg="bright_black")
    click.echo(f"\n  Config file: {settings.path}")
    click.echo(f"  Exists:      {exists}\n")
    click.echo(json.dumps(settings.to_dict(), indent=2))
