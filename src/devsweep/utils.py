"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import subprocess
from datetime import timedelta
from pathlib import Path

log = logging.getLogger(__name__)

# Timeout for a single ``find`` size walk (seconds).
_FIND_TIMEOUT = 300

_AGE_UNITS = {"d": 1, "w": 7, "m": 30, "y": 365}


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def dir_size(path: Path | str) -> int:
    """Calculate the total size of all regular files under a directory.

    Uses GNU ``find`` (C-speed walk) when available, falling back to
    ``os.scandir`` on systems without it.  Symlinks are never followed
    and unreadable entries are skipped.
    """
    try:
        return _dir_size_find(str(path))
    except (OSError, ValueError, subprocess.SubprocessError):
        return _dir_size_scandir(path)


def _dir_size_find(path_str: str) -> int:
    """Walk a directory tree using GNU find."""
    proc = subprocess.run(
        ["find", path_str, "-type", "f", "-printf", "%s\n"],
        capture_output=True,
        timeout=_FIND_TIMEOUT,
    )
    # find exits non-zero on unreadable subdirectories but still reports the
    # rest; with no output at all we cannot tell a failure from an empty tree.
    if proc.returncode != 0 and not proc.stdout:
        raise ValueError(f"find failed for {path_str}: {proc.stderr.decode(errors='replace').strip()}")
    return sum(int(line) for line in proc.stdout.split(b"\n") if line)


def _dir_size_scandir(path: Path | str) -> int:
    """Walk a directory tree using os.scandir (pure Python fallback)."""
    total = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError:
                        log.debug("Cannot stat: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return total


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def parse_age(text: str) -> timedelta:
    """Parse an age like ``30d``, ``4w``, ``3m`` or ``1y`` into a timedelta.

    Months count as 30 days and years as 365 days.

    Raises:
        ValueError: If the text is not a number followed by a known unit.
    """
    value = text.strip().lower()
    unit = value[-1:]
    if unit not in _AGE_UNITS:
        raise ValueError(
            f"Invalid age format '{value}'. Use e.g. '30d' (days), '4w' (weeks), "
            "'3m' (months), '1y' (years)"
        )
    number = value[:-1]
    if not number.isdigit():
        raise ValueError(f"Invalid number in age string: '{number}'")
    return timedelta(days=int(number) * _AGE_UNITS[unit])


def parse_selection(text: str, count: int) -> list[int]:
    """Parse a 1-based selection like ``1,3 5-8`` into sorted 0-based indices.

    Tokens are separated by commas or spaces; ``a-b`` selects an inclusive
    range.  Duplicates are dropped.  Empty input selects nothing.

    Raises:
        ValueError: On a non-number, a number outside ``1..count``, or a
            reversed range.
    """
    selected: set[int] = set()
    for part in text.replace(",", " ").split():
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start = _parse_index(start_text)
            end = _parse_index(end_text)
            if start < 1 or end > count or start > end:
                raise ValueError(f"Invalid range: {start}-{end}")
            selected.update(range(start - 1, end))
        else:
            number = _parse_index(part)
            if number < 1 or number > count:
                raise ValueError(f"Number out of range: {number}")
            selected.add(number - 1)
    return sorted(selected)


def _parse_index(text: str) -> int:
    text = text.strip()
    if not text.isdecimal():
        raise ValueError(f"Invalid number: '{text}'")
    return int(text)


def format_age(delta: timedelta) -> str:
    """Format a duration as a short age string ('5d ago')."""
    days = delta.days
    if days > 365:
        return f"{days / 365:.1f}y ago"
    if days > 30:
        return f"{days // 30}mo ago"
    if days > 0:
        return f"{days}d ago"
    hours = int(delta.total_seconds()) // 3600
    if hours > 0:
        return f"{hours}h ago"
    return "just now"


def shorten_path(path: Path | str) -> str:
    """Replace the home directory prefix with ``~``."""
    text = str(path)
    home = str(Path.home())
    if text == home or text.startswith(home + os.sep):
        return "~" + text[len(home):]
    return text
