"""Filesystem capabilities used by the indexes.

Thin wrappers that translate ``OSError`` into the :mod:`pebble.errors`
taxonomy so callers can degrade to "no data" instead of crashing.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Iterator, Sequence
from itertools import islice
from pathlib import Path

from pebble.errors import NotFound, NotReadable, WriteError

log = logging.getLogger(__name__)


def read_text_lines(path: Path, max_lines: int | None = None) -> list[str]:
    """Return up to *max_lines* lines of *path* without line terminators."""
    try:
        with open(path, encoding="utf-8") as fh:
            return [line.rstrip("\r\n") for line in islice(fh, max_lines)]
    except (OSError, UnicodeDecodeError) as exc:
        raise NotReadable(f"Cannot read {path}: {exc}") from exc


def write_text_lines(path: Path, lines: Sequence[str], *, exclusive: bool = False) -> None:
    """Write *lines* to *path*, one per line.

    With ``exclusive=True`` the file must not exist yet; ``FileExistsError``
    is re-raised untouched so callers can treat it as "someone else won".
    """
    mode = "x" if exclusive else "w"
    try:
        with open(path, mode, encoding="utf-8") as fh:
            fh.write("\n".join(lines))
    except FileExistsError:
        raise
    except OSError as exc:
        raise WriteError(f"Cannot write {path}: {exc}") from exc


def file_exists(path: Path) -> bool:
    return Path(path).is_file()


def stat_mtime(path: Path) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError as exc:
        raise NotFound(f"Cannot stat {path}: {exc}") from exc


def _walk(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        # .git, .obsidian and friends never hold notes
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for name in filenames:
            yield Path(dirpath) / name


def find_files(root: Path, predicate: Callable[[Path], bool], limit: int) -> list[Path]:
    """Return at most *limit* files under *root* accepted by *predicate*.

    Results are in discovery order.
    """
    return list(islice((p for p in _walk(Path(root)) if predicate(p)), limit))


def detect_repository_root(cwd: Path | None = None) -> Path:
    """Return the git toplevel containing *cwd*, falling back to *cwd* itself."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=base,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        log.debug("git unavailable (%s); using %s", exc, base)
        return base
    toplevel = proc.stdout.strip()
    if proc.returncode == 0 and toplevel:
        return Path(toplevel)
    return base
