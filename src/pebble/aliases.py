"""Lazily built alias → path index.

A note's frontmatter is parsed at most once per invalidation cycle, on the
first :meth:`AliasIndex.ensure_scanned` call for its path.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pebble.note import load_note

log = logging.getLogger(__name__)


class ScanState(Enum):
    UNSCANNED = "unscanned"
    NO_ALIAS = "no-alias"
    HAS_ALIAS = "has-alias"


class AliasIndex:
    """Case-insensitive map from frontmatter aliases to note paths."""

    def __init__(self, max_lines: int = 10) -> None:
        self.max_lines = max_lines
        self._aliases: dict[str, Path] = {}
        #: path -> lower-cased aliases found there (empty when none)
        self._scanned: dict[Path, tuple[str, ...]] = {}

    def __len__(self) -> int:
        return len(self._aliases)

    def state(self, path: Path) -> ScanState:
        found = self._scanned.get(Path(path))
        if found is None:
            return ScanState.UNSCANNED
        return ScanState.HAS_ALIAS if found else ScanState.NO_ALIAS

    def is_scanned(self, path: Path) -> bool:
        return Path(path) in self._scanned

    def ensure_scanned(self, path: Path) -> None:
        path = Path(path)
        if path in self._scanned:
            return
        note = load_note(path, self.max_lines)
        claimed: list[str] = []
        for alias in dict.fromkeys(a.lower() for a in note.aliases):
            owner = self._aliases.setdefault(alias, path)
            if owner == path:
                claimed.append(alias)
            else:
                log.warning("Alias %r of %s already belongs to %s", alias, path, owner)
        found = tuple(claimed)
        self._scanned[path] = found
        if found:
            log.debug("Aliases %s -> %s", ", ".join(found), path)

    def lookup(self, name: str) -> Path | None:
        return self._aliases.get(name.lower())

    def invalidate(self) -> None:
        self._aliases.clear()
        self._scanned.clear()
