"""FileIndex: stem → candidate paths under the note root."""

from __future__ import annotations

import logging
from pathlib import Path

from pebble.fs import find_files

log = logging.getLogger(__name__)


class FileIndex:
    """Maps a filename stem to every Markdown file sharing it.

    The index is rebuilt wholesale; :meth:`invalidate` only drops the
    validity flag so the next lookup through the store triggers a rebuild.
    """

    def __init__(self, scan_limit: int = 1000, extension: str = ".md") -> None:
        self.scan_limit = scan_limit
        self.extension = extension
        self.valid = False
        self.root: Path | None = None
        self._stems: dict[str, list[Path]] = {}

    def __len__(self) -> int:
        return len(self._stems)

    def rebuild(self, root: Path) -> None:
        """(Re-)scan *root* for Markdown files."""
        self._stems = {}
        self.root = Path(root)
        found = find_files(self.root, self._is_markdown, self.scan_limit)
        for path in found:
            self._stems.setdefault(path.stem, []).append(path)
        self.valid = True
        if len(found) >= self.scan_limit:
            log.warning("Scan limit of %d files reached under %s", self.scan_limit, self.root)
        log.debug("Indexed %d files (%d stems) under %s", len(found), len(self._stems), self.root)

    def _is_markdown(self, path: Path) -> bool:
        return path.name.endswith(self.extension)

    def lookup(self, stem: str) -> list[Path]:
        return list(self._stems.get(stem, []))

    def lookup_casefold(self, stem: str) -> list[Path]:
        key = stem.casefold()
        return [p for s, paths in self._stems.items() if s.casefold() == key for p in paths]

    def paths(self) -> list[Path]:
        """Every indexed path, in discovery order per stem."""
        return [p for paths in self._stems.values() for p in paths]

    def invalidate(self) -> None:
        self.valid = False

    def clear(self) -> None:
        self._stems = {}
        self.valid = False
