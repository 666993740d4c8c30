"""Wiki-link and Markdown-link extraction.

Two syntaxes are recognised, scanned left to right on each line:

* ``[[name]]``: *name* is kept verbatim;
* ``[label](target)``: kept only when *target* ends in ``.md`` or has no
  extension at all, with the ``.md`` suffix dropped.  URLs are never kept.

:class:`LinkCache` memoises :func:`extract_links` per file, keyed on the
file's modification time.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Literal

from pebble.errors import NotFound, NotReadable
from pebble.fs import read_text_lines, stat_mtime

log = logging.getLogger(__name__)

LinkKind = Literal["wiki", "markdown"]

_LINK_RE = re.compile(r"\[\[(?P<wiki>[^\]]+)\]\]|\[[^\]]*\]\((?P<target>[^)]+)\)")
_URL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


@dataclass(frozen=True)
class LinkSpan:
    """A link occurrence in a buffer; columns are 0-based, *end* exclusive."""

    row: int
    col: int
    end: int
    kind: LinkKind
    target: str

    @property
    def position(self) -> tuple[int, int]:
        return (self.row, self.col)


def is_url(target: str) -> bool:
    return bool(_URL_RE.match(target))


def note_target(target: str, extension: str = ".md") -> str | None:
    """Return the note name a Markdown link points at, or ``None``."""
    if is_url(target):
        return None
    if target.endswith(extension):
        target = target[: -len(extension)]
    elif PurePosixPath(target).suffix:
        return None
    return target or None


def find_link_spans(lines: Sequence[str]) -> list[LinkSpan]:
    """Return every link in *lines*, in reading order."""
    spans: list[LinkSpan] = []
    for row, line in enumerate(lines):
        for m in _LINK_RE.finditer(line):
            if m.group("wiki") is not None:
                spans.append(LinkSpan(row, m.start(), m.end(), "wiki", m.group("wiki")))
            else:
                spans.append(LinkSpan(row, m.start(), m.end(), "markdown", m.group("target")))
    return spans


def extract_links(lines: Sequence[str], extension: str = ".md") -> list[str]:
    """Return the note names linked from *lines*, duplicates included."""
    links: list[str] = []
    for span in find_link_spans(lines):
        if span.kind == "wiki":
            links.append(span.target)
        elif (name := note_target(span.target, extension)) is not None:
            links.append(name)
    return links


def link_at(line: str, col: int) -> LinkSpan | None:
    """Return the link on *line* covering column *col*."""
    for span in find_link_spans([line]):
        if span.col <= col < span.end:
            return span
    return None


def next_link_position(lines: Sequence[str], cursor: tuple[int, int]) -> tuple[int, int] | None:
    """Start of the first link after *cursor*, wrapping to the first link."""
    spans = find_link_spans(lines)
    if not spans:
        return None
    for span in spans:
        if span.position > cursor:
            return span.position
    return spans[0].position


def prev_link_position(lines: Sequence[str], cursor: tuple[int, int]) -> tuple[int, int] | None:
    """Start of the last link before *cursor*, wrapping to the last link."""
    spans = find_link_spans(lines)
    if not spans:
        return None
    for span in reversed(spans):
        if span.position < cursor:
            return span.position
    return spans[-1].position


# ---------------------------------------------------------------------------
# Per-file cache
# ---------------------------------------------------------------------------


@dataclass
class LinkCacheEntry:
    links: list[str]
    mtime: float

    def is_stale(self, current_mtime: float) -> bool:
        # Only a newer mtime invalidates; a file rewound to an older
        # timestamp keeps serving the cached links.
        return current_mtime > self.mtime


class LinkCache:
    """Per-path memo of :func:`extract_links` over the first *max_lines* lines."""

    def __init__(self, max_lines: int = 100, extension: str = ".md") -> None:
        self.max_lines = max_lines
        self.extension = extension
        self._entries: dict[Path, LinkCacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def extract(self, path: Path) -> list[str]:
        path = Path(path)
        try:
            mtime = stat_mtime(path)
        except NotFound:
            self._entries.pop(path, None)
            return []

        entry = self._entries.get(path)
        if entry is not None and not entry.is_stale(mtime):
            return list(entry.links)

        try:
            lines = read_text_lines(path, self.max_lines)
        except NotReadable:
            return []
        links = extract_links(lines, self.extension)
        self._entries[path] = LinkCacheEntry(links, mtime)
        log.debug("Extracted %d links from %s", len(links), path)
        return list(links)

    def entries(self) -> dict[Path, LinkCacheEntry]:
        return dict(self._entries)

    def clear(self) -> None:
        self._entries.clear()
