"""Core Note dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pebble.frontmatter import parse_frontmatter
from pebble.fs import stat_mtime


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str) and v]
    if isinstance(value, str) and value:
        return [value]
    return []


@dataclass
class Note:
    """A Markdown note identified by its path."""

    path: Path
    title: str
    #: ``alias`` and ``aliases`` frontmatter values, merged in that order
    aliases: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    created: str | None = None
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def mtime(self) -> float:
        """Current on-disk modification time; raises :class:`~pebble.errors.NotFound`."""
        return stat_mtime(self.path)


def load_note(path: Path, max_lines: int = 10) -> Note:
    """Build a :class:`Note` from the frontmatter of *path*.

    Missing or malformed frontmatter yields a note titled after its stem.
    """
    path = Path(path)
    meta = parse_frontmatter(path, max_lines) or {}

    aliases = _as_list(meta.get("alias")) + _as_list(meta.get("aliases"))
    tags = meta.get("tags") or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]

    title = meta.get("title")
    return Note(
        path=path,
        title=title if isinstance(title, str) and title else path.stem,
        aliases=list(dict.fromkeys(aliases)),
        tags=tags,
        created=meta.get("created") if isinstance(meta.get("created"), str) else None,
        frontmatter=meta,
    )
