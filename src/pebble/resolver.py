"""Link-token resolution and note creation."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path, PurePosixPath

from pebble.errors import InvalidLinkName
from pebble.frontmatter import render_frontmatter
from pebble.fs import file_exists, write_text_lines
from pebble.host import Editor
from pebble.store import IndexStore

log = logging.getLogger(__name__)


class Resolver:
    """Resolves link tokens against the store's file and alias indexes.

    Precedence: alias hit, exact stem, case-insensitive stem, then a lazy
    scan of not-yet-seen frontmatter for a matching alias.  Among several
    files sharing a stem, the one next to the active note wins.
    """

    def __init__(self, store: IndexStore, editor: Editor) -> None:
        self.store = store
        self.editor = editor

    def _strip_extension(self, token: str) -> str:
        ext = self.store.config.extension
        return token[: -len(ext)] if token.endswith(ext) else token

    def _active_dir(self) -> Path | None:
        active = self.editor.get_active_document_path()
        if active and Path(active).name.endswith(self.store.config.extension):
            return Path(active).parent
        return None

    def _prefer_local(self, candidates: list[Path]) -> Path | None:
        if not candidates:
            return None
        active_dir = self._active_dir()
        if active_dir is not None:
            for path in candidates:
                if path.parent == active_dir:
                    return path
        return candidates[0]

    def _resolve_relative(self, name: str) -> Path | None:
        filename = f"{name}{self.store.config.extension}"
        bases = [d for d in (self._active_dir(), self.store.files.root) if d is not None]
        for base in bases:
            candidate = base / filename
            if file_exists(candidate):
                return candidate
        return None

    def resolve(self, token: str) -> Path | None:
        """Return the best file for *token*, or ``None`` when nothing matches."""
        name = self._strip_extension(token.strip())
        if not name:
            return None
        files = self.store.ensure_file_index()
        aliases = self.store.aliases

        if (hit := aliases.lookup(name)) is not None:
            return hit

        stem = name
        if "/" in name:
            if (hit := self._resolve_relative(name)) is not None:
                return hit
            stem = PurePosixPath(name).name

        if (hit := self._prefer_local(files.lookup(stem))) is not None:
            return hit
        if (hit := self._prefer_local(files.lookup_casefold(stem))) is not None:
            return hit

        for path in files.paths():
            if aliases.is_scanned(path):
                continue
            aliases.ensure_scanned(path)
            if (hit := aliases.lookup(name)) is not None:
                return hit
        return None

    def create_if_missing(self, token: str, title: str | None = None) -> Path:
        """Return the note for *token*, creating ``<dir>/<token>.md`` if needed.

        *dir* is the active note's directory, else the store root.  Raises
        :class:`~pebble.errors.WriteError` when the file cannot be written.
        An empty name raises :class:`~pebble.errors.InvalidLinkName`.
        """
        name = self._strip_extension(token.strip())
        if not name:
            raise InvalidLinkName(f"Cannot create a note from {token!r}")
        existing = self.resolve(name)
        if existing is not None:
            return existing

        target_dir = self._active_dir() or self.store.files.root or self.store.root
        path = target_dir / f"{name}{self.store.config.extension}"
        if file_exists(path):
            self.store.invalidate()
            return path

        heading = title or name
        lines = [f"# {heading}", "", ""]
        if self.store.config.new_note_frontmatter:
            meta = {"title": heading, "created": date.today().isoformat()}
            lines = [*render_frontmatter(meta), "", *lines]

        try:
            write_text_lines(path, lines, exclusive=True)
        except FileExistsError:
            log.debug("%s appeared before it could be created", path)
        else:
            log.info("Created note %s", path)
        self.store.invalidate()
        return path
