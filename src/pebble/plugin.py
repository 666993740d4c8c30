"""Editor-facing facade for Pebble.

The host creates one :class:`Pebble` per session with :func:`create_plugin`
and forwards editor events to it with :func:`fire_hook`::

    pebble = create_plugin(editor, load_config(Path("pebble.toml")))
    fire_hook(pebble, "file_saved", path=Path("notes/idea.md"))
    pebble.follow_link()

User-invoked actions never raise into the host: failures are logged and
turned into notifications.  The programmatic :meth:`Pebble.create_note`
is the exception and lets :class:`~pebble.errors.WriteError` propagate.
"""

from __future__ import annotations

import logging
import re
import webbrowser
from pathlib import Path
from typing import Any

from pebble._logging import configure_logging
from pebble.checklist import toggle_checklist
from pebble.config import PebbleConfig
from pebble.errors import PebbleError, StaleTarget
from pebble.fs import file_exists
from pebble.graph import LinkGraph, LinkGraphBuilder, render_graph_text
from pebble.history import NavigationHistory
from pebble.host import Editor, Severity
from pebble.links import is_url, link_at, next_link_position, note_target, prev_link_position
from pebble.resolver import Resolver
from pebble.store import CacheStats, IndexStore

log = logging.getLogger(__name__)

HOOKS = ("on_file_saved", "on_file_created", "on_file_deleted", "on_buffer_read")

_UNSAFE_FILENAME_RE = re.compile(r'[/\\:*?"<>|]')


def sanitize_link_name(text: str) -> str:
    """Turn free text into a usable note name (may return ``""``)."""
    return " ".join(_UNSAFE_FILENAME_RE.sub("", text).split())


class Pebble:
    def __init__(self, editor: Editor, config: PebbleConfig | None = None, *, store: IndexStore | None = None) -> None:
        self.editor = editor
        self.store = store or IndexStore(config)
        self.config = self.store.config
        self.resolver = Resolver(self.store, editor)
        self.graphs = LinkGraphBuilder(self.store, self.resolver)
        self.history = NavigationHistory()

    def _is_note(self, path: Path | None) -> bool:
        return path is not None and Path(path).name.endswith(self.config.extension)

    def _report(self, action: str, exc: Exception) -> None:
        log.warning("%s failed: %s", action, exc)
        self.editor.notify(f"{action} failed: {exc}", Severity.ERROR)

    # ------------------------------------------------------------------
    # Exposed operations
    # ------------------------------------------------------------------

    def resolve_link(self, token: str) -> Path | None:
        return self.resolver.resolve(token)

    def create_note(self, token: str, title: str | None = None) -> Path:
        return self.resolver.create_if_missing(token, title)

    def navigate_to(self, path: Path) -> None:
        """Open *path*, recording both the note we leave and the one we enter."""
        active = self.editor.get_active_document_path()
        if self._is_note(active):
            self.history.navigate(active)
        self.history.navigate(path)
        self.editor.open_document(Path(path))

    def _replay(self, path: Path) -> None:
        self.history.begin_replay()
        self.editor.open_document(path)
        self.editor.defer(self.config.replay_delay_ms, self.history.end_replay)

    def _move(self, offset: int, edge_message: str) -> Path | None:
        if not self.history.entries:
            self.editor.notify("No navigation history available", Severity.INFO)
            return None
        try:
            path = self.history.move(offset)
        except StaleTarget as exc:
            self.editor.notify(str(exc), Severity.WARN)
            return None
        if path is None:
            self.editor.notify(edge_message, Severity.INFO)
            return None
        self._replay(path)
        return path

    def history_back(self) -> Path | None:
        return self._move(-1, "Already at the beginning of navigation history")

    def history_forward(self) -> Path | None:
        return self._move(1, "Already at the end of navigation history")

    def build_graph(self, current_name: str | None = None) -> LinkGraph | None:
        """Link graph around *current_name* (default: the active note)."""
        active = self.editor.get_active_document_path()
        if current_name is None:
            if not self._is_note(active):
                self.editor.notify("No active note to graph", Severity.WARN)
                return None
            current_name = Path(active).stem
        if self._is_note(active) and Path(active).stem == current_name:
            current_path = Path(active)
        else:
            current_path = self.resolver.resolve(current_name)
        return self.graphs.build(current_name, current_path)

    def invalidate_all_caches(self) -> None:
        self.store.invalidate_all()

    def cache_stats(self) -> CacheStats:
        return self.store.stats()

    # ------------------------------------------------------------------
    # Buffer actions
    # ------------------------------------------------------------------

    def _open_or_create(self, name: str) -> Path:
        path = self.resolver.resolve(name)
        if path is None:
            path = self.resolver.create_if_missing(name, name)
            self.editor.notify(f"Created file: {path.name}", Severity.INFO)
        self.navigate_to(path)
        return path

    def follow_link(self) -> Path | None:
        """Open the note linked under the cursor, creating it when missing."""
        row, col = self.editor.get_cursor()
        lines = self.editor.get_lines()
        if not 0 <= row < len(lines):
            return None
        span = link_at(lines[row], col)
        if span is None:
            return None

        try:
            if span.kind == "wiki":
                return self._open_or_create(span.target)
            if is_url(span.target):
                webbrowser.open(span.target)
                return None
            name = note_target(span.target, self.config.extension)
            if name is not None:
                return self._open_or_create(name)
            active = self.editor.get_active_document_path()
            candidate = Path(active).parent / span.target if active else Path(span.target)
            if file_exists(candidate):
                self.navigate_to(candidate)
                return candidate
            self.editor.notify(f"File not found: {span.target}", Severity.WARN)
        except (PebbleError, OSError) as exc:
            self._report("Follow link", exc)
        return None

    def next_link(self) -> tuple[int, int] | None:
        pos = next_link_position(self.editor.get_lines(), self.editor.get_cursor())
        if pos is not None:
            self.editor.set_cursor(pos)
        return pos

    def prev_link(self) -> tuple[int, int] | None:
        pos = prev_link_position(self.editor.get_lines(), self.editor.get_cursor())
        if pos is not None:
            self.editor.set_cursor(pos)
        return pos

    def toggle_checklist(self) -> None:
        row, _ = self.editor.get_cursor()
        lines = self.editor.get_lines()
        if not 0 <= row < len(lines):
            return
        toggled = toggle_checklist(lines[row])
        if toggled != lines[row]:
            self.editor.set_line(row, toggled)

    def create_link_from_selection(self, selection: str, *, navigate: bool = True) -> str | None:
        """Create (or reuse) the note named by *selection*.

        Returns the ``[[wiki-link]]`` text for the host to put in place of
        the selection, or ``None`` when nothing usable was selected.
        """
        title = " ".join(selection.split())
        if not title:
            self.editor.notify("No text selected", Severity.WARN)
            return None
        name = sanitize_link_name(title)
        if not name:
            self.editor.notify("Selection doesn't contain valid filename characters", Severity.WARN)
            return None

        try:
            existing = self.resolver.resolve(name)
            path = existing or self.resolver.create_if_missing(name, title)
        except (PebbleError, OSError) as exc:
            self._report("Create link", exc)
            return None

        if navigate:
            self.navigate_to(path)
        if existing is not None:
            self.editor.notify(f"Linked to existing file: {path.name}", Severity.INFO)
        else:
            self.editor.notify(f"Created link and file: {path.name}", Severity.INFO)
        return f"[[{name}]]"

    def open_graph_node(self, name: str) -> Path | None:
        path = self.resolver.resolve(name)
        if path is None:
            self.editor.notify(f"File not found: {name}", Severity.WARN)
            return None
        self.navigate_to(path)
        return path

    def pick_graph_node(self) -> Path | None:
        graph = self.build_graph()
        if graph is None:
            return None
        targets = [line.target for line in render_graph_text(graph) if line.target]
        choice = self.editor.select(targets, "Pebble graph")
        return self.open_graph_node(choice) if choice else None

    def pick_from_history(self) -> Path | None:
        if not self.history.entries:
            self.editor.notify("No navigation history available", Severity.INFO)
            return None
        choice = self.editor.select(list(enumerate(self.history.entries)), "Navigation history")
        if choice is None:
            return None
        offset = choice[0] - self.history.index
        if offset == 0:
            self.editor.notify("Already there", Severity.INFO)
            return None
        return self._move(offset, "Already there")

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _file_changed(self, path: Path) -> None:
        if self._is_note(path):
            self.store.invalidate()

    def on_file_saved(self, path: Path) -> None:
        self._file_changed(path)

    def on_file_created(self, path: Path) -> None:
        self._file_changed(path)

    def on_file_deleted(self, path: Path) -> None:
        self._file_changed(path)

    def on_buffer_read(self, path: Path) -> None:
        """Record a freshly opened note once the editor has settled."""
        if self.history.replaying or not self._is_note(path):
            return
        self.editor.defer(self.config.record_delay_ms, self._record_active)

    def _record_active(self) -> None:
        active = self.editor.get_active_document_path()
        if self._is_note(active):
            self.history.navigate(active)


def create_plugin(editor: Editor, config: PebbleConfig | None = None) -> Pebble:
    configure_logging()
    return Pebble(editor, config)


def fire_hook(plugin: Pebble, event: str, **kwargs: Any) -> bool:
    """Dispatch *event* (``"file_saved"`` or ``"on_file_saved"``) to *plugin*.

    Returns ``False`` for events the plugin does not handle.
    """
    hook = event if event.startswith("on_") else f"on_{event}"
    if hook not in HOOKS:
        log.debug("Ignoring unknown event %s", event)
        return False
    getattr(plugin, hook)(**kwargs)
    return True
