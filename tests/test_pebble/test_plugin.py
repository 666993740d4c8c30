"""Unit tests for pebble.plugin (facade actions + hook dispatch)."""

from pathlib import Path

import pytest

from conftest import FakeEditor, write_note
from pebble import plugin as plugin_module
from pebble.errors import InvalidLinkName
from pebble.host import Editor, Severity
from pebble.plugin import Pebble, create_plugin, fire_hook, sanitize_link_name
from pebble.store import IndexStore


def test_fake_editor_satisfies_protocol(editor: FakeEditor):
    assert isinstance(editor, Editor)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestNavigation:
    def test_navigate_records_origin_and_target(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b = write_note(tmp_path, "a"), write_note(tmp_path, "b")
        editor.active = a
        pebble.navigate_to(b)
        assert pebble.history.entries == [a, b]
        assert editor.opened == [b]

    def test_back_and_forward(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b, c = (write_note(tmp_path, n) for n in "abc")
        editor.active = a
        pebble.navigate_to(b)
        pebble.navigate_to(c)

        assert pebble.history_back() == b
        assert editor.active == b
        assert pebble.history.replaying
        editor.run_deferred()
        assert not pebble.history.replaying

        assert pebble.history_forward() == c
        editor.run_deferred()
        assert pebble.history_forward() is None
        assert "Already at the end of navigation history" in editor.messages(Severity.INFO)

    def test_back_on_empty_history(self, pebble: Pebble, editor: FakeEditor):
        assert pebble.history_back() is None
        assert editor.messages() == ["No navigation history available"]

    def test_stale_entry_reported(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b = write_note(tmp_path, "a"), write_note(tmp_path, "b")
        editor.active = a
        pebble.navigate_to(b)
        a.unlink()
        assert pebble.history_back() is None
        assert pebble.history.current == b
        assert editor.messages(Severity.WARN) == [f"File no longer exists: {a}"]

    def test_replayed_open_not_recorded(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b = write_note(tmp_path, "a"), write_note(tmp_path, "b")
        editor.active = a
        pebble.navigate_to(b)
        pebble.history_back()
        fire_hook(pebble, "buffer_read", path=a)
        editor.run_deferred()
        assert pebble.history.entries == [a, b]
        assert pebble.history.current == a

    def test_buffer_read_records_after_delay(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a = write_note(tmp_path, "a")
        editor.open_document(a)
        fire_hook(pebble, "on_buffer_read", path=a)
        assert pebble.history.entries == []
        assert editor.deferred[0][0] == pebble.config.record_delay_ms
        editor.run_deferred()
        assert pebble.history.entries == [a]

    def test_pick_from_history(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b, c = (write_note(tmp_path, n) for n in "abc")
        editor.active = a
        pebble.navigate_to(b)
        pebble.navigate_to(c)
        editor.choice = (0, a)
        assert pebble.pick_from_history() == a
        assert pebble.history.index == 0
        assert editor.offered == [(0, a), (1, b), (2, c)]

    def test_pick_repeated_entry_by_position(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b, c = (write_note(tmp_path, n) for n in "abc")
        for path in (a, b, a, c):
            pebble.navigate_to(path)
        assert pebble.history.entries == [a, b, a, c]
        editor.choice = (2, a)
        assert pebble.pick_from_history() == a
        assert pebble.history.index == 2

    def test_pick_current_entry_is_noop(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        a, b = write_note(tmp_path, "a"), write_note(tmp_path, "b")
        editor.active = a
        pebble.navigate_to(b)
        opened = list(editor.opened)
        editor.choice = (1, b)
        assert pebble.pick_from_history() is None
        assert editor.opened == opened
        assert not pebble.history.replaying
        assert "Already there" in editor.messages(Severity.INFO)


# ---------------------------------------------------------------------------
# Links under the cursor
# ---------------------------------------------------------------------------


class TestFollowLink:
    def test_follow_existing(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        target = write_note(tmp_path, "target")
        editor.active = write_note(tmp_path, "start")
        editor.lines = ["go to [[target]] now"]
        editor.cursor = (0, 8)
        assert pebble.follow_link() == target
        assert editor.active == target

    def test_follow_creates_missing(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.active = write_note(tmp_path, "start")
        editor.lines = ["[new](new-note.md)"]
        editor.cursor = (0, 2)
        path = pebble.follow_link()
        assert path == tmp_path / "new-note.md"
        assert path.exists()
        assert "Created file: new-note.md" in editor.messages()

    def test_cursor_off_link(self, pebble: Pebble, editor: FakeEditor):
        editor.lines = ["no [[link]] here"]
        editor.cursor = (0, 0)
        assert pebble.follow_link() is None
        assert editor.opened == []

    def test_url_opened_in_browser(self, pebble: Pebble, editor: FakeEditor, monkeypatch: pytest.MonkeyPatch):
        opened: list[str] = []
        monkeypatch.setattr(plugin_module.webbrowser, "open", opened.append)
        editor.lines = ["[site](https://example.com)"]
        assert pebble.follow_link() is None
        assert opened == ["https://example.com"]

    def test_blank_wiki_link_creates_nothing(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.lines = ["[[ ]]"]
        assert pebble.follow_link() is None
        assert not (tmp_path / ".md").exists()
        assert editor.opened == []
        assert pebble.history.entries == []
        assert editor.messages(Severity.ERROR)

    def test_write_error_becomes_notification(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.lines = ["[[no-such-dir/child]]"]
        assert pebble.follow_link() is None
        assert editor.messages(Severity.ERROR)

    def test_next_and_prev_link(self, pebble: Pebble, editor: FakeEditor):
        editor.lines = ["[[a]] text [[b]]"]
        assert pebble.next_link() == (0, 11)
        assert editor.cursor == (0, 11)
        assert pebble.prev_link() == (0, 0)


# ---------------------------------------------------------------------------
# Notes and graph
# ---------------------------------------------------------------------------


class TestNotes:
    def test_create_note_twice(self, tmp_path: Path, pebble: Pebble):
        first = pebble.create_note("idea", "Idea")
        second = pebble.create_note("idea", "Idea")
        assert first == second
        assert len(list(tmp_path.glob("*.md"))) == 1

    def test_create_note_rejects_empty_name(self, tmp_path: Path, pebble: Pebble):
        for token in ("", "   ", ".md"):
            with pytest.raises(InvalidLinkName):
                pebble.create_note(token)
        assert list(tmp_path.iterdir()) == []

    def test_create_link_from_selection(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        link = pebble.create_link_from_selection("  What: is  this? ", navigate=False)
        assert link == "[[What is this]]"
        path = tmp_path / "What is this.md"
        assert path.read_text(encoding="utf-8").startswith("# What: is this?")
        assert editor.opened == []

    def test_selection_links_existing(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        existing = write_note(tmp_path, "topic")
        assert pebble.create_link_from_selection("topic") == "[[topic]]"
        assert editor.active == existing
        assert "Linked to existing file: topic.md" in editor.messages()

    def test_empty_selection(self, pebble: Pebble, editor: FakeEditor):
        assert pebble.create_link_from_selection("   ") is None
        assert pebble.create_link_from_selection("///") is None
        assert len(editor.messages(Severity.WARN)) == 2

    def test_sanitize(self):
        assert sanitize_link_name('a/b\\c:d*e?f"g<h>i|j') == "abcdefghij"

    def test_toggle_checklist(self, pebble: Pebble, editor: FakeEditor):
        editor.lines = ["- [ ] task"]
        pebble.toggle_checklist()
        assert editor.lines == ["- [x] task"]

    def test_build_graph_for_active_note(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.active = write_note(tmp_path, "hub", "[[leaf]]\n")
        write_note(tmp_path, "leaf", "[[hub]]\n")
        graph = pebble.build_graph()
        assert graph.root == "hub"
        assert graph.outgoing() == ["leaf"]
        assert graph.incoming() == ["leaf"]

    def test_build_graph_by_name(self, tmp_path: Path, pebble: Pebble):
        write_note(tmp_path, "hub", "[[leaf]]\n")
        graph = pebble.build_graph("hub")
        assert graph["hub"].path == tmp_path / "hub.md"

    def test_build_graph_without_active_note(self, pebble: Pebble, editor: FakeEditor):
        assert pebble.build_graph() is None
        assert editor.messages(Severity.WARN)

    def test_pick_graph_node(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.active = write_note(tmp_path, "hub", "[[leaf]] [[ghost]]\n")
        leaf = write_note(tmp_path, "leaf")
        editor.choice = "leaf"
        assert pebble.pick_graph_node() == leaf
        assert editor.offered == ["leaf"]


# ---------------------------------------------------------------------------
# Hooks and caches
# ---------------------------------------------------------------------------


class TestHooks:
    def test_save_invalidates(self, tmp_path: Path, pebble: Pebble, store: IndexStore):
        write_note(tmp_path, "a")
        pebble.resolve_link("a")
        assert store.files.valid
        assert fire_hook(pebble, "file_saved", path=tmp_path / "a.md")
        assert not store.files.valid

    def test_non_markdown_ignored(self, tmp_path: Path, pebble: Pebble, store: IndexStore):
        pebble.resolve_link("a")
        fire_hook(pebble, "file_deleted", path=tmp_path / "image.png")
        assert store.files.valid

    def test_unknown_event(self, pebble: Pebble):
        assert fire_hook(pebble, "cursor_moved") is False

    def test_invalidate_all_caches(self, tmp_path: Path, pebble: Pebble, editor: FakeEditor):
        editor.active = write_note(tmp_path, "a", "[[b]]\n")
        pebble.build_graph()
        stats = pebble.cache_stats()
        assert stats.link_entries == 1
        assert stats.graph_entries == 1
        pebble.invalidate_all_caches()
        stats = pebble.cache_stats()
        assert (stats.file_index_valid, stats.stems, stats.link_entries, stats.graph_entries) == (False, 0, 0, 0)

    def test_create_plugin(self, editor: FakeEditor, config):
        plugin = create_plugin(editor, config)
        assert isinstance(plugin, Pebble)
        assert plugin.store.config is config
