"""Shared fixtures: an in-memory editor and a small note tree."""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from pebble.config import PebbleConfig
from pebble.host import Severity
from pebble.plugin import Pebble
from pebble.store import IndexStore


class FakeEditor:
    """Records everything the core asks of the editor."""

    def __init__(self) -> None:
        self.active: Path | None = None
        self.opened: list[Path] = []
        self.notifications: list[tuple[str, Severity]] = []
        self.deferred: list[tuple[int, Callable[[], None]]] = []
        self.lines: list[str] = []
        self.cursor: tuple[int, int] = (0, 0)
        self.choice: Any = None
        self.offered: list[Any] = []

    def get_active_document_path(self) -> Path | None:
        return self.active

    def open_document(self, path: Path) -> None:
        self.opened.append(path)
        self.active = path

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.notifications.append((message, severity))

    def defer(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.deferred.append((delay_ms, callback))

    def run_deferred(self) -> None:
        pending, self.deferred = self.deferred, []
        for _, callback in pending:
            callback()

    def get_lines(self) -> list[str]:
        return list(self.lines)

    def set_line(self, row: int, text: str) -> None:
        self.lines[row] = text

    def get_cursor(self) -> tuple[int, int]:
        return self.cursor

    def set_cursor(self, position: tuple[int, int]) -> None:
        self.cursor = position

    def select(self, items: Sequence[Any], prompt: str) -> Any:
        self.offered = list(items)
        return self.choice

    def messages(self, severity: Severity | None = None) -> list[str]:
        return [m for m, s in self.notifications if severity is None or s == severity]


def write_note(directory: Path, name: str, content: str = "") -> Path:
    path = directory / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture()
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture()
def config(tmp_path: Path) -> PebbleConfig:
    return PebbleConfig(root=tmp_path)


@pytest.fixture()
def store(config: PebbleConfig) -> IndexStore:
    return IndexStore(config)


@pytest.fixture()
def pebble(editor: FakeEditor, store: IndexStore) -> Pebble:
    return Pebble(editor, store=store)
