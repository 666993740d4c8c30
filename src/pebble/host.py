"""Interfaces the core needs from the host editor.

Buffer manipulation, keymaps and picker rendering belong to the editor; the
core only talks to it through :class:`Editor`.  Cursor positions are
``(row, col)`` pairs, both 0-based.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import IntEnum
from pathlib import Path
from typing import Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


class Severity(IntEnum):
    """Notification levels; values match :mod:`logging` levels."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40


@runtime_checkable
class Editor(Protocol):
    def get_active_document_path(self) -> Path | None: ...
    def open_document(self, path: Path) -> None: ...
    def notify(self, message: str, severity: Severity = Severity.INFO) -> None: ...
    def defer(self, delay_ms: int, callback: Callable[[], None]) -> None: ...
    def get_lines(self) -> list[str]: ...
    def set_line(self, row: int, text: str) -> None: ...
    def get_cursor(self) -> tuple[int, int]: ...
    def set_cursor(self, position: tuple[int, int]) -> None: ...
    def select(self, items: Sequence[T], prompt: str) -> T | None: ...
