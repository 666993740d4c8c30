"""Linear back/forward navigation history."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from pebble.errors import StaleTarget
from pebble.fs import file_exists


class NavigationHistory:
    """Browser-style history of visited notes.

    Visiting a note while in the middle of the history drops the forward
    entries.  While a back/forward jump is being replayed (see
    :meth:`begin_replay`) nothing is recorded, so the file-open event caused
    by the jump itself does not re-enter the history.
    """

    def __init__(self, exists: Callable[[Path], bool] = file_exists) -> None:
        self._exists = exists
        self.entries: list[Path] = []
        self.index = -1
        self.replaying = False

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def current(self) -> Path | None:
        return self.entries[self.index] if self.entries else None

    def navigate(self, path: Path) -> bool:
        """Record a visit to *path*; returns whether an entry was added."""
        if self.replaying:
            return False
        path = Path(path)
        del self.entries[self.index + 1 :]
        if self.entries and self.entries[-1] == path:
            self.index = len(self.entries) - 1
            return False
        self.entries.append(path)
        self.index = len(self.entries) - 1
        return True

    def move(self, offset: int) -> Path | None:
        """Move *offset* entries; ``None`` when that leaves the history."""
        target = self.index + offset
        if not self.entries or not 0 <= target < len(self.entries):
            return None
        path = self.entries[target]
        if not self._exists(path):
            raise StaleTarget(path)
        self.index = target
        return path

    def back(self) -> Path | None:
        """Move one entry back; ``None`` at the start or when empty."""
        return self.move(-1)

    def forward(self) -> Path | None:
        """Move one entry forward; ``None`` at the end or when empty."""
        return self.move(1)

    @property
    def at_start(self) -> bool:
        return self.index <= 0

    @property
    def at_end(self) -> bool:
        return self.index >= len(self.entries) - 1

    def begin_replay(self) -> None:
        self.replaying = True

    def end_replay(self) -> None:
        self.replaying = False
