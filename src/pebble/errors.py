"""Exception types raised by the note-graph core."""

from __future__ import annotations

from pathlib import Path


class PebbleError(Exception):
    """Base class for every error raised by :mod:`pebble`."""


class NotReadable(PebbleError, OSError):
    """A file is missing or cannot be read; callers treat it as "no data"."""


class NotFound(PebbleError, LookupError):
    """A path has no stat information, or a link token resolves to nothing."""


class WriteError(PebbleError, OSError):
    """Creating or writing a note failed."""


class StaleTarget(PebbleError):
    """A navigation history entry points to a file that no longer exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"File no longer exists: {path}")
        self.path = path


class ConfigError(PebbleError, ValueError):
    """A configuration value is out of range."""


class InvalidLinkName(PebbleError, ValueError):
    """A link token has no usable note name (empty once trimmed)."""
