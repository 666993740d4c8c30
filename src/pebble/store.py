"""IndexStore: the session-wide owner of every cache.

Components receive the store by reference; invalidation is a method here
rather than module-level state.  Access is assumed to be serialised by the
host editor's event loop, so no locking is done.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pebble.aliases import AliasIndex
from pebble.config import PebbleConfig
from pebble.files import FileIndex
from pebble.fs import detect_repository_root
from pebble.links import LinkCache

if TYPE_CHECKING:
    from pebble.graph import GraphCacheEntry

log = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True)
class CacheStats:
    file_index_valid: bool
    stems: int
    aliases: int
    link_entries: int
    graph_entries: int
    #: cached graph name -> age in milliseconds
    graph_ages_ms: dict[str, float]
    scan_limit: int
    graph_ttl_ms: int


class IndexStore:
    def __init__(
        self,
        config: PebbleConfig | None = None,
        *,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self.config = config or PebbleConfig()
        self.clock = clock
        self.files = FileIndex(self.config.scan_limit, self.config.extension)
        self.aliases = AliasIndex(self.config.frontmatter_lines)
        self.links = LinkCache(self.config.link_lines, self.config.extension)
        self.graphs: dict[str, GraphCacheEntry] = {}

    @property
    def root(self) -> Path:
        """Configured root, else the git toplevel, else the cwd."""
        if self.config.root is not None:
            return self.config.root
        return detect_repository_root()

    def now(self) -> float:
        return self.clock()

    def ensure_file_index(self) -> FileIndex:
        if not self.files.valid:
            self.files.rebuild(self.root)
        return self.files

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        """React to a Markdown file being created, saved or deleted."""
        self.files.invalidate()
        self.aliases.invalidate()
        self.graphs.clear()
        log.debug("File index, aliases and graphs invalidated")

    def invalidate_all(self) -> None:
        self.invalidate()
        self.files.clear()
        self.links.clear()
        log.debug("All caches cleared")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def stats(self) -> CacheStats:
        now = self.now()
        return CacheStats(
            file_index_valid=self.files.valid,
            stems=len(self.files),
            aliases=len(self.aliases),
            link_entries=len(self.links),
            graph_entries=len(self.graphs),
            graph_ages_ms={name: now - entry.timestamp for name, entry in self.graphs.items()},
            scan_limit=self.config.scan_limit,
            graph_ttl_ms=self.config.graph_ttl_ms,
        )
