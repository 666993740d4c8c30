"""Pebble: wiki-style link resolution and link graphs over Markdown notes."""

from pebble.aliases import AliasIndex
from pebble.config import PebbleConfig, load_config
from pebble.errors import InvalidLinkName, NotFound, NotReadable, PebbleError, StaleTarget, WriteError
from pebble.files import FileIndex
from pebble.graph import LinkGraph, LinkGraphBuilder
from pebble.history import NavigationHistory
from pebble.links import LinkCache, extract_links
from pebble.note import Note, load_note
from pebble.plugin import Pebble, create_plugin, fire_hook
from pebble.resolver import Resolver
from pebble.store import IndexStore

__all__ = [
    "AliasIndex",
    "FileIndex",
    "InvalidLinkName",
    "IndexStore",
    "LinkCache",
    "LinkGraph",
    "LinkGraphBuilder",
    "NavigationHistory",
    "Note",
    "NotFound",
    "NotReadable",
    "Pebble",
    "PebbleConfig",
    "PebbleError",
    "Resolver",
    "StaleTarget",
    "WriteError",
    "create_plugin",
    "extract_links",
    "fire_hook",
    "load_config",
    "load_note",
]
