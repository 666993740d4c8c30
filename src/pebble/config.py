"""Plugin configuration.

Settings live in a TOML file::

    [pebble]
    root         = "~/notes"     # default: git toplevel, else cwd
    scan_limit   = 1000
    graph_ttl_ms = 5000
    graph_depth  = 3

and are loaded with :func:`load_config`.  Keys this module does not know
are preserved in :attr:`PebbleConfig.meta`.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pebble.errors import ConfigError

_POSITIVE_INTS = (
    "scan_limit",
    "frontmatter_lines",
    "link_lines",
    "graph_ttl_ms",
    "graph_depth",
)


@dataclass
class PebbleConfig:
    root: Path | None = None
    extension: str = ".md"
    scan_limit: int = 1000
    frontmatter_lines: int = 10
    link_lines: int = 100
    graph_ttl_ms: int = 5000
    graph_depth: int = 3
    replay_delay_ms: int = 100
    record_delay_ms: int = 50
    new_note_frontmatter: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.root is not None:
            self.root = Path(self.root).expanduser()
        if not self.extension.startswith("."):
            self.extension = f".{self.extension}"
        for name in _POSITIVE_INTS:
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.replay_delay_ms < 0 or self.record_delay_ms < 0:
            raise ConfigError("delays must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PebbleConfig":
        section = data.get("pebble", data)
        known = {f.name for f in fields(cls)} - {"meta"}
        return cls(
            **{k: v for k, v in section.items() if k in known},
            meta={k: v for k, v in section.items() if k not in known},
        )


def load_config(path: Path) -> PebbleConfig:
    """Load a :class:`PebbleConfig` from a ``.toml`` file."""
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    return PebbleConfig.from_dict(data)
