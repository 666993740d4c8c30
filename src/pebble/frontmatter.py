"""Restricted YAML-frontmatter parser.

Only the top-of-file block is read, and only flat ``key: value`` pairs and
single-level ``- item`` lists are recognised.  Anything else degrades to
"not present" instead of raising.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from pebble.errors import NotReadable
from pebble.fs import read_text_lines

DELIMITER = "---"
_TERMINATORS = frozenset({"---", "..."})

_KEY_RE = re.compile(r"^([A-Za-z0-9_-]+):\s*(.*)$")
# "- item"; a bare "---" never counts
_ITEM_RE = re.compile(r"^\s*-\s+(.*)$")

FrontmatterValue = str | list[str]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _parse_scalar(value: str) -> FrontmatterValue:
    # Flow sequences ("[a, B]") are the one nested form worth supporting
    if value.startswith("[") and value.endswith("]"):
        try:
            # BaseLoader keeps "yes", "010" and "null" as the text written
            items = yaml.load(value, Loader=yaml.BaseLoader)
        except yaml.YAMLError:
            return value
        if isinstance(items, list):
            return [item for item in items if isinstance(item, str) and item]
    return _unquote(value)


def parse_block(lines: list[str]) -> dict[str, FrontmatterValue] | None:
    """Parse already-read lines; ``None`` when there is no complete block."""
    if not lines or lines[0] != DELIMITER:
        return None
    try:
        end = next(i for i in range(1, len(lines)) if lines[i] in _TERMINATORS)
    except StopIteration:
        return None

    meta: dict[str, FrontmatterValue] = {}
    i = 1
    while i < end:
        m = _KEY_RE.match(lines[i])
        i += 1
        if not m:
            continue
        key, value = m.group(1), m.group(2).strip()
        if not value and i < end and _ITEM_RE.match(lines[i]):
            items: list[str] = []
            while i < end and (item := _ITEM_RE.match(lines[i])):
                if item.group(1).strip():
                    items.append(_unquote(item.group(1).strip()))
                i += 1
            meta[key] = items
        else:
            meta[key] = _parse_scalar(value)
    return meta


def parse_frontmatter(path: Path, max_lines: int = 10) -> dict[str, FrontmatterValue] | None:
    """Read the frontmatter block of *path*.

    Returns ``None`` when the file is unreadable, does not start with
    ``---``, or the block is not terminated within the first *max_lines*.
    """
    try:
        lines = read_text_lines(path, max_lines)
    except NotReadable:
        return None
    return parse_block(lines)


def render_frontmatter(meta: dict[str, Any]) -> list[str]:
    """Return the lines of a frontmatter block for *meta*, delimiters included."""
    body = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return [DELIMITER, *body.rstrip("\n").splitlines(), DELIMITER]
