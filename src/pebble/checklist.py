"""Markdown task-list toggling.

``- [ ] item`` ↔ ``- [x] item`` for ``-``, ``*`` and ``1.`` bullets; a plain
bullet becomes an open task, and any other non-empty line becomes
``- [ ] line``.
"""

from __future__ import annotations

import re

# indent, bullet, state, text
_TASK_RE = re.compile(r"^(\s*)([-*]|\d+\.) \[([ xX])\] (.*)$")
_BULLET_RE = re.compile(r"^(\s*)([-*]|\d+\.) (.*)$")


def toggle_checklist(line: str) -> str:
    """Return *line* with its checklist state toggled."""
    m = _TASK_RE.match(line)
    if m:
        indent, bullet, state, text = m.groups()
        mark = "x" if state == " " else " "
        return f"{indent}{bullet} [{mark}] {text}"

    m = _BULLET_RE.match(line)
    if m:
        indent, bullet, text = m.groups()
        return f"{indent}{bullet} [ ] {text}"

    content = line.lstrip()
    if not content:
        return line
    indent = line[: len(line) - len(content)]
    return f"{indent}- [ ] {content}"
