# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Extract command names from free-text engine ``--help`` output.

Both the plain Click layout::

    Commands:
      create  Create a project.
      modules Manage modules.

and the Rich panel layout used by Typer::

    ╭─ Commands ───────────────╮
    │ create   Create a project │
    ╰──────────────────────────╯

are understood. Lines such as ``rapidkit doctor`` anywhere in the text also
count as commands.
"""

from __future__ import annotations

import re
from typing import Final

_BOX_EDGES: Final[str] = "│┃|"
_PANEL_OPEN: Final[tuple[str, ...]] = ("╭", "┌", "┏")
_PANEL_CLOSE: Final[tuple[str, ...]] = ("╰", "└", "┗")
_PANEL_FILL: Final[str] = "╭╮┌┐┏┓─━ "
_ROW: Final[re.Pattern[str]] = re.compile(r"^([a-z0-9][a-z0-9_-]*)\b")


def _inner(line: str) -> str:
    """Return ``line`` without surrounding panel borders, keeping indentation."""

    inner = line.rstrip()
    leading = inner.lstrip()
    if leading[:1] and leading[0] in _BOX_EDGES:
        inner = leading[1:]
    if inner[-1:] and inner[-1] in _BOX_EDGES:
        inner = inner[:-1]
    return inner.rstrip()


def _is_commands_header(text: str) -> bool:
    return text.strip(_PANEL_FILL).rstrip(":").strip().lower() == "commands"


def parse_commands_from_help(text: str, *, program: str = "rapidkit") -> set[str]:
    """Return the command names mentioned in ``text``.

    Args:
        text: Captured ``--help`` output.
        program: Engine program name used to recognise ``<program> <command>`` lines.

    Returns:
        set[str]: Discovered command names, possibly empty.
    """

    explicit = re.compile(rf"^{re.escape(program)}\s+([a-z0-9][a-z0-9_-]*)\b")
    found: set[str] = set()
    in_section = False
    row_indent: int | None = None

    for raw in text.splitlines():
        stripped = raw.strip()
        inner = _inner(raw)
        content = inner.strip()

        mention = explicit.match(content)
        if mention:
            found.add(mention.group(1))

        if stripped.startswith(_PANEL_OPEN):
            in_section = _is_commands_header(stripped)
            row_indent = None
            continue
        if not in_section and _is_commands_header(content) and content.rstrip().endswith(":"):
            in_section = True
            row_indent = None
            continue
        if not in_section:
            continue
        if not content or stripped.startswith(_PANEL_CLOSE):
            in_section = False
            continue

        indent = len(inner) - len(inner.lstrip())
        if row_indent is None:
            row_indent = indent
        elif indent > row_indent:
            continue
        row = _ROW.match(content)
        if row:
            found.add(row.group(1))
    return found


__all__ = ["parse_commands_from_help"]
