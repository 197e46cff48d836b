# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Snapshot serialization: JSON and indented text outline.

- JSON: the full wire form (tree + refs) for programmatic consumption
- Text: one line per node, ``@e3 button "Submit" [focusable]``
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable

from . import Snapshot, SnapshotNode

TEXT_NAME_MAX_LENGTH = 50

_WS_RE = re.compile(r"\s+")


def to_json(snapshot: Snapshot, indent: int | None = 2) -> str:
    return json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=indent)


def _truncate(text: str, max_len: int) -> str:
    cleaned = _WS_RE.sub(" ", text).strip()
    if len(cleaned) <= max_len:
        return cleaned
    return cleaned[: max_len - 3] + "..."


def _render_node_line(node: SnapshotNode) -> str:
    line = f"@{node.ref} {node.role}"
    if node.name:
        line += f' "{_truncate(node.name, TEXT_NAME_MAX_LENGTH)}"'
    if not node.visible:
        line += " [offscreen]"
    if node.focusable:
        line += " [focusable]"
    return line


def _render_tree(nodes: Iterable[SnapshotNode], depth: int, lines: list[str]) -> None:
    indent = "  " * depth
    for node in nodes:
        lines.append(indent + _render_node_line(node))
        if node.children:
            _render_tree(node.children, depth + 1, lines)


def to_text(snapshot: Snapshot) -> str:
    """Render a snapshot as a header plus an indented outline of its tree."""
    lines = [
        f"Page: {snapshot.title}",
        f"URL: {snapshot.url}",
        f"Viewport: {snapshot.viewport.width}x{snapshot.viewport.height}",
        "",
    ]
    _render_tree(snapshot.tree, 0, lines)
    return "\n".join(lines)
