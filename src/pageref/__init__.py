# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""pageref: drive a live web page through short-lived element references.

A snapshot walks the page once and hands out refs (e1, e2, ...) for every
materialized node:
- tree: nested nodes in document order, filtered by visibility/depth/scope
- refs: flat index from ref to node, used to resolve actions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BBox:
    """Viewport-relative bounding box, rounded to integers."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Viewport:
    width: int = 0
    height: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass
class SnapshotNode:
    """A single materialized element in a snapshot."""

    ref: str  # e1, e2, ... unique within one snapshot
    role: str  # button, link, textbox, heading, generic, ...
    name: str  # accessible name
    tag: str  # lowercase tag name
    selector: str  # CSS selector used to re-locate the element
    bbox: BBox = field(default_factory=BBox)
    visible: bool = False  # intersects the viewport
    focusable: bool = False
    attributes: dict[str, str | bool] = field(default_factory=dict)  # sparse
    children: list[SnapshotNode] = field(default_factory=list)

    def __str__(self) -> str:
        parts = [f"@{self.ref}", self.role]
        if self.name:
            parts.append(f'"{self.name}"')
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Wire form. ``children`` is omitted when empty."""
        data: dict[str, Any] = {
            "ref": self.ref,
            "role": self.role,
            "name": self.name,
            "tag": self.tag,
            "selector": self.selector,
            "bbox": self.bbox.to_dict(),
            "visible": self.visible,
            "focusable": self.focusable,
            "attributes": dict(self.attributes),
        }
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class Snapshot:
    """One generation of the page: nested tree plus flat ref index."""

    url: str
    title: str
    viewport: Viewport
    timestamp: str  # ISO-8601, UTC
    tree: list[SnapshotNode]
    refs: dict[str, SnapshotNode] = field(default_factory=dict)

    @property
    def total_refs(self) -> int:
        return len(self.refs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "viewport": self.viewport.to_dict(),
            "timestamp": self.timestamp,
            "tree": [node.to_dict() for node in self.tree],
            "refs": {ref: node.to_dict() for ref, node in self.refs.items()},
        }


__all__ = ["BBox", "Snapshot", "SnapshotNode", "Viewport"]
