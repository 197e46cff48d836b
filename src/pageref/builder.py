# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tree builder: raw walker descriptors → SnapshotNode tree + ref index.

Per descriptor, the builder resolves role/name/interactivity, then decides
one of three outcomes for the parent's child list:

  Materialized(node)  the node becomes a child (possibly a hoisted grandchild)
  Spliced(nodes)      in interactive-only mode the wrapper is transparent, its
                        materialized descendants take its place
  Dropped             there is nothing to add

Refs are drawn from a per-build counter in pre-order when a node is
materialized. Compaction may discard a tentatively assigned ref; discarded
numbers are not reused, so a compacted tree can have gaps (e1, e3, ...).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from . import BBox, SnapshotNode
from .roles import accessible_name, is_focusable, is_interactive, resolve_role

logger = logging.getLogger(__name__)


# ── Outcome variant ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Materialized:
    node: SnapshotNode


@dataclass(frozen=True, slots=True)
class Spliced:
    nodes: tuple[SnapshotNode, ...]


@dataclass(frozen=True, slots=True)
class Dropped:
    pass


DROPPED = Dropped()

Outcome = Materialized | Spliced | Dropped


def _append(children: list[SnapshotNode], outcome: Outcome) -> None:
    if isinstance(outcome, Materialized):
        children.append(outcome.node)
    elif isinstance(outcome, Spliced):
        children.extend(outcome.nodes)
    elif not isinstance(outcome, Dropped):
        raise TypeError(f"unexpected outcome: {outcome!r}")


# ── Descriptor helpers ───────────────────────────────────────────────


def _bbox(raw: dict[str, Any] | None) -> BBox:
    if not raw:
        return BBox()
    return BBox(
        x=round(raw.get("x", 0)),
        y=round(raw.get("y", 0)),
        width=round(raw.get("width", 0)),
        height=round(raw.get("height", 0)),
    )


def _attributes(raw: dict[str, Any] | None) -> dict[str, str | bool]:
    """Sparse attribute map: None and empty strings are omitted, booleans kept."""
    if not raw:
        return {}
    attrs: dict[str, str | bool] = {}
    for key, value in raw.items():
        if value is None or value == "":
            continue
        attrs[key] = value if isinstance(value, bool) else str(value)
    return attrs


# ── Builder ──────────────────────────────────────────────────────────


class TreeBuilder:
    """Single-use builder for one snapshot generation.

    Create a fresh instance per generation so the ref counter restarts at 1.
    """

    def __init__(
        self,
        *,
        interactive_only: bool = False,
        compact: bool = False,
    ) -> None:
        self.interactive_only = interactive_only
        self.compact = compact
        self._counter = 0
        self.discarded_refs = 0

    def _next_ref(self) -> str:
        self._counter += 1
        return f"e{self._counter}"

    def build(self, raw_nodes: Iterable[dict[str, Any]]) -> tuple[list[SnapshotNode], dict[str, SnapshotNode]]:
        """Build the root-level node list and the flat ref index."""
        tree: list[SnapshotNode] = []
        for raw in raw_nodes:
            _append(tree, self._process(raw))
        refs = index_refs(tree)
        logger.debug(
            "Built tree: %d roots, %d refs, %d refs discarded by compaction",
            len(tree),
            len(refs),
            self.discarded_refs,
        )
        return tree, refs

    def _children(self, raw: dict[str, Any]) -> list[SnapshotNode]:
        children: list[SnapshotNode] = []
        for child in raw.get("children") or ():
            _append(children, self._process(child))
        return children

    def _process(self, raw: dict[str, Any]) -> Outcome:
        tag = str(raw.get("tag", "")).lower()
        input_type = raw.get("inputType") or ""
        tabindex = raw.get("tabindex")
        role = resolve_role(
            tag,
            explicit_role=raw.get("role"),
            input_type=input_type,
            has_href=bool(raw.get("hasHref")),
        )
        interactive = is_interactive(
            tag,
            role,
            has_click_handler=bool(raw.get("hasClickHandler")),
            tabindex=tabindex,
            content_editable=bool(raw.get("contentEditable")),
        )

        if self.interactive_only and not interactive:
            spliced = self._children(raw)
            return Spliced(tuple(spliced)) if spliced else DROPPED

        ref = self._next_ref()
        children = self._children(raw)
        name = accessible_name(raw.get("names") or {}, tag=tag, input_type=input_type)

        if self.compact and not interactive:
            if not name and not children:
                self.discarded_refs += 1
                return DROPPED
            if len(children) == 1:
                self.discarded_refs += 1
                return Materialized(children[0])

        return Materialized(
            SnapshotNode(
                ref=ref,
                role=role,
                name=name,
                tag=tag,
                selector=str(raw.get("selector", "")),
                bbox=_bbox(raw.get("bbox")),
                visible=bool(raw.get("inViewport")),
                focusable=is_focusable(tag, tabindex=tabindex, disabled=bool(raw.get("disabled"))),
                attributes=_attributes(raw.get("attributes")),
                children=children,
            )
        )


def iter_tree(nodes: Iterable[SnapshotNode]) -> Iterator[SnapshotNode]:
    """Yield nodes depth-first in document order."""
    for node in nodes:
        yield node
        yield from iter_tree(node.children)


def index_refs(tree: Iterable[SnapshotNode]) -> dict[str, SnapshotNode]:
    """Flat ref → node index of every node reachable from *tree*."""
    return {node.ref: node for node in iter_tree(tree)}


def build_tree(
    raw_nodes: Iterable[dict[str, Any]],
    *,
    interactive_only: bool = False,
    compact: bool = False,
) -> tuple[list[SnapshotNode], dict[str, SnapshotNode]]:
    """Convenience wrapper: one fresh TreeBuilder per call."""
    return TreeBuilder(interactive_only=interactive_only, compact=compact).build(raw_nodes)
