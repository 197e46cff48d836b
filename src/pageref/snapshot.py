# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Snapshot generation: walker → builder → store.

Each ``generate`` call runs one in-page walk, builds a fresh tree with refs
numbered from e1, and wholesale-replaces the store slot.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime

from playwright.async_api import Page
from pydantic import BaseModel, Field

from . import Snapshot, SnapshotNode
from .builder import TreeBuilder
from .refs import find_by_ref
from .store import SnapshotStore
from .walker import WalkRequest, walk_page

logger = logging.getLogger(__name__)


class SnapshotOptions(BaseModel):
    """Snapshot generation options."""

    interactive: bool = Field(default=False, description="Only materialize interactive elements")
    compact: bool = Field(default=False, description="Drop unnamed leaves and collapse single-child wrappers")
    depth: int | None = Field(default=None, ge=0, description="Maximum depth below the root (root children are 0)")
    selector: str | None = Field(default=None, description="Scope the snapshot to the first match of this selector")


class SnapshotGenerator:
    """Generates snapshots of one page into one store."""

    def __init__(self, page: Page, store: SnapshotStore) -> None:
        self.page = page
        self.store = store

    def set_page(self, page: Page) -> None:
        """Point the generator at a new page (e.g. after the browser was reset)."""
        self.page = page

    async def generate(self, options: SnapshotOptions | None = None) -> Snapshot:
        """Walk the page, build the tree and replace the stored snapshot.

        Raises:
            SnapshotError: the in-page walk failed
        """
        options = options or SnapshotOptions()
        t0 = time.monotonic()

        result = await walk_page(self.page, WalkRequest(depth=options.depth, selector=options.selector))
        builder = TreeBuilder(interactive_only=options.interactive, compact=options.compact)
        tree, refs = builder.build(result.nodes)

        snapshot = Snapshot(
            url=result.url,
            title=result.title,
            viewport=result.viewport,
            timestamp=datetime.now(UTC).isoformat(),
            tree=tree,
            refs=refs,
        )
        generation = self.store.set(snapshot)

        logger.info(
            "Snapshot generated: url=%s gen=%d roots=%d refs=%d interactive=%s compact=%s depth=%s (%.0fms)",
            snapshot.url,
            generation,
            len(tree),
            len(refs),
            options.interactive,
            options.compact,
            options.depth,
            (time.monotonic() - t0) * 1000,
        )
        return snapshot

    def clear(self) -> None:
        """Empty the store. The live page is not touched."""
        self.store.clear()

    def find_by_ref(self, snapshot: Snapshot, ref: str) -> SnapshotNode | None:
        return find_by_ref(snapshot, ref)
