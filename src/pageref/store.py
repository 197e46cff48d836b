# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Single-slot snapshot store.

Pure Python module with no browser dependencies.

Holds the most recently generated Snapshot. ``set`` replaces the slot
wholesale (no merge), ``clear`` empties it without touching the page.
There is no TTL: a stored snapshot stays resolvable until replaced or
cleared, even if the page has mutated since.

NOTE: no locking. Overlapping generations race on the slot and the later
write wins; serializing calls against one page is the caller's job.
"""

from __future__ import annotations

import logging

from . import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Holds at most one Snapshot, injected into generator and dispatcher."""

    def __init__(self) -> None:
        self._snapshot: Snapshot | None = None
        self._generation = 0

    def get(self) -> Snapshot | None:
        """The current snapshot, or None."""
        return self._snapshot

    def set(self, snapshot: Snapshot) -> int:
        """Replace the slot. Returns the new generation number."""
        self._snapshot = snapshot
        self._generation += 1
        logger.debug(
            "Snapshot stored: url=%s gen=%d refs=%d",
            snapshot.url,
            self._generation,
            len(snapshot.refs),
        )
        return self._generation

    def clear(self) -> None:
        had = self._snapshot is not None
        self._snapshot = None
        logger.debug("Snapshot store cleared (had_snapshot=%s)", had)

    @property
    def generation(self) -> int:
        """Count of ``set`` calls so far. Not a staleness signal."""
        return self._generation

    @property
    def is_empty(self) -> bool:
        return self._snapshot is None
