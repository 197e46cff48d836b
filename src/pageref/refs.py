# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Reference resolution against a snapshot's ref index."""

from __future__ import annotations

from . import Snapshot, SnapshotNode
from .errors import RefNotFoundError

REF_MARKER = "@"


def normalize_ref(ref: str) -> str:
    """Strip one leading ``@`` so ``@e3`` and ``e3`` are equivalent."""
    return ref[1:] if ref.startswith(REF_MARKER) else ref


def find_by_ref(snapshot: Snapshot, ref: str) -> SnapshotNode | None:
    return snapshot.refs.get(normalize_ref(ref))


def lookup(snapshot: Snapshot, ref: str) -> SnapshotNode:
    """Direct key lookup; never falls back to searching the live page.

    Raises:
        RefNotFoundError: *ref* is not in ``snapshot.refs``
    """
    node = find_by_ref(snapshot, ref)
    if node is None:
        raise RefNotFoundError(f"ref '{ref}' not found in snapshot", ref=ref)
    return node
