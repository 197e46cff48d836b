"""Tests for the single-slot snapshot store and the ref resolver.

Tests: get/set/clear, wholesale replacement, generation counter,
ref normalization, find_by_ref, lookup errors.
"""

from __future__ import annotations

import pytest

from pageref import Snapshot, SnapshotNode, Viewport
from pageref.errors import RefNotFoundError
from pageref.refs import find_by_ref, lookup, normalize_ref
from pageref.store import SnapshotStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_node(ref: str, selector: str = "#x") -> SnapshotNode:
    return SnapshotNode(ref=ref, role="button", name=ref, tag="button", selector=selector)


def _make_snapshot(*refs: str, url: str = "https://example.com/") -> Snapshot:
    nodes = [_make_node(ref, selector=f"#{ref}") for ref in refs]
    return Snapshot(
        url=url,
        title="Test Page",
        viewport=Viewport(1280, 800),
        timestamp="2026-01-01T00:00:00+00:00",
        tree=nodes,
        refs={n.ref: n for n in nodes},
    )


# =========================================================================
# SnapshotStore
# =========================================================================


class TestSnapshotStore:
    def test_starts_empty(self):
        store = SnapshotStore()
        assert store.get() is None
        assert store.is_empty
        assert store.generation == 0

    def test_set_then_get(self):
        store = SnapshotStore()
        snap = _make_snapshot("e1")
        store.set(snap)
        assert store.get() is snap
        assert not store.is_empty

    def test_set_replaces_wholesale(self):
        store = SnapshotStore()
        store.set(_make_snapshot("e1", "e2"))
        second = _make_snapshot("e1")
        store.set(second)
        assert store.get() is second
        assert find_by_ref(store.get(), "e2") is None

    def test_generation_increments_on_set(self):
        store = SnapshotStore()
        assert store.set(_make_snapshot("e1")) == 1
        assert store.set(_make_snapshot("e1")) == 2
        assert store.generation == 2

    def test_clear(self):
        store = SnapshotStore()
        store.set(_make_snapshot("e1"))
        store.clear()
        assert store.get() is None
        assert store.is_empty

    def test_clear_keeps_generation(self):
        store = SnapshotStore()
        store.set(_make_snapshot("e1"))
        store.clear()
        assert store.generation == 1

    def test_clear_when_empty_is_noop(self):
        store = SnapshotStore()
        store.clear()
        assert store.get() is None

    def test_stores_are_independent(self):
        a, b = SnapshotStore(), SnapshotStore()
        a.set(_make_snapshot("e1"))
        assert b.get() is None


# =========================================================================
# Ref resolution
# =========================================================================


class TestNormalizeRef:
    def test_strips_marker(self):
        assert normalize_ref("@e3") == "e3"

    def test_plain_ref_unchanged(self):
        assert normalize_ref("e3") == "e3"

    def test_only_one_marker_stripped(self):
        assert normalize_ref("@@e3") == "@e3"

    def test_empty(self):
        assert normalize_ref("") == ""


class TestFindByRef:
    def test_hit(self):
        snap = _make_snapshot("e1", "e2")
        assert find_by_ref(snap, "e2") is snap.refs["e2"]

    def test_marker_equivalent(self):
        snap = _make_snapshot("e1")
        assert find_by_ref(snap, "@e1") is find_by_ref(snap, "e1")

    def test_miss_returns_none(self):
        assert find_by_ref(_make_snapshot("e1"), "e99") is None


class TestLookup:
    def test_hit(self):
        snap = _make_snapshot("e1")
        assert lookup(snap, "@e1").selector == "#e1"

    def test_miss_raises_with_ref(self):
        with pytest.raises(RefNotFoundError, match="ref 'e99' not found in snapshot") as exc_info:
            lookup(_make_snapshot("e1"), "e99")
        assert exc_info.value.ref == "e99"

    def test_miss_message_keeps_marker(self):
        with pytest.raises(RefNotFoundError, match="ref '@e5' not found"):
            lookup(_make_snapshot("e1"), "@e5")
