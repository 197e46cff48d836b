# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Property-based tests for the tree builder using Hypothesis.

Verifies the ref-index invariants hold for arbitrary element trees under
every combination of interactive-only and compact modes.
"""

from __future__ import annotations

try:
    from hypothesis import HealthCheck, given, settings
    from hypothesis import strategies as st
except ImportError:
    import pytest

    pytest.skip("hypothesis not installed", allow_module_level=True)

import pytest

from pageref.builder import build_tree, iter_tree
from pageref.roles import INTERACTIVE_ROLES, INTERACTIVE_TAGS
from tests._dom_helpers import el

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

TAGS = st.sampled_from(["div", "span", "p", "section", "ul", "li", "button", "a", "input"])
TEXTS = st.sampled_from(["", "", "x", "Label"])

LEAF = st.builds(lambda tag, text, href: el(tag, text=text, href=href), TAGS, TEXTS, st.booleans())

ELEMENT = st.recursive(
    LEAF,
    lambda children: st.builds(
        lambda tag, text, href, kids: el(tag, *kids, text=text, href=href),
        TAGS,
        TEXTS,
        st.booleans(),
        st.lists(children, max_size=3),
    ),
    max_leaves=25,
)

ROOTS = st.lists(ELEMENT, max_size=4)

_fuzz_settings = settings(
    max_examples=150,
    suppress_health_check=[HealthCheck.too_slow],
)


def _interactive(node) -> bool:
    return node.tag in INTERACTIVE_TAGS or node.role in INTERACTIVE_ROLES


# ---------------------------------------------------------------------------
# TestFuzzBuilder
# ---------------------------------------------------------------------------


@pytest.mark.fuzz
class TestFuzzBuilder:
    @_fuzz_settings
    @given(raw=ROOTS, interactive_only=st.booleans(), compact=st.booleans())
    def test_ref_keys_match_nodes(self, raw, interactive_only, compact):
        tree, refs = build_tree(raw, interactive_only=interactive_only, compact=compact)
        assert all(key == node.ref for key, node in refs.items())

    @_fuzz_settings
    @given(raw=ROOTS, interactive_only=st.booleans(), compact=st.booleans())
    def test_refs_are_exactly_tree_nodes(self, raw, interactive_only, compact):
        tree, refs = build_tree(raw, interactive_only=interactive_only, compact=compact)
        nodes = list(iter_tree(tree))
        assert len(nodes) == len(refs)
        assert all(refs[node.ref] is node for node in nodes)

    @_fuzz_settings
    @given(raw=ROOTS, interactive_only=st.booleans(), compact=st.booleans())
    def test_refs_increase_in_document_order(self, raw, interactive_only, compact):
        tree, _ = build_tree(raw, interactive_only=interactive_only, compact=compact)
        numbers = [int(node.ref[1:]) for node in iter_tree(tree)]
        assert numbers == sorted(numbers)
        assert len(set(numbers)) == len(numbers)

    @_fuzz_settings
    @given(raw=ROOTS, compact=st.booleans())
    def test_interactive_only_materializes_only_interactive(self, raw, compact):
        tree, _ = build_tree(raw, interactive_only=True, compact=compact)
        assert all(_interactive(node) for node in iter_tree(tree))

    @_fuzz_settings
    @given(raw=ROOTS)
    def test_compact_leaves_no_collapsible_nodes(self, raw):
        tree, _ = build_tree(raw, compact=True)
        for node in iter_tree(tree):
            if _interactive(node):
                continue
            assert len(node.children) != 1
            assert node.name or node.children

    @_fuzz_settings
    @given(raw=ROOTS, interactive_only=st.booleans(), compact=st.booleans())
    def test_idempotent(self, raw, interactive_only, compact):
        t1, _ = build_tree(raw, interactive_only=interactive_only, compact=compact)
        t2, _ = build_tree(raw, interactive_only=interactive_only, compact=compact)
        assert [n.to_dict() for n in t1] == [n.to_dict() for n in t2]
