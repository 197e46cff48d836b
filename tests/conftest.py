# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import pageref  # noqa: F401
except ImportError:
    raise ImportError("pageref is not installed. Run: pip install -e '.[dev]'") from None

from unittest.mock import AsyncMock, MagicMock

import pytest

from pageref.dispatcher import PageOperations
from pageref.store import SnapshotStore


@pytest.fixture
def store() -> SnapshotStore:
    return SnapshotStore()


@pytest.fixture
def operations() -> MagicMock:
    """PageOperations double: every primitive is an AsyncMock."""
    ops = MagicMock(spec=PageOperations)
    for name in ("click", "dblclick", "hover", "focus", "fill", "type", "check", "uncheck", "select_option"):
        setattr(ops, name, AsyncMock(return_value=None))
    return ops


@pytest.fixture
def page() -> MagicMock:
    """Playwright Page double. Tests set ``page.evaluate.return_value``."""
    mock_page = MagicMock()
    mock_page.evaluate = AsyncMock()
    return mock_page
