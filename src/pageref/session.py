# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""SnapshotSession: the operations a transport layer calls.

Wires one store into both the generator and the dispatcher, and turns
dispatch failures into problem-details dicts:

- generate(options) -> Snapshot
- clear() -> None
- dispatch({ref, action, value?}) -> result dict | problem dict
- find_by_ref(snapshot, ref) -> SnapshotNode | None
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page
from pydantic import ValidationError as PydanticValidationError

from . import Snapshot, SnapshotNode
from .config import Settings
from .dispatcher import ActionDispatcher, ActionRequest, PageOperations, PlaywrightOperations
from .errors import PageRefError, validation_error_from
from .logging_config import page_context
from .problem_details import from_exception
from .refs import find_by_ref
from .snapshot import SnapshotGenerator, SnapshotOptions
from .store import SnapshotStore

logger = logging.getLogger(__name__)


def _coerce_options(options: SnapshotOptions | dict[str, Any] | None) -> SnapshotOptions:
    if options is None:
        return SnapshotOptions()
    if isinstance(options, SnapshotOptions):
        return options
    try:
        return SnapshotOptions.model_validate(options)
    except PydanticValidationError as e:
        raise validation_error_from(e, subject="options") from e


class SnapshotSession:
    """Snapshot + ref dispatch for a single page.

    Not internally serialized: callers must not overlap generate/dispatch
    calls against the same page.
    """

    def __init__(
        self,
        page: Page,
        *,
        settings: Settings | None = None,
        operations: PageOperations | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store or SnapshotStore()
        if operations is None:
            operations = PlaywrightOperations(page, timeout_ms=self.settings.action_timeout_ms)
        self.generator = SnapshotGenerator(page, self.store)
        self.dispatcher = ActionDispatcher(self.store, operations)

    async def generate(self, options: SnapshotOptions | dict[str, Any] | None = None) -> Snapshot:
        """Generate a snapshot and make it current.

        Raises:
            ValidationError: options are malformed (e.g. negative depth)
            SnapshotError: the in-page walk failed
        """
        options = _coerce_options(options)
        with page_context(self.generator.page.url):
            return await self.generator.generate(options)

    def clear(self) -> None:
        self.generator.clear()

    async def dispatch(self, request: ActionRequest | dict[str, Any]) -> dict[str, Any]:
        """Run one ref-based action.

        Returns the ``{ref, action, selector, value?}`` dict on success, or an
        RFC 9457 problem dict on failure. Nothing is retried.
        """
        with page_context(self.generator.page.url):
            try:
                result = await self.dispatcher.dispatch(request)
            except PageRefError as e:
                logger.info("dispatch rejected: %s: %s", type(e).__name__, e)
                return from_exception(e).to_dict()
            except Exception as e:
                logger.warning("dispatch failed in page operation: %s: %s", type(e).__name__, e)
                return from_exception(e, operation=True).to_dict()
        return result.to_dict()

    def find_by_ref(self, snapshot: Snapshot, ref: str) -> SnapshotNode | None:
        return find_by_ref(snapshot, ref)

    @property
    def current(self) -> Snapshot | None:
        return self.store.get()
