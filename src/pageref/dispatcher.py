# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Ref-based action dispatch.

One request per call, evaluated as a fixed sequence of checks:

  1. ref missing               → ValidationError("ref required")
  2. action missing            → ValidationError("action required")
  3. store empty               → NoSnapshotError
  4. ref not in snapshot       → RefNotFoundError
  5. fill/type/select w/o value → ValidationError("value required for <action>")
  6. unsupported action        → UnknownActionError
  7. call the page operation with the resolved selector

The page operation is an injected ``PageOperations`` capability. Its
failures propagate unmodified (no staleness classification, no retry), and
dispatch never mutates the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from playwright.async_api import Page
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import NoSnapshotError, UnknownActionError, ValidationError, validation_error_from
from .refs import lookup
from .store import SnapshotStore

logger = logging.getLogger(__name__)

# action → (PageOperations method, takes value)
ACTION_OPERATIONS: dict[str, tuple[str, bool]] = {
    "click": ("click", False),
    "dblclick": ("dblclick", False),
    "hover": ("hover", False),
    "focus": ("focus", False),
    "fill": ("fill", True),
    "type": ("type", True),
    "check": ("check", False),
    "uncheck": ("uncheck", False),
    "select": ("select_option", True),
}

VALID_ACTIONS = frozenset(ACTION_OPERATIONS)
VALUE_ACTIONS = frozenset(action for action, (_, takes_value) in ACTION_OPERATIONS.items() if takes_value)

DEFAULT_ACTION_TIMEOUT_MS = 5000


# ── Page operations capability ───────────────────────────────────────


@runtime_checkable
class PageOperations(Protocol):
    """Page-control primitives. Each call succeeds or raises."""

    async def click(self, selector: str) -> None: ...

    async def dblclick(self, selector: str) -> None: ...

    async def hover(self, selector: str) -> None: ...

    async def focus(self, selector: str) -> None: ...

    async def fill(self, selector: str, value: str) -> None: ...

    async def type(self, selector: str, value: str) -> None: ...

    async def check(self, selector: str) -> None: ...

    async def uncheck(self, selector: str) -> None: ...

    async def select_option(self, selector: str, value: str) -> None: ...


class PlaywrightOperations:
    """PageOperations over a Playwright page.

    Acts on the first match of the selector: duplicate ids in malformed
    markup are not detected.
    """

    def __init__(self, page: Page, *, timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS) -> None:
        self.page = page
        self.timeout_ms = timeout_ms

    def _locate(self, selector: str):
        return self.page.locator(selector).first

    async def click(self, selector: str) -> None:
        await self._locate(selector).click(timeout=self.timeout_ms)

    async def dblclick(self, selector: str) -> None:
        await self._locate(selector).dblclick(timeout=self.timeout_ms)

    async def hover(self, selector: str) -> None:
        await self._locate(selector).hover(timeout=self.timeout_ms)

    async def focus(self, selector: str) -> None:
        await self._locate(selector).focus(timeout=self.timeout_ms)

    async def fill(self, selector: str, value: str) -> None:
        await self._locate(selector).fill(value, timeout=self.timeout_ms)

    async def type(self, selector: str, value: str) -> None:
        # Keystroke by keystroke, unlike fill.
        await self._locate(selector).press_sequentially(value, timeout=self.timeout_ms)

    async def check(self, selector: str) -> None:
        await self._locate(selector).check(timeout=self.timeout_ms)

    async def uncheck(self, selector: str) -> None:
        await self._locate(selector).uncheck(timeout=self.timeout_ms)

    async def select_option(self, selector: str, value: str) -> None:
        await self._locate(selector).select_option(value, timeout=self.timeout_ms)


# ── Request / result ─────────────────────────────────────────────────


class ActionRequest(BaseModel):
    """A single ref-based action."""

    ref: str | None = Field(default=None, description='Element ref from the snapshot, e.g. "e3" or "@e3"')
    action: str | None = Field(default=None, description="click, dblclick, hover, focus, fill, type, check, uncheck, select")
    value: str | None = Field(default=None, description="Text for fill/type, option for select")


@dataclass(frozen=True, slots=True)
class ActionResult:
    ref: str
    action: str
    selector: str
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ref": self.ref, "action": self.action, "selector": self.selector}
        if self.value:
            data["value"] = self.value
        return data


def _require_ref_and_action(ref: Any, action: Any) -> None:
    if not ref:
        raise ValidationError("ref required")
    if not action:
        raise ValidationError("action required")


def _coerce_request(request: ActionRequest | dict[str, Any]) -> ActionRequest:
    if isinstance(request, ActionRequest):
        return request
    # Presence first, on the raw mapping, ahead of type validation.
    _require_ref_and_action(request.get("ref"), request.get("action"))
    try:
        return ActionRequest.model_validate(request)
    except PydanticValidationError as e:
        raise validation_error_from(e, subject="request") from e


# ── Dispatcher ───────────────────────────────────────────────────────


class ActionDispatcher:
    """Resolves a ref against the store's current snapshot and runs the action."""

    def __init__(self, store: SnapshotStore, operations: PageOperations) -> None:
        self.store = store
        self.operations = operations

    async def dispatch(self, request: ActionRequest | dict[str, Any]) -> ActionResult:
        """Validate, resolve and execute one action.

        Raises:
            ValidationError: ref/action missing, or value missing for fill/type/select
            NoSnapshotError: nothing has been generated (or the store was cleared)
            RefNotFoundError: ref absent from the current snapshot
            UnknownActionError: action is not supported
            Exception: whatever the page operation raises, unmodified
        """
        req = _coerce_request(request)
        ref, action, value = req.ref, req.action, req.value

        _require_ref_and_action(ref, action)

        snapshot = self.store.get()
        if snapshot is None:
            raise NoSnapshotError("no snapshot available; generate one first")

        node = lookup(snapshot, ref)

        if action in VALUE_ACTIONS and value is None:
            raise ValidationError(f"value required for {action}")

        operation = ACTION_OPERATIONS.get(action)
        if operation is None:
            raise UnknownActionError(f"unknown action: {action}", action=action)

        method_name, takes_value = operation
        method = getattr(self.operations, method_name)
        logger.info("dispatch: ref=%s action=%s selector=%s", node.ref, action, node.selector)
        if takes_value:
            await method(node.selector, value)
        else:
            await method(node.selector)

        return ActionResult(ref=ref, action=action, selector=node.selector, value=value)
