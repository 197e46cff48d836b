# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""In-page DOM walker.

The walker runs as one synchronous pass inside the page's own script engine
(single ``page.evaluate`` call). It cannot share closures with Python, so the
boundary is an explicit JSON contract:

  request  → {depth, selector, nameMaxLength}
  response ← {url, title, viewport, scopeMatched, scopeError, nodes}

The script applies the scope, visibility and depth policy and collects raw
facts per element (tag, role attribute, label texts, selector, bbox, ...).
Role/name resolution, splicing, compaction and ref assignment happen on the
Python side in ``roles`` and ``builder``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from . import Viewport
from .errors import SnapshotError
from .roles import NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

# ── Walker script ────────────────────────────────────────────────────

_WALK_JS = """\
(request) => {
  const maxDepth = (request.depth === null || request.depth === undefined) ? null : request.depth;
  const nameMax = request.nameMaxLength;

  function isVisible(el) {
    const style = window.getComputedStyle(el);
    if (style.display === "none") return false;
    if (style.visibility === "hidden") return false;
    if (parseFloat(style.opacity) === 0) return false;
    const rect = el.getBoundingClientRect();
    if (rect.width === 0 && rect.height === 0) return false;
    return true;
  }

  function inViewport(rect) {
    return (
      rect.top < window.innerHeight &&
      rect.bottom > 0 &&
      rect.left < window.innerWidth &&
      rect.right > 0
    );
  }

  function selectorFor(el) {
    if (el.id) return "#" + CSS.escape(el.id);
    const path = [];
    let cur = el;
    while (cur && cur.nodeType === 1 && cur !== document.body) {
      if (cur.id) { path.unshift("#" + CSS.escape(cur.id)); break; }
      let seg = cur.localName;
      const parent = cur.parentElement;
      if (parent) {
        const sibs = Array.from(parent.children).filter(s => s.localName === cur.localName);
        if (sibs.length > 1) seg += ":nth-of-type(" + (sibs.indexOf(cur) + 1) + ")";
      }
      path.unshift(seg);
      cur = cur.parentElement;
    }
    return path.join(" > ") || el.localName;
  }

  function textOf(el) {
    return el ? (el.textContent || "").trim() : "";
  }

  function nameSources(el) {
    const out = {
      ariaLabel: el.getAttribute("aria-label"),
      labelledBy: null,
      labelFor: null,
      wrappingLabel: null,
      placeholder: el.getAttribute("placeholder"),
      title: el.getAttribute("title"),
      alt: el.getAttribute("alt"),
      value: typeof el.value === "string" ? el.value : null,
      text: (el.textContent || "").trim().slice(0, nameMax),
    };
    const labelledBy = el.getAttribute("aria-labelledby");
    if (labelledBy) {
      out.labelledBy = labelledBy.split(/\\s+/)
        .map(id => textOf(document.getElementById(id)))
        .filter(t => t)
        .join(" ");
    }
    if (el.id) {
      try {
        out.labelFor = textOf(document.querySelector('label[for="' + CSS.escape(el.id) + '"]'));
      } catch (e) {}
    }
    const parent = el.parentElement;
    const wrapping = parent ? parent.closest("label") : null;
    if (wrapping) out.wrappingLabel = textOf(wrapping);
    return out;
  }

  function attributesOf(el) {
    const attrs = {};
    if (el.id) attrs.id = el.id;
    const cls = el.getAttribute("class");
    if (cls) attrs.class = cls;
    if (typeof el.href === "string" && el.href) attrs.href = el.href;
    if (typeof el.type === "string" && el.type) attrs.type = el.type;
    if (typeof el.value === "string" && el.value) attrs.value = el.value;
    const placeholder = el.getAttribute("placeholder");
    if (placeholder) attrs.placeholder = placeholder;
    if (typeof el.checked === "boolean") attrs.checked = el.checked;
    if (typeof el.disabled === "boolean") attrs.disabled = el.disabled;
    return attrs;
  }

  function walk(el, depth) {
    if (maxDepth !== null && depth > maxDepth) return null;
    if (!isVisible(el)) return null;

    const rect = el.getBoundingClientRect();
    const tag = el.localName;
    const children = [];
    for (const child of el.children) {
      const node = walk(child, depth + 1);
      if (node) children.push(node);
    }
    const editable = el.getAttribute("contenteditable");
    return {
      tag: tag,
      depth: depth,
      role: el.getAttribute("role"),
      inputType: tag === "input" ? (el.type || "text").toLowerCase() : "",
      hasHref: el.hasAttribute("href"),
      hasClickHandler: !!el.getAttribute("onclick"),
      tabindex: el.getAttribute("tabindex"),
      contentEditable: el.isContentEditable && editable !== null && editable !== "false",
      disabled: el.disabled === true,
      names: nameSources(el),
      selector: selectorFor(el),
      bbox: {
        x: Math.round(rect.x),
        y: Math.round(rect.y),
        width: Math.round(rect.width),
        height: Math.round(rect.height),
      },
      inViewport: inViewport(rect),
      attributes: attributesOf(el),
      children: children,
    };
  }

  let root = document.body;
  let scopeMatched = null;
  let scopeError = null;
  if (request.selector) {
    try {
      const selected = document.querySelector(request.selector);
      scopeMatched = !!selected;
      if (selected) root = selected;
    } catch (e) {
      scopeMatched = false;
      scopeError = String(e && e.message ? e.message : e);
    }
  }

  const nodes = [];
  if (root) {
    for (const child of root.children) {
      const node = walk(child, 0);
      if (node) nodes.push(node);
    }
  }

  return {
    url: window.location.href,
    title: document.title,
    viewport: {width: window.innerWidth, height: window.innerHeight},
    scopeMatched: scopeMatched,
    scopeError: scopeError,
    nodes: nodes,
  };
}
"""


# ── Request / response contract ──────────────────────────────────────


@dataclass(frozen=True, slots=True)
class WalkRequest:
    """Walker configuration sent into the page."""

    depth: int | None = None
    selector: str | None = None
    name_max_length: int = NAME_MAX_LENGTH

    def to_payload(self) -> dict[str, Any]:
        return {
            "depth": self.depth,
            "selector": self.selector or None,
            "nameMaxLength": self.name_max_length,
        }


@dataclass(frozen=True, slots=True)
class WalkResult:
    """Raw walker output: page metadata plus nested element descriptors."""

    url: str
    title: str
    viewport: Viewport
    nodes: list[dict[str, Any]]
    scope_matched: bool | None = None
    scope_error: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> WalkResult:
        """Validate the walker response shape.

        Raises:
            SnapshotError: payload is not the expected object
        """
        if not isinstance(payload, dict):
            raise SnapshotError(f"walker returned {type(payload).__name__}, expected object")
        nodes = payload.get("nodes")
        if not isinstance(nodes, list):
            raise SnapshotError("walker response is missing 'nodes'")
        viewport = payload.get("viewport") or {}
        try:
            vp = Viewport(width=int(viewport.get("width", 0)), height=int(viewport.get("height", 0)))
        except (TypeError, ValueError, AttributeError) as e:
            raise SnapshotError(f"walker returned an invalid viewport: {viewport!r}") from e
        return cls(
            url=str(payload.get("url", "")),
            title=str(payload.get("title", "")),
            viewport=vp,
            nodes=nodes,
            scope_matched=payload.get("scopeMatched"),
            scope_error=payload.get("scopeError"),
        )


async def walk_page(page: Page, request: WalkRequest) -> WalkResult:
    """Run the walker inside *page* and return its validated output.

    Raises:
        SnapshotError: evaluation failed or the response was malformed
    """
    try:
        payload = await page.evaluate(_WALK_JS, request.to_payload())
    except PlaywrightError as e:
        raise SnapshotError(f"DOM walk failed: {e}") from e

    result = WalkResult.from_payload(payload)

    if request.selector and not result.scope_matched:
        if result.scope_error:
            logger.warning("Scope selector %r is invalid (%s), walking document body", request.selector, result.scope_error)
        else:
            logger.warning("Scope selector %r matched nothing, walking document body", request.selector)

    return result
