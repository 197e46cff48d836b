# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Role, interactivity and accessible-name resolution.

Pure functions over the raw facts the in-page walker collects for each
element (tag, attributes, label texts). No browser dependency, so every
rule here is unit-testable without Chromium.
"""

from __future__ import annotations

from collections.abc import Mapping

# Text-content fallback for accessible names is capped at this length.
NAME_MAX_LENGTH = 100

# ── Role tables ──────────────────────────────────────────────────────

INTERACTIVE_ROLES = frozenset(
    {
        "button",
        "link",
        "textbox",
        "checkbox",
        "radio",
        "combobox",
        "listbox",
        "menuitem",
        "menuitemcheckbox",
        "menuitemradio",
        "option",
        "switch",
        "tab",
        "searchbox",
        "slider",
        "spinbutton",
    }
)

# Tags that are interactive by default, whatever their role.
INTERACTIVE_TAGS = frozenset({"a", "button", "input", "select", "textarea", "details", "summary"})

# Tags that take keyboard focus unless disabled.
FOCUSABLE_TAGS = frozenset({"a", "button", "input", "select", "textarea"})

# <input type=...> → role. Unlisted types fall back to textbox.
INPUT_TYPE_ROLES: dict[str, str] = {
    "button": "button",
    "submit": "button",
    "reset": "button",
    "image": "button",
    "checkbox": "checkbox",
    "radio": "radio",
    "text": "textbox",
    "password": "textbox",
    "email": "textbox",
    "url": "textbox",
    "tel": "textbox",
    "search": "searchbox",
    "number": "spinbutton",
    "range": "slider",
}

BUTTON_INPUT_TYPES = frozenset({"button", "submit", "reset"})

TAG_ROLES: dict[str, str] = {
    "button": "button",
    "select": "combobox",
    "textarea": "textbox",
    "img": "img",
    "nav": "navigation",
    "main": "main",
    "header": "banner",
    "footer": "contentinfo",
    "aside": "complementary",
    "article": "article",
    "section": "region",
    "form": "form",
    "table": "table",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
}

# Accessible-name sources, highest priority first. Keys match the walker payload.
NAME_SOURCES = (
    "ariaLabel",
    "labelledBy",
    "labelFor",
    "wrappingLabel",
    "placeholder",
    "title",
    "alt",
)

# Label texts are trimmed; attribute sources are used as authored, whitespace included.
_LABEL_SOURCES = frozenset({"labelledBy", "labelFor", "wrappingLabel"})


def resolve_role(
    tag: str,
    *,
    explicit_role: str | None = None,
    input_type: str = "",
    has_href: bool = False,
) -> str:
    """Resolve an element's role: explicit ``role`` attribute, else implicit from tag."""
    if explicit_role:
        return explicit_role

    tag = tag.lower()
    if tag == "a":
        return "link" if has_href else "generic"
    if tag == "input":
        return INPUT_TYPE_ROLES.get(input_type.lower(), "textbox")
    return TAG_ROLES.get(tag, "generic")


def is_interactive(
    tag: str,
    role: str,
    *,
    has_click_handler: bool = False,
    tabindex: str | None = None,
    content_editable: bool = False,
) -> bool:
    if tag.lower() in INTERACTIVE_TAGS:
        return True
    if role in INTERACTIVE_ROLES:
        return True
    return has_click_handler or tabindex is not None or content_editable


def is_focusable(tag: str, *, tabindex: str | None = None, disabled: bool = False) -> bool:
    """Keyboard-focusable: non-negative tabindex, or an enabled native control."""
    if tabindex is not None:
        try:
            if int(tabindex.strip()) >= 0:
                return True
        except ValueError:
            pass
    if tag.lower() in FOCUSABLE_TAGS:
        return not disabled
    return False


def accessible_name(
    sources: Mapping[str, str | None],
    *,
    tag: str = "",
    input_type: str = "",
) -> str:
    """Pick the first non-empty name source in priority order.

    Falls back to the value of button-type inputs, then to trimmed text
    content truncated to ``NAME_MAX_LENGTH`` characters.
    """
    for key in NAME_SOURCES:
        value = sources.get(key)
        if key in _LABEL_SOURCES:
            value = value.strip() if value else value
        if value:
            return value

    if tag.lower() == "input" and input_type.lower() in BUTTON_INPUT_TYPES:
        value = sources.get("value")
        if value:
            return value

    text = sources.get("text") or ""
    return text.strip()[:NAME_MAX_LENGTH]
