# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""RFC 9457 Problem Details for snapshot/dispatch failures.

Maps pageref exceptions (and page-operation failures) to structured
problem detail objects that a transport layer can return as-is.

Key public API:

- ``ProblemType``: StrEnum error taxonomy.
- ``ProblemDetail``: frozen dataclass (→ JSON dict / JSON string / text).
- ``sanitize_detail()``: scrub secrets & paths from error messages.
- ``from_exception()``: build a ``ProblemDetail`` from any exception.

Type URI namespace: ``https://www.retio.ai/pageref/errors/{slug}``
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# ── Constants ────────────────────────────────────────────────────────

_ERROR_BASE = "https://www.retio.ai/pageref/errors"

MAX_DETAIL_LENGTH = 200

# ── ProblemType taxonomy ─────────────────────────────────────────────


class ProblemType(StrEnum):
    """Error taxonomy for snapshot generation and ref dispatch."""

    VALIDATION_ERROR = "validation-error"
    NO_SNAPSHOT = "no-snapshot"
    REF_NOT_FOUND = "ref-not-found"
    UNKNOWN_ACTION = "unknown-action"
    ACTION_FAILED = "action-failed"
    SNAPSHOT_FAILED = "snapshot-failed"
    INTERNAL_ERROR = "internal-error"

    @property
    def uri(self) -> str:
        """Full type URI for RFC 9457 ``type`` field."""
        return f"{_ERROR_BASE}/{self.value}"


# ── Per-type metadata: (status, title, recovery_hint) ────────────────

_TYPE_METADATA: dict[ProblemType, tuple[int, str, str]] = {
    ProblemType.VALIDATION_ERROR: (422, "Validation Error", "Fix the request and retry."),
    ProblemType.NO_SNAPSHOT: (409, "No Snapshot", "Generate a snapshot first."),
    ProblemType.REF_NOT_FOUND: (404, "Ref Not Found", "Generate a new snapshot to refresh refs."),
    ProblemType.UNKNOWN_ACTION: (422, "Unknown Action", ""),
    ProblemType.ACTION_FAILED: (500, "Action Failed", "Generate a new snapshot and retry."),
    ProblemType.SNAPSHOT_FAILED: (500, "Snapshot Failed", "Check the page is loaded, then retry."),
    ProblemType.INTERNAL_ERROR: (500, "Internal Error", ""),
}

# ── Secret sanitization patterns ─────────────────────────────────────

_SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"Bearer\s+\S+"), "Bearer <redacted>"),
    (
        re.compile(
            r"(?:API_KEY|SECRET|TOKEN|PASSWORD|CREDENTIAL)\s*[=:]\s*\S+",
            re.IGNORECASE,
        ),
        "<redacted>",
    ),
    (re.compile(r"Basic\s+[A-Za-z0-9+/=]{8,}"), "Basic <redacted>"),
    (re.compile(r"://[^@\s]+@"), "://<redacted>@"),
]

_PATH_PATTERN = re.compile(
    r"(/(?:Users|home|tmp|var|etc|opt|root|srv|proc|sys|usr|Library"
    r"|Applications|private|snap|mnt|media|nix)/[\w./-]+"
    r"|[A-Z]:\\[\w.\\-]+)"
)


def sanitize_detail(text: str) -> str:
    """Scrub secrets and filesystem paths from *text*, then truncate."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    text = _PATH_PATTERN.sub("<path>", text)
    if len(text) > MAX_DETAIL_LENGTH:
        text = text[:MAX_DETAIL_LENGTH] + "..."
    return text


# ── ProblemDetail dataclass ──────────────────────────────────────────

# Standard RFC 9457 fields that extensions must never shadow.
_STANDARD_FIELDS = frozenset({"type", "title", "status", "detail", "instance"})


@dataclass(frozen=True, slots=True)
class ProblemDetail:
    """RFC 9457 Problem Detail object."""

    type: str = "about:blank"
    title: str = ""
    status: int = 500
    detail: str = ""
    instance: str = ""
    extensions: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """RFC 9457 JSON dict.  Empty optional fields omitted, extensions merged at top level."""
        d: dict[str, Any] = {"type": self.type, "status": self.status}
        if self.title:
            d["title"] = self.title
        if self.detail:
            d["detail"] = self.detail
        if self.instance:
            d["instance"] = self.instance
        for k, v in self.extensions.items():
            if k not in _STANDARD_FIELDS:
                d[k] = v
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def to_text(self) -> str:
        """Human-readable form: ``Error: <detail>`` plus an optional hint line."""
        lines = [f"Error: {self.detail}"]
        hint = self.extensions.get("hint")
        if hint:
            lines.append(f"Hint: {hint}")
        return "\n".join(lines)


# ── Exception → ProblemType mapping ──────────────────────────────────


def _exception_type_map() -> dict[type, ProblemType]:
    """Lazy-build mapping from exception classes to ProblemType."""
    from .errors import (
        NoSnapshotError,
        RefNotFoundError,
        SnapshotError,
        UnknownActionError,
        ValidationError,
    )

    return {
        ValidationError: ProblemType.VALIDATION_ERROR,
        NoSnapshotError: ProblemType.NO_SNAPSHOT,
        RefNotFoundError: ProblemType.REF_NOT_FOUND,
        UnknownActionError: ProblemType.UNKNOWN_ACTION,
        SnapshotError: ProblemType.SNAPSHOT_FAILED,
    }


def _build(problem_type: ProblemType, detail: str, instance: str, ext: dict[str, Any]) -> ProblemDetail:
    status, title, hint = _TYPE_METADATA[problem_type]
    if hint:
        ext.setdefault("hint", hint)
    return ProblemDetail(
        type=problem_type.uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        extensions=ext,
    )


def from_exception(
    exc: Exception,
    *,
    operation: bool = False,
    instance: str = "",
    extensions: dict[str, Any] | None = None,
) -> ProblemDetail:
    """Build a ProblemDetail from an exception.

    Known pageref errors map to their specific ProblemType. With
    ``operation=True`` the exception came from a page operation and is
    surfaced verbatim as ``action-failed`` (never reclassified, e.g. as a
    stale ref). Anything else becomes ``internal-error`` with a generic
    message to avoid leaking internal state.
    """
    from .errors import PageRefError, RefNotFoundError, UnknownActionError

    ext = dict(extensions) if extensions else {}

    if operation:
        ext.setdefault("error_type", type(exc).__name__)
        return _build(ProblemType.ACTION_FAILED, str(exc), instance, ext)

    type_map = _exception_type_map()
    problem_type = type_map.get(type(exc))
    if problem_type is None and isinstance(exc, PageRefError):
        # Subclasses of known errors inherit their parent's type.
        for exc_cls, pt in type_map.items():
            if isinstance(exc, exc_cls):
                problem_type = pt
                break

    if problem_type is not None:
        if isinstance(exc, RefNotFoundError) and exc.ref:
            ext.setdefault("ref", exc.ref)
        if isinstance(exc, UnknownActionError) and exc.action:
            ext.setdefault("action", exc.action)
        return _build(problem_type, sanitize_detail(str(exc)), instance, ext)

    return _build(
        ProblemType.INTERNAL_ERROR,
        f"An unexpected error occurred ({type(exc).__name__})",
        instance,
        ext,
    )
