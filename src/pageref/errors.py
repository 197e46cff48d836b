# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""pageref exception hierarchy.

All pageref-specific errors inherit from PageRefError, allowing callers
to catch the base class for any snapshot/dispatch failure or specific
subclasses for targeted handling.

Failures raised by the page operations themselves (e.g. Playwright errors
for a detached element) are NOT wrapped and never appear here.
"""

from __future__ import annotations


class PageRefError(Exception):
    """Base exception for all pageref errors."""


class ValidationError(PageRefError):
    """A required request field is missing or malformed."""


class NoSnapshotError(PageRefError):
    """Dispatch was requested before any snapshot was generated (or after clear)."""


class RefNotFoundError(PageRefError):
    """The ref is absent from the current snapshot."""

    def __init__(self, message: str, *, ref: str = "") -> None:
        super().__init__(message)
        self.ref = ref


class UnknownActionError(PageRefError):
    """The action literal is not one of the supported actions."""

    def __init__(self, message: str, *, action: str = "") -> None:
        super().__init__(message)
        self.action = action


class SnapshotError(PageRefError):
    """The in-page walker failed or returned a malformed payload."""


def validation_error_from(exc, *, subject: str) -> ValidationError:
    """Convert a pydantic ValidationError into a pageref ValidationError.

    Only the first reported problem is kept, e.g. ``invalid depth: ...``.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())) or subject
    return ValidationError(f"invalid {field}: {first.get('msg', 'invalid value')}")
