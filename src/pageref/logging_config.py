# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge. Humans: ConsoleRenderer, services: JSONRenderer.

pageref modules log through ``logging.getLogger(__name__)``; this module
routes those records through structlog processors to stderr. Records
emitted inside ``page_context`` carry the page URL they concern.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .config import Settings

PACKAGE_LOGGER = "pageref"


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure(*, json_output: bool = False, level: str = "INFO") -> None:
    """Route stdlib logging through structlog to a single stderr handler.

    Args:
        json_output: True for JSON lines, False for human-readable output.
        level: Level for the root and ``pageref`` loggers (default INFO).
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=shared,
        )
    )

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)


def configure_from_settings(settings: Settings) -> None:
    configure(json_output=settings.log_json, level=settings.log_level)


def page_context(url: str) -> AbstractContextManager:
    """Bind ``page_url`` to every record logged inside the block."""
    return structlog.contextvars.bound_contextvars(page_url=url)
