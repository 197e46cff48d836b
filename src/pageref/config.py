# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Runtime settings with ``PAGEREF_*`` environment overrides.

Defaults come from the modules that own them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .dispatcher import DEFAULT_ACTION_TIMEOUT_MS

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-level configuration."""

    action_timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS  # per page operation
    log_level: str = "INFO"
    log_json: bool = False  # JSON lines instead of console output

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from the environment. Invalid values keep the default."""
        env = os.environ if environ is None else environ
        defaults = cls()

        timeout_ms = defaults.action_timeout_ms
        raw_timeout = env.get("PAGEREF_ACTION_TIMEOUT_MS", "").strip()
        if raw_timeout:
            try:
                timeout_ms = int(raw_timeout)
                if timeout_ms <= 0:
                    raise ValueError(raw_timeout)
            except ValueError:
                logger.warning("Ignoring invalid PAGEREF_ACTION_TIMEOUT_MS=%r", raw_timeout)
                timeout_ms = defaults.action_timeout_ms

        log_level = defaults.log_level
        raw_level = env.get("PAGEREF_LOG_LEVEL", "").strip().upper()
        if raw_level:
            if raw_level in _LOG_LEVELS:
                log_level = raw_level
            else:
                logger.warning("Ignoring invalid PAGEREF_LOG_LEVEL=%r", raw_level)

        log_json = env.get("PAGEREF_LOG_JSON", "").strip().lower() in _TRUTHY

        return cls(action_timeout_ms=timeout_ms, log_level=log_level, log_json=log_json)
