# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for Registrar Core.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from registrar.utils.datetime import (
    end_of_day,
    ensure_utc,
    now,
    start_of_day,
    utc_now,
    utc_today,
)
from registrar.utils.logging import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "now",
    "utc_today",
    "ensure_utc",
    "start_of_day",
    "end_of_day",
]
