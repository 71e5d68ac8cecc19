"""
Utility helpers for react-compat-check.

This package provides reusable utilities used across the tool, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client utilities
- Version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from react_compat.utils.filesystem import safe_read_file, safe_write_file

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from react_compat.utils.logger import (
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from react_compat.utils.console import (
    colorize_status,
    colorize_update_type,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from react_compat.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from react_compat.utils.version_utils import get_update_type

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_info",
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "colorize_status",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    # HTTP
    "HTTPClient",
    # Version utilities
    "get_update_type",
]
