"""
react-compat-check version information.

Single source of truth for the package version. The CLI reads it for
``--version`` and the HTTP client for its User-Agent.
"""

from __future__ import annotations

__version__ = "0.3.0"
