"""
react-compat-check — React upgrade compatibility analysis for npm projects

Reads a project's ``package.json``, looks up every React-related dependency
in the npm registry, and reports whether the installed release supports a
target React version.

Features include:
    • Peer-range evaluation with npm range semantics
    • Nearest and latest compatible release search
    • Companion upgrade detection for the chosen releases
    • Interactive or policy-driven fixes written back to package.json
    • Machine-readable JSON report for CI
"""

from __future__ import annotations

from react_compat.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "react-compat-check Contributors"
__license__ = "Apache-2.0"
__description__ = "Check npm dependencies against a target React version."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
