"""
Centralized constants for react-compat-check.

This module defines immutable configuration values used across the tool,
including registry settings, manifest layout, package-manager lockfiles,
exit codes, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence, Tuple

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "react-compat-check/{version}"

# ---------------------------------------------------------------------------
# npm registry
# ---------------------------------------------------------------------------

#: Base URL of the public npm registry.
NPM_REGISTRY_URL: Final[str] = "https://registry.npmjs.org"

#: Environment variable overriding the registry base URL.
REGISTRY_ENVVAR: Final[str] = "REACT_COMPAT_REGISTRY"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Maximum number of registry fetches in flight at once.
DEFAULT_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# React packages
# ---------------------------------------------------------------------------

#: Package whose peer requirement decides compatibility.
REACT_PACKAGE: Final[str] = "react"

#: Packages that are the React runtime itself and are never analyzed.
CORE_REACT_PACKAGES: Final[Tuple[str, ...]] = ("react", "react-dom")

#: Packages treated as React-related even without a ``react`` peer range.
#: A name also matches when it starts with ``<entry>-``.
REACT_RELATED_PACKAGES: Final[Tuple[str, ...]] = (
    "react",
    "react-dom",
    "react-scripts",
    "react-router",
    "@types/react",
    "@types/react-dom",
)

#: Placeholder used when a version cannot be determined.
UNKNOWN_VERSION: Final[str] = "unknown"

#: Number of major React versions offered by the interactive picker.
MAJOR_VERSION_CHOICES: Final[int] = 5

#: Number of stable React versions listed under "See all versions".
ALL_VERSIONS_LIMIT: Final[int] = 50

# ---------------------------------------------------------------------------
# Manifest and package managers
# ---------------------------------------------------------------------------

#: Project manifest file name.
MANIFEST_FILE: Final[str] = "package.json"

#: Manifest dependency sections, in precedence order.
DEPENDENCY_FIELDS: Final[Tuple[str, ...]] = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
)

#: Lockfile → package manager, checked in order.
LOCKFILE_MANAGERS: Final[Sequence[Tuple[str, str]]] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

#: Package manager used when no lockfile is present.
DEFAULT_PACKAGE_MANAGER: Final[str] = "npm"

#: Maximum allowed manifest size (in bytes).
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Configuration file
# ---------------------------------------------------------------------------

#: Configuration file looked up in the project directory.
CONFIG_FILE_NAME: Final[str] = "react-compat.toml"

#: Table holding the settings inside the configuration file.
CONFIG_SECTION: Final[str] = "react-compat"

#: Environment variable pointing at an explicit configuration file.
CONFIG_ENVVAR: Final[str] = "REACT_COMPAT_CONFIG"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

#: Everything compatible, or every incompatible package upgraded.
EXIT_OK: Final[int] = 0

#: Incompatible packages remain unresolved.
EXIT_INCOMPATIBLE: Final[int] = 1

#: Runtime, network, file, installer, or input error.
EXIT_ERROR: Final[int] = 2

#: Interrupted by the user.
EXIT_INTERRUPTED: Final[int] = 130

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
