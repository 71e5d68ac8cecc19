"""Configuration file loader for react-compat-check.

Handles discovery, loading, parsing, and validation of the optional
``react-compat.toml`` file. Settings live under a ``[react-compat]`` table.

Discovery order:

1. Explicit path from ``--config`` or ``REACT_COMPAT_CONFIG``
2. ``react-compat.toml`` in the project directory

Configuration precedence: defaults < config file < environment < CLI args.

Example (``react-compat.toml``)::

    [react-compat]
    include_dev = true
    fix = "nearest"
    registry_url = "https://registry.example.com"
    react_packages = ["@acme/ui"]
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import asdict, dataclass, field

from react_compat.exceptions import ConfigError
from react_compat.utils.logger import get_logger
from react_compat.models.upgrade import FixPolicy
from react_compat.constants import (
    CONFIG_FILE_NAME,
    CONFIG_SECTION,
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT,
    NPM_REGISTRY_URL,
)

logger = get_logger("config")


@dataclass
class CompatConfig:
    """Parsed and validated react-compat-check configuration.

    All fields have defaults, so an empty file is valid.

    Attributes:
        include_dev: Analyze ``devDependencies`` too.
        include_optional: Analyze ``optionalDependencies`` too.
        fix: Default fix policy (``none``/``nearest``/``latest``), or
            ``None`` to ask interactively.
        registry_url: npm-compatible registry base URL.
        timeout: Per-request timeout in seconds.
        concurrency: Maximum concurrent registry fetches.
        update_companions: Also rewrite companion packages when upgrading.
        react_packages: Extra package names treated as React-related.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_dev: bool = False
    include_optional: bool = False
    fix: Optional[str] = None
    registry_url: str = NPM_REGISTRY_URL
    timeout: int = DEFAULT_TIMEOUT
    concurrency: int = DEFAULT_CONCURRENCY
    update_companions: bool = True
    react_packages: List[str] = field(default_factory=list)

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Every user-facing option, for the ``-vv`` startup log."""
        values = asdict(self)
        values.pop("source_path")
        return values


def discover_config_file(
    explicit_path: Optional[Path] = None,
    search_dir: Optional[Path] = None,
) -> Optional[Path]:
    """Locate ``react-compat.toml``.

    An explicit path (``--config`` or ``REACT_COMPAT_CONFIG``) must point at
    an existing file. Otherwise the file is looked up in ``search_dir``
    (the project directory), falling back to the working directory.

    Raises:
        ConfigError: ``explicit_path`` is not a file.
    """
    if explicit_path is None:
        candidate = (search_dir or Path.cwd()) / CONFIG_FILE_NAME
        if not candidate.is_file():
            logger.debug("No %s in %s", CONFIG_FILE_NAME, candidate.parent)
            return None
        return candidate.resolve()

    if not explicit_path.is_file():
        raise ConfigError(
            f"Configuration file not found: {explicit_path}",
            config_path=str(explicit_path),
        )
    return explicit_path.resolve()


def load_config(
    config_path: Optional[Path] = None,
    search_dir: Optional[Path] = None,
) -> CompatConfig:
    """Return the validated configuration, or defaults when there is no file.

    A file without a ``[react-compat]`` table is accepted and yields the
    defaults.

    Raises:
        ConfigError: The file is not valid TOML, or the table has unknown
            keys or badly typed values.
    """
    path = discover_config_file(config_path, search_dir)
    if path is None:
        return CompatConfig()

    logger.info("Reading configuration from %s", path)
    section = _read_toml(path).get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] must be a table", config_path=str(path))

    config = _parse_section(section, config_path=str(path))
    config.source_path = path
    logger.debug("Configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path.name}: {exc}", config_path=str(path)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}", config_path=str(path)) from exc


_BOOL_OPTIONS = ("include_dev", "include_optional", "update_companions")
_POSITIVE_INT_OPTIONS = ("timeout", "concurrency")
_KNOWN_OPTIONS = frozenset(
    _BOOL_OPTIONS
    + _POSITIVE_INT_OPTIONS
    + ("fix", "registry_url", "react_packages")
)


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> CompatConfig:
    """Parse and validate the ``[react-compat]`` table.

    Rejects unknown keys and type mismatches.

    Raises:
        ConfigError: Unknown keys or incorrect types (e.g., string for boolean).
    """
    config = CompatConfig()

    unknown = set(section.keys()) - _KNOWN_OPTIONS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _BOOL_OPTIONS:
        if option in section:
            val = section[option]
            if not isinstance(val, bool):
                raise ConfigError(
                    f"{option} must be a boolean, got {type(val).__name__}",
                    config_path=config_path,
                    option=option,
                )
            setattr(config, option, val)

    for option in _POSITIVE_INT_OPTIONS:
        if option in section:
            val = section[option]
            # bool is an int subclass
            if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
                raise ConfigError(
                    f"{option} must be a positive integer, got {val!r}",
                    config_path=config_path,
                    option=option,
                )
            setattr(config, option, val)

    if "fix" in section:
        val = section["fix"]
        allowed = [p.value for p in FixPolicy]
        if val not in allowed:
            raise ConfigError(
                f"fix must be one of {', '.join(allowed)}, got {val!r}",
                config_path=config_path,
                option="fix",
            )
        config.fix = val

    if "registry_url" in section:
        val = section["registry_url"]
        if not isinstance(val, str) or not val.startswith(("http://", "https://")):
            raise ConfigError(
                f"registry_url must be an http(s) URL, got {val!r}",
                config_path=config_path,
                option="registry_url",
            )
        config.registry_url = val

    if "react_packages" in section:
        val = section["react_packages"]
        if not isinstance(val, list) or not all(isinstance(v, str) for v in val):
            raise ConfigError(
                "react_packages must be a list of strings",
                config_path=config_path,
                option="react_packages",
            )
        config.react_packages = list(val)

    return config
