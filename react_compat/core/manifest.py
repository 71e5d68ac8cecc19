"""``package.json`` access for react-compat-check.

Reads the project manifest, exposes its three dependency sections, applies
version edits in place and writes the file back atomically. Every key the
tool does not touch, and the order of all keys, is preserved.

The package manager is inferred from the lockfile next to the manifest.
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from react_compat.utils.logger import get_logger
from react_compat.utils.filesystem import safe_read_file, safe_write_file
from react_compat.models.dependency import DependencyClass
from react_compat.exceptions import (
    FileOperationError,
    ManifestNotFoundError,
    ManifestParseError,
)
from react_compat.constants import (
    DEFAULT_PACKAGE_MANAGER,
    DEPENDENCY_FIELDS,
    LOCKFILE_MANAGERS,
    MANIFEST_FILE,
)

logger = get_logger("manifest")

__all__ = [
    "Manifest",
    "detect_package_manager",
    "install_command",
    "read_manifest",
    "write_manifest",
]

DeclaredDependency = Tuple[str, str, DependencyClass]


@dataclass
class Manifest:
    """An in-memory ``package.json``.

    Attributes:
        path: Location of the file.
        data: The decoded JSON object, mutated in place by edits.
    """

    path: Path
    data: Dict[str, Any]

    @property
    def root(self) -> Path:
        return self.path.parent

    def section(self, field_name: str) -> Dict[str, str]:
        """Return a copy of a dependency section's string entries.

        Missing or malformed sections read as empty.
        """
        value = self.data.get(field_name)
        if not isinstance(value, dict):
            return {}
        return {k: v for k, v in value.items() if isinstance(v, str)}

    def iter_dependencies(
        self,
        *,
        include_dev: bool = False,
        include_optional: bool = False,
    ) -> Iterator[DeclaredDependency]:
        """Yield ``(name, declared_range, class)`` in manifest order.

        ``dependencies`` are always included; ``devDependencies`` and
        ``optionalDependencies`` only on request. A package declared in
        several sections is yielded once, for the first section.
        """
        wanted = [DependencyClass.DIRECT]
        if include_dev:
            wanted.append(DependencyClass.DEV)
        if include_optional:
            wanted.append(DependencyClass.OPTIONAL)

        seen = set()
        for dependency_class in wanted:
            for name, declared in self.section(dependency_class.manifest_field).items():
                if name in seen:
                    continue
                seen.add(name)
                yield name, declared, dependency_class

    def declared_versions(self) -> Dict[str, str]:
        """Merge all three sections into name → declared range.

        Later sections override earlier ones (``dependencies`` <
        ``devDependencies`` < ``optionalDependencies``).
        """
        merged: Dict[str, str] = {}
        for field_name in DEPENDENCY_FIELDS:
            merged.update(self.section(field_name))
        return merged

    def find_field(self, name: str) -> Optional[str]:
        """Return the first section that declares ``name``."""
        for field_name in DEPENDENCY_FIELDS:
            if name in self.section(field_name):
                return field_name
        return None

    def set_version(self, field_name: str, name: str, value: str) -> None:
        """Write ``value`` for ``name`` into ``field_name``.

        The section is created when missing; an existing entry keeps its
        position.
        """
        section = self.data.get(field_name)
        if not isinstance(section, dict):
            section = {}
            self.data[field_name] = section
        section[name] = value

    def to_json(self) -> str:
        """Serialize with two-space indentation and a trailing newline."""
        return json.dumps(self.data, indent=2, ensure_ascii=False) + "\n"


def read_manifest(project_dir: Path) -> Manifest:
    """Load ``package.json`` from ``project_dir``.

    Malformed dependency sections are reported with a warning and read as
    empty; they are written back untouched.

    Raises:
        ManifestNotFoundError: No ``package.json`` in ``project_dir``.
        ManifestParseError: The file is unreadable or not a JSON object.
    """
    path = Path(project_dir) / MANIFEST_FILE
    if not path.is_file():
        raise ManifestNotFoundError(
            "No package.json found in the project directory",
            file_path=str(path),
        )

    try:
        data = json.loads(safe_read_file(path))
    except FileOperationError as exc:
        raise ManifestParseError(
            f"Failed to read package.json: {exc.message}",
            file_path=str(path),
        ) from exc
    except json.JSONDecodeError as exc:
        raise ManifestParseError(
            f"Failed to read package.json: {exc}",
            file_path=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise ManifestParseError(
            "Failed to read package.json: expected a JSON object",
            file_path=str(path),
        )

    for field_name in DEPENDENCY_FIELDS:
        section = data.get(field_name)
        if section is None:
            continue
        if not isinstance(section, dict):
            logger.warning("Ignoring %s in %s: not an object", field_name, path)
            continue
        malformed = [k for k, v in section.items() if not isinstance(v, str)]
        if malformed:
            logger.warning(
                "Ignoring non-string entries in %s: %s",
                field_name,
                ", ".join(malformed),
            )

    logger.debug("Loaded %s", path)
    return Manifest(path=path, data=data)


def write_manifest(manifest: Manifest) -> None:
    """Atomically write ``manifest`` back to disk.

    Raises:
        FileOperationError: The file could not be written.
    """
    safe_write_file(manifest.path, manifest.to_json())
    logger.info("Wrote %s", manifest.path)


def detect_package_manager(project_dir: Path) -> str:
    """Infer the package manager from the lockfile in ``project_dir``.

    ``pnpm-lock.yaml`` wins over ``yarn.lock``, which wins over
    ``package-lock.json``; without any lockfile npm is assumed.
    """
    root = Path(project_dir)
    for lockfile, manager in LOCKFILE_MANAGERS:
        if (root / lockfile).is_file():
            logger.debug("Found %s, using %s", lockfile, manager)
            return manager
    return DEFAULT_PACKAGE_MANAGER


def install_command(manager: str) -> str:
    """Return the install command line for ``manager``."""
    return f"{manager} install"
