"""
Registry metadata models for react-compat-check.

A :class:`VersionCatalog` is the parsed form of one npm packument: every
published version with the dependency and peer maps that matter for React
compatibility. Catalogs are built once by the data store and shared
read-only by every consumer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

import semantic_version

from react_compat.constants import REACT_PACKAGE, UNKNOWN_VERSION

ParsedVersion = Tuple[str, semantic_version.Version]


@dataclass(frozen=True)
class VersionRecord:
    """Dependency metadata for a single published version.

    Args:
        version: Version string exactly as published.
        dependencies: Declared ``dependencies`` (name → range).
        peer_dependencies: Declared ``peerDependencies`` (name → range).
    """

    version: str
    dependencies: Mapping[str, str] = field(default_factory=dict)
    peer_dependencies: Mapping[str, str] = field(default_factory=dict)

    @property
    def peer_requirement(self) -> Optional[str]:
        """Return the ``react`` peer range, or ``None`` when undeclared."""
        return self.peer_dependencies.get(REACT_PACKAGE)

    def required_packages(self) -> Dict[str, str]:
        """Return dependencies merged with peer dependencies.

        Peer ranges win when a package appears in both maps.
        """
        merged = dict(self.dependencies)
        merged.update(self.peer_dependencies)
        return merged


@dataclass
class VersionCatalog:
    """All published versions of one package.

    Attributes:
        name: Package name as requested from the registry.
        latest_tag: Version carried by the ``latest`` dist-tag, if any.
        versions: Maps version string → :class:`VersionRecord`.
    """

    name: str
    latest_tag: Optional[str] = None
    versions: Dict[str, VersionRecord] = field(default_factory=dict)

    _parsed: Optional[List[ParsedVersion]] = field(
        default=None, init=False, repr=False, compare=False
    )

    def get(self, version: str) -> Optional[VersionRecord]:
        """Return the record for an exact version string."""
        return self.versions.get(version)

    def parsed_versions(self) -> List[ParsedVersion]:
        """Return stable ``(raw, parsed)`` pairs sorted newest first.

        Pre-releases and strings that are not valid semantic versions are
        skipped.
        """
        if self._parsed is None:
            parsed: List[ParsedVersion] = []
            for raw in self.versions:
                try:
                    version = semantic_version.Version(raw)
                except ValueError:
                    continue
                if not version.prerelease:
                    parsed.append((raw, version))
            parsed.sort(key=lambda item: item[1], reverse=True)
            self._parsed = parsed

        return list(self._parsed)

    @property
    def latest_version(self) -> str:
        """Return the ``latest`` dist-tag, else the newest stable version.

        Falls back to ``"unknown"`` when the package publishes neither.
        """
        if self.latest_tag:
            return self.latest_tag
        stable = self.parsed_versions()
        if stable:
            return stable[0][0]
        return UNKNOWN_VERSION
