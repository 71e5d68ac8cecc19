"""
Analysis result models for react-compat-check.

These types describe the outcome of checking one dependency, and a whole
project, against a target React version. Records are immutable once built;
the JSON helpers produce the documented report layout.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from react_compat.constants import DEPENDENCY_FIELDS


class CompatibilityStatus(Enum):
    """Whether a dependency supports the target React version.

    ``UNKNOWN`` means no peer range was declared or it could not be parsed;
    it is never treated as incompatible.
    """

    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"
    UNKNOWN = "unknown"


class DependencyClass(Enum):
    """Which manifest section declares a dependency."""

    DIRECT = "direct"
    DEV = "dev"
    OPTIONAL = "optional"

    @property
    def manifest_field(self) -> str:
        """Return the ``package.json`` key for this class."""
        return _CLASS_FIELDS[self]


_CLASS_FIELDS = dict(zip(DependencyClass, DEPENDENCY_FIELDS))


@dataclass(frozen=True)
class CompanionUpgrade:
    """A declared package that must move for a chosen target to install cleanly.

    Args:
        name: Companion package name.
        current_version: Version currently declared by the project (prefix
            stripped).
        required_range: Range the target version requires, verbatim.
    """

    name: str
    current_version: str
    required_range: str

    def to_json(self) -> Dict[str, str]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "currentVersion": self.current_version,
            "requiredVersion": self.required_range,
        }


@dataclass(frozen=True)
class DependencyRecord:
    """Compatibility verdict and upgrade options for one dependency.

    Args:
        name: Package name.
        installed_version: Declared version with range operators stripped.
        dependency_class: Manifest section declaring the package.
        status: Verdict against the target React version.
        peer_range: ``react`` peer range of the installed release, if any.
        nearest_compatible_version: Lowest stable release above the
            installed one that supports the target, if any.
        latest_version: Latest compatible release for incompatible packages
            (falling back to the registry's latest), otherwise the registry's
            latest; ``"unknown"`` when the registry could not be reached.
        required_upgrades_for_nearest: Companions needed by the nearest
            compatible release.
        required_upgrades_for_latest: Companions needed by ``latest_version``.
    """

    name: str
    installed_version: str
    dependency_class: DependencyClass
    status: CompatibilityStatus
    latest_version: str
    peer_range: Optional[str] = None
    nearest_compatible_version: Optional[str] = None
    required_upgrades_for_nearest: Tuple[CompanionUpgrade, ...] = ()
    required_upgrades_for_latest: Tuple[CompanionUpgrade, ...] = ()

    @property
    def is_incompatible(self) -> bool:
        return self.status is CompatibilityStatus.INCOMPATIBLE

    @property
    def has_required_upgrades(self) -> bool:
        """Return True if either upgrade path needs companion upgrades."""
        return bool(self.required_upgrades_for_nearest or self.required_upgrades_for_latest)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "installedVersion": self.installed_version,
            "status": self.status.value,
            "supportedReactRange": self.peer_range,
            "nearestCompatibleVersion": self.nearest_compatible_version,
            "latestVersion": self.latest_version,
            "dependencyType": self.dependency_class.manifest_field,
            "requiredUpgradesForNearest": [
                c.to_json() for c in self.required_upgrades_for_nearest
            ],
            "requiredUpgradesForLatest": [
                c.to_json() for c in self.required_upgrades_for_latest
            ],
        }


@dataclass
class AnalysisResult:
    """Outcome of analyzing a whole project.

    Attributes:
        target_version: React version every dependency was checked against.
        dependencies: React-related records in manifest order.
    """

    target_version: str
    dependencies: List[DependencyRecord] = field(default_factory=list)

    def with_status(self, status: CompatibilityStatus) -> List[DependencyRecord]:
        """Return records carrying ``status``, in manifest order."""
        return [d for d in self.dependencies if d.status is status]

    @property
    def incompatible(self) -> List[DependencyRecord]:
        return self.with_status(CompatibilityStatus.INCOMPATIBLE)

    @property
    def has_incompatible(self) -> bool:
        return any(d.is_incompatible for d in self.dependencies)

    @property
    def has_unknown(self) -> bool:
        return any(d.status is CompatibilityStatus.UNKNOWN for d in self.dependencies)

    @property
    def has_required_upgrades(self) -> bool:
        return any(d.has_required_upgrades for d in self.dependencies)

    def summary(self) -> Dict[str, int]:
        """Return counts keyed as in the JSON report."""
        return {
            "total": len(self.dependencies),
            "compatible": len(self.with_status(CompatibilityStatus.COMPATIBLE)),
            "incompatible": len(self.incompatible),
            "withRequiredUpgrades": sum(
                1 for d in self.dependencies if d.has_required_upgrades
            ),
        }

    def to_json(self) -> Dict[str, Any]:
        """Return the machine-readable report."""
        return {
            "targetReactVersion": self.target_version,
            "summary": self.summary(),
            "hasIncompatible": self.has_incompatible,
            "hasRequiredUpgrades": self.has_required_upgrades,
            "dependencies": [d.to_json() for d in self.dependencies],
        }
