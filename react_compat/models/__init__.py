"""
Unified data model exports for react-compat-check.

Example:
    >>> from react_compat.models import DependencyRecord, UpgradePlan
"""

from __future__ import annotations

from react_compat.models.catalog import VersionCatalog, VersionRecord
from react_compat.models.dependency import (
    AnalysisResult,
    CompanionUpgrade,
    CompatibilityStatus,
    DependencyClass,
    DependencyRecord,
)
from react_compat.models.upgrade import (
    FixPolicy,
    MainUpgrade,
    UpgradeAction,
    UpgradePlan,
    UpgradeSelection,
)

__all__ = [
    "VersionCatalog",
    "VersionRecord",
    "AnalysisResult",
    "CompanionUpgrade",
    "CompatibilityStatus",
    "DependencyClass",
    "DependencyRecord",
    "FixPolicy",
    "MainUpgrade",
    "UpgradeAction",
    "UpgradePlan",
    "UpgradeSelection",
]
