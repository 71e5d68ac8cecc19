"""
Core functionality exports for react-compat-check.

    from react_compat.core import DependencyAnalyzer, NpmDataStore
"""

from __future__ import annotations

from react_compat.core.data_store import NpmDataStore
from react_compat.core.installer import run_install
from react_compat.core.react_versions import ReactVersionResolver
from react_compat.core.dependency_analyzer import DependencyAnalyzer, is_react_related
from react_compat.core.companion_resolver import (
    CompanionResolution,
    CompanionResolver,
    find_required_upgrades,
)
from react_compat.core.fix_selector import (
    available_actions,
    select_fixes,
    selection_for_action,
)
from react_compat.core.upgrade_planner import apply_plan, build_plan, collect_companions
from react_compat.core.manifest import (
    Manifest,
    detect_package_manager,
    install_command,
    read_manifest,
    write_manifest,
)
from react_compat.core.range_matcher import evaluate, extract_installed_version
from react_compat.core.version_search import (
    find_closest_record,
    find_latest_compatible,
    find_nearest_compatible,
)

__all__ = [
    "NpmDataStore",
    "ReactVersionResolver",
    "DependencyAnalyzer",
    "is_react_related",
    "CompanionResolution",
    "CompanionResolver",
    "find_required_upgrades",
    "available_actions",
    "select_fixes",
    "selection_for_action",
    "apply_plan",
    "build_plan",
    "collect_companions",
    "Manifest",
    "detect_package_manager",
    "install_command",
    "read_manifest",
    "write_manifest",
    "run_install",
    "evaluate",
    "extract_installed_version",
    "find_closest_record",
    "find_latest_compatible",
    "find_nearest_compatible",
]
