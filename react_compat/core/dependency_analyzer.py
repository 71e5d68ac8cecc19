"""React compatibility analysis for react-compat-check.

This module owns two responsibilities:

1. **Per-dependency analysis**: resolve the installed release of one
   package, evaluate its ``react`` peer range against the target, and for
   incompatible packages find the nearest and latest compatible releases
   together with the companion upgrades each would require.
2. **Project analysis**: run (1) concurrently for every declared dependency
   and keep the React-related ones.

All network I/O is routed through the shared
:class:`~react_compat.core.data_store.NpmDataStore` so that package metadata
is fetched at most once per run. Registry failures never escape: the
affected dependency is reported with status ``unknown``.

Typical usage::

    from react_compat.utils.http import HTTPClient
    from react_compat.core.data_store import NpmDataStore
    from react_compat.core.dependency_analyzer import DependencyAnalyzer

    async with HTTPClient() as http:
        store    = NpmDataStore(http)
        analyzer = DependencyAnalyzer(store)
        result   = await analyzer.analyze_project(manifest, "19.0.0")

        for record in result.incompatible:
            print(record.name, record.nearest_compatible_version)
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from react_compat.utils.logger import get_logger
from react_compat.exceptions import NetworkError
from react_compat.core.manifest import Manifest
from react_compat.core.data_store import NpmDataStore
from react_compat.core.companion_resolver import CompanionResolver
from react_compat.core.range_matcher import evaluate, extract_installed_version
from react_compat.core.version_search import (
    find_closest_record,
    find_latest_compatible,
    find_nearest_compatible,
)
from react_compat.models.dependency import (
    AnalysisResult,
    CompanionUpgrade,
    CompatibilityStatus,
    DependencyClass,
    DependencyRecord,
)
from react_compat.constants import (
    CORE_REACT_PACKAGES,
    REACT_RELATED_PACKAGES,
    UNKNOWN_VERSION,
)

logger = get_logger("dependency_analyzer")

# Public API
__all__ = ["DependencyAnalyzer", "is_react_related"]


def is_react_related(
    name: str,
    peer_range: Optional[str],
    extra_packages: Iterable[str] = (),
) -> bool:
    """Return True if a dependency belongs in the report.

    A package qualifies when its installed release declares a ``react``
    peer range, or when its name equals, or starts with ``<entry>-`` for,
    an entry of the built-in allow-list or ``extra_packages``.

    Example::

        >>> is_react_related("react-router-dom", None)
        True
        >>> is_react_related("lodash", None)
        False
    """
    if peer_range:
        return True
    for known in (*REACT_RELATED_PACKAGES, *extra_packages):
        if name == known or name.startswith(f"{known}-"):
            return True
    return False


class DependencyAnalyzer:
    """Checks dependencies against a target React version.

    Args:
        data_store: Shared registry cache.
        companion_resolver: Resolver for companion upgrades; one backed by
            ``data_store`` is created when omitted.
        extra_react_packages: Additional names treated as React-related.
    """

    def __init__(
        self,
        data_store: NpmDataStore,
        *,
        companion_resolver: Optional[CompanionResolver] = None,
        extra_react_packages: Sequence[str] = (),
    ) -> None:
        self.data_store = data_store
        self.companion_resolver = companion_resolver or CompanionResolver(data_store)
        self.extra_react_packages = tuple(extra_react_packages)

    async def analyze(
        self,
        package_name: str,
        declared_range: str,
        target_version: str,
        dependency_class: DependencyClass,
        declared_versions: Mapping[str, str],
    ) -> DependencyRecord:
        """Build the :class:`DependencyRecord` for one dependency.

        Args:
            package_name: Dependency to analyze.
            declared_range: Range declared in the manifest, e.g. ``"^8.1.3"``.
            target_version: React version to check against.
            dependency_class: Manifest section declaring the dependency.
            declared_versions: Every declared dependency of the project, used
                to compute companion upgrades.
        """
        installed = extract_installed_version(declared_range)

        try:
            catalog = await self.data_store.get_package_data(package_name)
        except NetworkError as exc:
            logger.warning("Could not analyze %s: %s", package_name, exc)
            return DependencyRecord(
                name=package_name,
                installed_version=installed,
                dependency_class=dependency_class,
                status=CompatibilityStatus.UNKNOWN,
                latest_version=UNKNOWN_VERSION,
            )

        record = find_closest_record(catalog, installed)
        if record is None:
            logger.info("%s: no published release matches %s", package_name, installed)
            return DependencyRecord(
                name=package_name,
                installed_version=installed,
                dependency_class=dependency_class,
                status=CompatibilityStatus.UNKNOWN,
                latest_version=catalog.latest_version,
            )

        peer_range = record.peer_requirement
        status = evaluate(target_version, peer_range)
        logger.debug(
            "%s@%s (react %s) → %s",
            package_name,
            record.version,
            peer_range,
            status.value,
        )

        if status is not CompatibilityStatus.INCOMPATIBLE:
            return DependencyRecord(
                name=package_name,
                installed_version=installed,
                dependency_class=dependency_class,
                status=status,
                peer_range=peer_range,
                latest_version=catalog.latest_version,
            )

        # ── Incompatible: look for a way out ─────────────────────────────
        nearest = find_nearest_compatible(catalog, installed, target_version)
        latest = find_latest_compatible(catalog, target_version) or catalog.latest_version

        nearest_companions, latest_companions = await asyncio.gather(
            self._companions(package_name, nearest, declared_versions),
            self._companions(package_name, latest, declared_versions),
        )

        return DependencyRecord(
            name=package_name,
            installed_version=installed,
            dependency_class=dependency_class,
            status=status,
            peer_range=peer_range,
            nearest_compatible_version=nearest,
            latest_version=latest,
            required_upgrades_for_nearest=nearest_companions,
            required_upgrades_for_latest=latest_companions,
        )

    async def analyze_project(
        self,
        manifest: Manifest,
        target_version: str,
        *,
        include_dev: bool = False,
        include_optional: bool = False,
    ) -> AnalysisResult:
        """Analyze every declared dependency of ``manifest``.

        ``react`` and ``react-dom`` are skipped. Dependencies are analyzed
        concurrently; the result keeps the React-related ones in manifest
        order.
        """
        declared_versions = manifest.declared_versions()
        entries = [
            entry
            for entry in manifest.iter_dependencies(
                include_dev=include_dev,
                include_optional=include_optional,
            )
            if entry[0] not in CORE_REACT_PACKAGES
        ]
        logger.info(
            "Analyzing %d dependencies against React %s",
            len(entries),
            target_version,
        )

        await self.data_store.prefetch_packages([name for name, _, _ in entries])

        records = await asyncio.gather(
            *(
                self.analyze(name, declared, target_version, cls, declared_versions)
                for name, declared, cls in entries
            )
        )

        related = [
            r
            for r in records
            if is_react_related(r.name, r.peer_range, self.extra_react_packages)
        ]
        logger.info("%d React-related dependencies found", len(related))
        return AnalysisResult(target_version=target_version, dependencies=related)

    async def _companions(
        self,
        package_name: str,
        target: Optional[str],
        declared_versions: Mapping[str, str],
    ) -> Tuple[CompanionUpgrade, ...]:
        if not target or target == UNKNOWN_VERSION:
            return ()
        resolution = await self.companion_resolver.resolve(
            package_name, target, declared_versions
        )
        if not resolution.determined:
            logger.info(
                "Companion upgrades for %s@%s undetermined: %s",
                package_name,
                target,
                resolution.reason,
            )
        return resolution.upgrades
