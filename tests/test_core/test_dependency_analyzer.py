"""Unit tests for react_compat.core.dependency_analyzer.

The registry is replaced by an in-memory store so every scenario is
deterministic and offline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from react_compat.core.manifest import Manifest
from react_compat.core.data_store import NpmDataStore
from react_compat.core.dependency_analyzer import DependencyAnalyzer, is_react_related
from react_compat.exceptions import NetworkError, PackageNotFoundError
from react_compat.models import (
    CompanionUpgrade,
    CompatibilityStatus,
    DependencyClass,
    VersionCatalog,
    VersionRecord,
)

UP_TO_18 = "^16.8.0 || ^17.0.0 || ^18.0.0"
UP_TO_19 = "^16.8.0 || ^17.0.0 || ^18.0.0 || ^19.0.0"


# ============================================================================
# Fixtures
# ============================================================================


def _record(version: str, react: str = None, **peers: str) -> VersionRecord:
    peer_dependencies = dict(peers)
    if react:
        peer_dependencies["react"] = react
    return VersionRecord(version, peer_dependencies=peer_dependencies)


@pytest.fixture
def catalogs() -> Dict[str, VersionCatalog]:
    """Registry contents keyed by package name."""
    return {
        "react-select": VersionCatalog(
            name="react-select",
            latest_tag="5.10.2",
            versions={
                v.version: v
                for v in (
                    _record("3.0.4", "^16.8.0"),
                    _record("5.0.0", UP_TO_18),
                    _record("5.9.0", UP_TO_19),
                    _record("5.10.2", UP_TO_19),
                )
            },
        ),
        "react-final-form": VersionCatalog(
            name="react-final-form",
            latest_tag="7.0.0",
            versions={
                v.version: v
                for v in (
                    _record("6.5.9", "^16.8.0 || ^17.0.0 || ^18.0.0", **{"final-form": "^4.20.4"}),
                    _record("7.0.0", UP_TO_19, **{"final-form": "^4.20.10"}),
                )
            },
        ),
        "react-redux": VersionCatalog(
            name="react-redux",
            latest_tag="9.2.0",
            versions={"9.2.0": _record("9.2.0", "^18.0 || ^19")},
        ),
        "final-form": VersionCatalog(
            name="final-form",
            latest_tag="4.20.10",
            versions={"4.20.0": _record("4.20.0"), "4.20.10": _record("4.20.10")},
        ),
        "react-legacy": VersionCatalog(
            name="react-legacy",
            latest_tag="2.0.0",
            versions={
                "1.0.0": _record("1.0.0", "^15.0.0"),
                "2.0.0": _record("2.0.0", "^16.0.0"),
            },
        ),
        "react-router-dom": VersionCatalog(
            name="react-router-dom",
            latest_tag="6.0.0",
            versions={"6.0.0": _record("6.0.0")},
        ),
        "lodash": VersionCatalog(
            name="lodash",
            latest_tag="4.17.21",
            versions={"4.17.21": _record("4.17.21")},
        ),
    }


@pytest.fixture
def mock_store(catalogs: Dict[str, VersionCatalog]) -> MagicMock:
    """A data store serving ``catalogs`` and failing for anything else."""

    async def get_package_data(name: str) -> VersionCatalog:
        if name == "offline-pkg":
            raise NetworkError("Request failed after 4 attempts")
        if name not in catalogs:
            raise PackageNotFoundError(f"Package '{name}' not found", package_name=name)
        return catalogs[name]

    store = MagicMock(spec=NpmDataStore)
    store.get_package_data = AsyncMock(side_effect=get_package_data)
    store.prefetch_packages = AsyncMock()
    return store


def _manifest(**sections: Dict[str, str]) -> Manifest:
    data = {"name": "app"}
    data.update(sections)
    return Manifest(path=Path("/project/package.json"), data=data)


# ============================================================================
# is_react_related
# ============================================================================


@pytest.mark.unit
class TestIsReactRelated:
    """Tests for the report inclusion rule."""

    def test_peer_range_qualifies(self) -> None:
        assert is_react_related("anything", "^18.0.0") is True

    @pytest.mark.parametrize(
        "name", ["react-scripts", "react-router", "react-router-dom", "@types/react"]
    )
    def test_allow_list_and_prefix(self, name: str) -> None:
        assert is_react_related(name, None) is True

    def test_unrelated_package(self) -> None:
        assert is_react_related("lodash", None) is False
        assert is_react_related("reactstrap", None) is False

    def test_extra_packages(self) -> None:
        assert is_react_related("@acme/ui", None, ["@acme/ui"]) is True
        assert is_react_related("@acme/ui-icons", None, ["@acme/ui"]) is True


# ============================================================================
# DependencyAnalyzer.analyze
# ============================================================================


@pytest.mark.unit
class TestAnalyze:
    """Tests for single-dependency analysis."""

    @pytest.mark.asyncio
    async def test_incompatible_with_nearest_and_latest(self, mock_store: MagicMock) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-select", "^3.0.4", "19.0.0", DependencyClass.DIRECT, {}
        )

        assert record.status is CompatibilityStatus.INCOMPATIBLE
        assert record.installed_version == "3.0.4"
        assert record.peer_range == "^16.8.0"
        assert record.nearest_compatible_version == "5.9.0"
        assert record.latest_version == "5.10.2"
        assert record.required_upgrades_for_nearest == ()

    @pytest.mark.asyncio
    async def test_compatible(self, mock_store: MagicMock) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-redux", "^9.2.0", "19.0.0", DependencyClass.DIRECT, {}
        )

        assert record.status is CompatibilityStatus.COMPATIBLE
        assert record.nearest_compatible_version is None
        assert record.latest_version == "9.2.0"

    @pytest.mark.asyncio
    async def test_no_peer_range_is_unknown(self, mock_store: MagicMock) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-router-dom", "^6.0.0", "19.0.0", DependencyClass.DIRECT, {}
        )

        assert record.status is CompatibilityStatus.UNKNOWN
        assert record.peer_range is None

    @pytest.mark.asyncio
    async def test_companions_for_both_targets(self, mock_store: MagicMock) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-final-form",
            "^6.5.9",
            "19.0.0",
            DependencyClass.DIRECT,
            {"react-final-form": "^6.5.9", "final-form": "4.20.0"},
        )

        expected = (CompanionUpgrade("final-form", "4.20.0", "^4.20.10"),)
        assert record.nearest_compatible_version == "7.0.0"
        assert record.required_upgrades_for_nearest == expected
        assert record.required_upgrades_for_latest == expected

    @pytest.mark.asyncio
    async def test_no_compatible_release_falls_back_to_catalog_latest(
        self, mock_store: MagicMock
    ) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-legacy", "1.0.0", "19.0.0", DependencyClass.DEV, {}
        )

        assert record.status is CompatibilityStatus.INCOMPATIBLE
        assert record.nearest_compatible_version is None
        assert record.latest_version == "2.0.0"
        assert record.dependency_class is DependencyClass.DEV

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["offline-pkg", "unpublished-pkg"])
    async def test_registry_failure_degrades_to_unknown(
        self, mock_store: MagicMock, name: str
    ) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(name, "^1.0.0", "19.0.0", DependencyClass.DIRECT, {})

        assert record.status is CompatibilityStatus.UNKNOWN
        assert record.latest_version == "unknown"
        assert record.installed_version == "1.0.0"

    @pytest.mark.asyncio
    async def test_uninterpretable_declared_version(self, mock_store: MagicMock) -> None:
        analyzer = DependencyAnalyzer(mock_store)
        record = await analyzer.analyze(
            "react-select", "latest", "19.0.0", DependencyClass.DIRECT, {}
        )

        assert record.status is CompatibilityStatus.UNKNOWN
        assert record.latest_version == "5.10.2"


# ============================================================================
# DependencyAnalyzer.analyze_project
# ============================================================================


@pytest.mark.unit
class TestAnalyzeProject:
    """Tests for whole-project analysis."""

    @pytest.mark.asyncio
    async def test_filters_and_keeps_manifest_order(self, mock_store: MagicMock) -> None:
        manifest = _manifest(
            dependencies={
                "react": "^18.2.0",
                "react-dom": "^18.2.0",
                "react-select": "^3.0.4",
                "lodash": "^4.17.21",
                "react-redux": "^9.2.0",
            },
            devDependencies={"react-legacy": "1.0.0"},
        )

        result = await DependencyAnalyzer(mock_store).analyze_project(manifest, "19.0.0")

        assert result.target_version == "19.0.0"
        assert [r.name for r in result.dependencies] == ["react-select", "react-redux"]
        mock_store.prefetch_packages.assert_awaited_once_with(
            ["react-select", "lodash", "react-redux"]
        )

    @pytest.mark.asyncio
    async def test_include_dev(self, mock_store: MagicMock) -> None:
        manifest = _manifest(
            dependencies={"react-redux": "^9.2.0"},
            devDependencies={"react-legacy": "1.0.0"},
        )

        result = await DependencyAnalyzer(mock_store).analyze_project(
            manifest, "19.0.0", include_dev=True
        )

        assert [r.name for r in result.dependencies] == ["react-redux", "react-legacy"]
        assert result.has_incompatible is True

    @pytest.mark.asyncio
    async def test_extra_react_packages(self, mock_store: MagicMock) -> None:
        manifest = _manifest(dependencies={"lodash": "^4.17.21"})

        result = await DependencyAnalyzer(
            mock_store, extra_react_packages=["lodash"]
        ).analyze_project(manifest, "19.0.0")

        assert [r.name for r in result.dependencies] == ["lodash"]
        assert result.dependencies[0].status is CompatibilityStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_failing_registry_is_queried_once_per_package(self) -> None:
        http = MagicMock()
        http.get = AsyncMock(side_effect=NetworkError("unreachable"))
        manifest = _manifest(dependencies={"react-select": "^3.0.4"})

        result = await DependencyAnalyzer(NpmDataStore(http)).analyze_project(
            manifest, "19.0.0"
        )

        assert http.get.await_count == 1
        assert result.dependencies[0].status is CompatibilityStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_empty_manifest(self, mock_store: MagicMock) -> None:
        result = await DependencyAnalyzer(mock_store).analyze_project(_manifest(), "19.0.0")
        assert result.dependencies == []
        assert result.has_incompatible is False
