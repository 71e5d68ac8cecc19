"""Unit tests for react_compat.core.data_store module.

This test suite covers the npm registry data store: packument parsing,
per-run caching, at-most-one in-flight fetch per package, prefetching,
scoped-name URL encoding and the error mapping for registry responses.
"""

from __future__ import annotations

import pytest
import asyncio
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

from react_compat.core.data_store import NpmDataStore, _string_map
from react_compat.exceptions import NetworkError, PackageNotFoundError, RegistryError
from react_compat.utils.http import HTTPClient


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_http_client() -> MagicMock:
    """Create a mock HTTPClient for testing.

    Returns:
        Mock HTTPClient with configurable response behavior.
    """
    return MagicMock(spec=HTTPClient)


@pytest.fixture
def sample_packument() -> Dict[str, Any]:
    """Create a sample npm packument.

    Returns:
        Dict mimicking ``GET https://registry.npmjs.org/react-redux``.
    """
    return {
        "name": "react-redux",
        "dist-tags": {"latest": "9.2.0", "next": "10.0.0-alpha.1"},
        "versions": {
            "8.1.3": {
                "dependencies": {"hoist-non-react-statics": "^3.3.2"},
                "peerDependencies": {"react": "^16.8 || ^17.0 || ^18.0", "redux": "^4"},
            },
            "9.2.0": {
                "dependencies": {"use-sync-external-store": "^1.4.0"},
                "peerDependencies": {"react": "^18.0 || ^19", "redux": "^5.0.0"},
            },
            "10.0.0-alpha.1": {"peerDependencies": {"react": "^19"}},
            "broken": "not an object",
        },
    }


def _response(status_code: int = 200, payload: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "" if payload is None else str(payload)
    return response


# ============================================================================
# Parsing
# ============================================================================


@pytest.mark.unit
class TestParsePackageData:
    """Tests for NpmDataStore._parse_package_data."""

    def test_parses_versions_and_tags(self, sample_packument: Dict[str, Any]) -> None:
        catalog = NpmDataStore._parse_package_data("react-redux", sample_packument)

        assert catalog.name == "react-redux"
        assert catalog.latest_tag == "9.2.0"
        assert set(catalog.versions) == {"8.1.3", "9.2.0", "10.0.0-alpha.1"}

        record = catalog.versions["9.2.0"]
        assert record.peer_requirement == "^18.0 || ^19"
        assert record.dependencies == {"use-sync-external-store": "^1.4.0"}

    def test_missing_sections(self) -> None:
        """Edge case: a packument without tags or versions is still usable."""
        catalog = NpmDataStore._parse_package_data("ghost", {})

        assert catalog.latest_tag is None
        assert catalog.versions == {}
        assert catalog.latest_version == "unknown"

    def test_non_string_tag_ignored(self) -> None:
        catalog = NpmDataStore._parse_package_data(
            "odd", {"dist-tags": {"latest": 3}, "versions": {}}
        )
        assert catalog.latest_tag is None

    def test_string_map_drops_non_strings(self) -> None:
        assert _string_map({"a": "^1.0.0", "b": 2, "c": None}) == {"a": "^1.0.0"}
        assert _string_map(["not", "a", "map"]) == {}


# ============================================================================
# URLs
# ============================================================================


@pytest.mark.unit
class TestPackageUrl:
    """Tests for registry URL construction."""

    def test_plain_name(self, mock_http_client: MagicMock) -> None:
        store = NpmDataStore(mock_http_client)
        assert store.package_url("react-redux") == "https://registry.npmjs.org/react-redux"

    def test_scoped_name_is_encoded(self, mock_http_client: MagicMock) -> None:
        store = NpmDataStore(mock_http_client)
        assert (
            store.package_url("@types/react")
            == "https://registry.npmjs.org/%40types%2Freact"
        )

    def test_custom_registry_trailing_slash(self, mock_http_client: MagicMock) -> None:
        store = NpmDataStore(mock_http_client, registry_url="https://npm.example.com/")
        assert store.package_url("x") == "https://npm.example.com/x"


# ============================================================================
# Fetching
# ============================================================================


@pytest.mark.unit
class TestGetPackageData:
    """Tests for NpmDataStore.get_package_data async fetching."""

    @pytest.mark.asyncio
    async def test_fetch_success(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get = AsyncMock(return_value=_response(200, sample_packument))

        store = NpmDataStore(mock_http_client)
        catalog = await store.get_package_data("react-redux")

        assert catalog.latest_version == "9.2.0"
        mock_http_client.get.assert_awaited_once_with(
            "https://registry.npmjs.org/react-redux",
            headers={"Accept": "application/json"},
        )

    @pytest.mark.asyncio
    async def test_fetch_caches_result(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get = AsyncMock(return_value=_response(200, sample_packument))

        store = NpmDataStore(mock_http_client)
        first = await store.get_package_data("react-redux")
        second = await store.get_package_data("react-redux")

        assert first is second
        assert mock_http_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_deduplicated(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        """Concurrent callers for one name share a single fetch and object."""

        async def slow_get(*args: Any, **kwargs: Any) -> MagicMock:
            await asyncio.sleep(0.01)
            return _response(200, sample_packument)

        mock_http_client.get = AsyncMock(side_effect=slow_get)

        store = NpmDataStore(mock_http_client)
        results = await asyncio.gather(
            *(store.get_package_data("react-redux") for _ in range(5))
        )

        assert all(r is results[0] for r in results)
        assert mock_http_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_failures_deduplicated(
        self, mock_http_client: MagicMock
    ) -> None:
        """Concurrent callers share one failing fetch and the same error."""

        async def slow_failure(url: str, **kwargs: Any) -> MagicMock:
            await asyncio.sleep(0.01)
            raise NetworkError("unreachable", url=url)

        mock_http_client.get = AsyncMock(side_effect=slow_failure)

        store = NpmDataStore(mock_http_client)
        results = await asyncio.gather(
            *(store.get_package_data("react-select") for _ in range(3)),
            return_exceptions=True,
        )

        assert all(isinstance(r, NetworkError) for r in results)
        assert all(r is results[0] for r in results)
        assert mock_http_client.get.await_count == 1

    @pytest.mark.asyncio
    async def test_404_raises_package_not_found(self, mock_http_client: MagicMock) -> None:
        mock_http_client.get = AsyncMock(
            side_effect=PackageNotFoundError("Resource not found", status_code=404)
        )

        store = NpmDataStore(mock_http_client)
        with pytest.raises(PackageNotFoundError) as exc_info:
            await store.get_package_data("does-not-exist")

        assert exc_info.value.package_name == "does-not-exist"

    @pytest.mark.asyncio
    async def test_non_200_raises_registry_error(self, mock_http_client: MagicMock) -> None:
        mock_http_client.get = AsyncMock(return_value=_response(204))

        store = NpmDataStore(mock_http_client)
        with pytest.raises(RegistryError) as exc_info:
            await store.get_package_data("react-redux")

        assert exc_info.value.status_code == 204

    @pytest.mark.asyncio
    async def test_invalid_json_raises_registry_error(
        self, mock_http_client: MagicMock
    ) -> None:
        response = _response(200)
        response.json.side_effect = ValueError("Expecting value")
        mock_http_client.get = AsyncMock(return_value=response)

        store = NpmDataStore(mock_http_client)
        with pytest.raises(RegistryError, match="Invalid JSON"):
            await store.get_package_data("react-redux")

    @pytest.mark.asyncio
    async def test_non_object_body_raises_registry_error(
        self, mock_http_client: MagicMock
    ) -> None:
        mock_http_client.get = AsyncMock(return_value=_response(200, ["a", "list"]))

        store = NpmDataStore(mock_http_client)
        with pytest.raises(RegistryError, match="JSON object"):
            await store.get_package_data("react-redux")

    @pytest.mark.asyncio
    async def test_failed_fetch_is_not_repeated(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get = AsyncMock(
            side_effect=[NetworkError("boom"), _response(200, sample_packument)]
        )

        store = NpmDataStore(mock_http_client)
        with pytest.raises(NetworkError):
            await store.get_package_data("react-redux")
        with pytest.raises(NetworkError, match="boom"):
            await store.get_package_data("react-redux")

        assert mock_http_client.get.await_count == 1


@pytest.mark.unit
class TestPrefetchPackages:
    """Tests for NpmDataStore.prefetch_packages."""

    @pytest.mark.asyncio
    async def test_prefetch_multiple(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        mock_http_client.get = AsyncMock(return_value=_response(200, sample_packument))

        store = NpmDataStore(mock_http_client)
        await store.prefetch_packages(["a", "b", "c"])

        for name in ("a", "b", "c"):
            await store.get_package_data(name)
        assert mock_http_client.get.await_count == 3

    @pytest.mark.asyncio
    async def test_prefetch_silences_errors(
        self, mock_http_client: MagicMock, sample_packument: Dict[str, Any]
    ) -> None:
        async def get(url: str, **kwargs: Any) -> MagicMock:
            if url.endswith("/bad"):
                raise NetworkError("unreachable", url=url)
            return _response(200, sample_packument)

        mock_http_client.get = AsyncMock(side_effect=get)

        store = NpmDataStore(mock_http_client)
        await store.prefetch_packages(["good", "bad"])

        assert (await store.get_package_data("good")).latest_version == "9.2.0"
        with pytest.raises(NetworkError):
            await store.get_package_data("bad")
        # Neither lookup after the prefetch hits the registry again
        assert mock_http_client.get.await_count == 2

    @pytest.mark.asyncio
    async def test_prefetch_empty_list(self, mock_http_client: MagicMock) -> None:
        mock_http_client.get = AsyncMock()

        store = NpmDataStore(mock_http_client)
        await store.prefetch_packages([])

        mock_http_client.get.assert_not_awaited()
