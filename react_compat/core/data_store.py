"""npm registry data store for react-compat-check.

Provides an async-safe, per-run cache of package metadata so that the
analyzer, the companion resolver and the React version resolver share a
single HTTP fetch per package, failures included.

Typical usage::

    from react_compat.utils.http import HTTPClient
    from react_compat.core.data_store import NpmDataStore

    async with HTTPClient() as client:
        store = NpmDataStore(client)
        catalog = await store.get_package_data("react-redux")
        print(catalog.latest_version)       # e.g. "9.2.0"
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote
from typing import Any, Dict, List, Mapping

from react_compat.utils.http import HTTPClient
from react_compat.utils.logger import get_logger
from react_compat.models.catalog import VersionCatalog, VersionRecord
from react_compat.constants import DEFAULT_CONCURRENCY, NPM_REGISTRY_URL
from react_compat.exceptions import PackageNotFoundError, RegistryError

logger = get_logger("data_store")

# Public API
__all__ = ["NpmDataStore"]


class NpmDataStore:
    """Async-safe cache of npm packuments, scoped to one run.

    Each package name triggers **at most one** request to
    ``{registry}/{name}`` per run: the first caller starts an
    :class:`asyncio.Task` and every later or concurrent caller awaits that
    same task, so they all see the same catalog or the same exception. A
    :class:`asyncio.Semaphore` bounds the number of distinct packages being
    fetched at once.

    Args:
        http_client: A pre-configured :class:`HTTPClient` instance (owns
            the connection pool).
        registry_url: Registry base URL. Defaults to the public npm registry.
        concurrent_limit: Maximum number of registry fetches in flight.

    Example::

        async with HTTPClient() as client:
            store = NpmDataStore(client, concurrent_limit=5)
            await store.prefetch_packages(["react-redux", "react-select"])
            redux = await store.get_package_data("react-redux")
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        registry_url: str = NPM_REGISTRY_URL,
        concurrent_limit: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.http_client = http_client
        self.registry_url = registry_url.rstrip("/")
        self._semaphore = asyncio.Semaphore(concurrent_limit)

        self._tasks: Dict[str, "asyncio.Future[VersionCatalog]"] = {}

    # ------------------------------------------------------------------
    # Public async accessors
    # ------------------------------------------------------------------

    async def get_package_data(self, name: str) -> VersionCatalog:
        """Fetch (or return cached) metadata for ``name``.

        Args:
            name: npm package name, scoped names included.

        Returns:
            The package's :class:`VersionCatalog`. Concurrent callers for the
            same name receive the same object.

        Raises:
            PackageNotFoundError: The registry has no such package.
            RegistryError: The registry response could not be used.
            NetworkError: The registry could not be reached.
        """
        key = name.strip()

        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key))
            self._tasks[key] = task
        return await task

    async def prefetch_packages(self, names: List[str]) -> None:
        """Concurrently warm the cache for a batch of packages.

        Errors for individual packages are logged at DEBUG level so that
        one bad name does not prevent the rest from being cached; the same
        failure is raised again, without a new request, when that package
        is requested later.
        """
        results = await asyncio.gather(
            *(self.get_package_data(name) for name in names),
            return_exceptions=True,
        )
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.debug("Prefetch failed for %s: %s", name, result)

    # ------------------------------------------------------------------
    # Public synchronous accessors (no I/O)
    # ------------------------------------------------------------------

    def package_url(self, name: str) -> str:
        """Return the packument URL, percent-encoding scoped names."""
        return f"{self.registry_url}/{quote(name, safe='')}"

    # ------------------------------------------------------------------
    # Network helpers (private)
    # ------------------------------------------------------------------

    async def _load(self, name: str) -> VersionCatalog:
        async with self._semaphore:
            data = await self._fetch_from_registry(name)

        catalog = self._parse_package_data(name, data)
        logger.debug("Cached %s (%d versions)", name, len(catalog.versions))
        return catalog

    async def _fetch_from_registry(self, name: str) -> Dict[str, Any]:
        """GET the packument and return the decoded JSON object.

        Raises:
            PackageNotFoundError: On 404.
            RegistryError: On any other non-200 status or a body that is not
                a JSON object.
        """
        url = self.package_url(name)
        try:
            response = await self.http_client.get(
                url, headers={"Accept": "application/json"}
            )
        except PackageNotFoundError as exc:
            raise PackageNotFoundError(
                f"Package '{name}' not found in registry",
                package_name=name,
                url=url,
                status_code=404,
            ) from exc

        if response.status_code != 200:
            raise RegistryError(
                f"Registry returned status {response.status_code} for '{name}'",
                package_name=name,
                url=url,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise RegistryError(
                f"Invalid JSON from registry for '{name}'",
                package_name=name,
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise RegistryError(
                f"Expected a JSON object from registry for '{name}'",
                package_name=name,
                url=url,
            )
        return data

    # ------------------------------------------------------------------
    # Parsing helpers (private, synchronous)
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_package_data(name: str, data: Mapping[str, Any]) -> VersionCatalog:
        """Transform a raw packument into a :class:`VersionCatalog`.

        Version entries that are not objects are skipped; dependency maps
        keep only string → string entries.
        """
        dist_tags = data.get("dist-tags")
        latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None

        versions: Dict[str, VersionRecord] = {}
        raw_versions = data.get("versions")
        if isinstance(raw_versions, dict):
            for version, meta in raw_versions.items():
                if not isinstance(meta, dict):
                    continue
                versions[version] = VersionRecord(
                    version=version,
                    dependencies=_string_map(meta.get("dependencies")),
                    peer_dependencies=_string_map(meta.get("peerDependencies")),
                )

        return VersionCatalog(
            name=name,
            latest_tag=latest if isinstance(latest, str) else None,
            versions=versions,
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _string_map(value: Any) -> Dict[str, str]:
    """Keep only the string → string entries of a dependency map."""
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}
