"""Release search over a package's version catalog.

Given a :class:`~react_compat.models.catalog.VersionCatalog`, these helpers
answer the three questions the analyzer needs:

* which published release corresponds to the declared version
  (:func:`find_closest_record`);
* which is the smallest step up that supports the target React version
  (:func:`find_nearest_compatible`);
* which is the newest release that supports it
  (:func:`find_latest_compatible`).

Pre-releases and unparsable version strings never qualify as candidates.
"""

from __future__ import annotations

from typing import Optional

import semantic_version

from react_compat.utils.logger import get_logger
from react_compat.models.catalog import VersionCatalog, VersionRecord
from react_compat.models.dependency import CompatibilityStatus
from react_compat.core.range_matcher import coerce_version, evaluate, parse_version

logger = get_logger("version_search")

__all__ = [
    "find_closest_record",
    "find_latest_compatible",
    "find_nearest_compatible",
]


def _installed(version: str) -> Optional[semantic_version.Version]:
    """Parse strictly so pre-release tags order correctly, else coerce."""
    return parse_version(version) or coerce_version(version)


def _supports(record: VersionRecord, target_version: str) -> bool:
    peer = record.peer_requirement
    if peer is None:
        return False
    return evaluate(target_version, peer) is CompatibilityStatus.COMPATIBLE


def find_closest_record(
    catalog: VersionCatalog,
    installed_version: str,
) -> Optional[VersionRecord]:
    """Return the record describing the installed release.

    Resolution order: the exact version; else the newest stable release not
    above the installed version; else the oldest stable release.

    Returns:
        The record, or ``None`` when the catalog has no usable versions or
        the installed version cannot be interpreted.
    """
    exact = catalog.get(installed_version)
    if exact is not None:
        return exact

    installed = _installed(installed_version)
    if installed is None:
        logger.debug("%s: cannot interpret installed version %r", catalog.name, installed_version)
        return None

    stable = catalog.parsed_versions()
    if not stable:
        return None

    for raw, parsed in stable:
        if parsed <= installed:
            return catalog.versions[raw]

    oldest = stable[-1][0]
    logger.debug(
        "%s: %s predates every release, using oldest %s",
        catalog.name,
        installed_version,
        oldest,
    )
    return catalog.versions[oldest]


def find_nearest_compatible(
    catalog: VersionCatalog,
    installed_version: str,
    target_version: str,
) -> Optional[str]:
    """Return the lowest stable release above ``installed_version`` that
    declares a ``react`` peer range satisfied by ``target_version``.

    Example::

        >>> find_nearest_compatible(react_select, "3.0.4", "19.0.0")
        '5.9.0'
    """
    installed = _installed(installed_version)
    if installed is None:
        return None

    # Ascending so the first hit is the nearest
    for raw, parsed in reversed(catalog.parsed_versions()):
        if parsed <= installed:
            continue
        if _supports(catalog.versions[raw], target_version):
            return raw
    return None


def find_latest_compatible(
    catalog: VersionCatalog,
    target_version: str,
) -> Optional[str]:
    """Return the highest stable release whose ``react`` peer range is
    satisfied by ``target_version``, or ``None``."""
    for raw, _ in catalog.parsed_versions():
        if _supports(catalog.versions[raw], target_version):
            return raw
    return None
