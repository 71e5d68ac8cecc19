"""Companion upgrade detection.

Moving a package to a new release can drag other declared packages along:
``react-final-form@7`` requires ``final-form@^4.20.10``, so a project still
declaring ``final-form@4.20.0`` must upgrade it too. This module computes
those *companion upgrades* for a chosen target release.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from react_compat.utils.logger import get_logger
from react_compat.exceptions import NetworkError
from react_compat.constants import CORE_REACT_PACKAGES
from react_compat.models.catalog import VersionRecord
from react_compat.models.dependency import CompanionUpgrade
from react_compat.core.data_store import NpmDataStore
from react_compat.core.range_matcher import (
    coerce_version,
    extract_installed_version,
    normalize_range,
    parse_version,
)

logger = get_logger("companion_resolver")

__all__ = ["CompanionResolution", "CompanionResolver", "find_required_upgrades"]


@dataclass(frozen=True)
class CompanionResolution:
    """Companions needed for one target release.

    Attributes:
        upgrades: Companion upgrades in the target's declaration order.
        determined: ``False`` when metadata for the target was unavailable,
            in which case ``upgrades`` is empty but not authoritative.
        reason: Why the result is undetermined.
    """

    upgrades: Tuple[CompanionUpgrade, ...] = ()
    determined: bool = True
    reason: Optional[str] = None

    @classmethod
    def undetermined(cls, reason: str) -> "CompanionResolution":
        return cls(upgrades=(), determined=False, reason=reason)


def find_required_upgrades(
    record: VersionRecord,
    declared_versions: Mapping[str, str],
) -> List[CompanionUpgrade]:
    """Diff a release's requirements against the project's declarations.

    Dependencies and peer dependencies of ``record`` are merged (peer ranges
    win), ``react``/``react-dom`` are ignored, and so is anything the project
    does not declare. A declared package whose version falls outside the
    required range yields a :class:`CompanionUpgrade`. Ranges that cannot be
    parsed and declared versions that cannot be coerced are skipped.
    """
    upgrades: List[CompanionUpgrade] = []

    for name, required_range in record.required_packages().items():
        if name in CORE_REACT_PACKAGES:
            continue

        declared = declared_versions.get(name)
        if declared is None:
            continue

        current = extract_installed_version(declared)
        spec = normalize_range(required_range)
        # Strict first so a pre-release stays below its release
        version = parse_version(current) or coerce_version(current)
        if spec is None or version is None:
            logger.debug(
                "Skipping %s: cannot compare %r against %r",
                name,
                current,
                required_range,
            )
            continue

        if not spec.match(version):
            upgrades.append(CompanionUpgrade(name, current, required_range))

    return upgrades


class CompanionResolver:
    """Looks up a target release and computes its companion upgrades.

    Args:
        data_store: Shared registry cache.
    """

    def __init__(self, data_store: NpmDataStore) -> None:
        self.data_store = data_store

    async def resolve(
        self,
        package_name: str,
        target_version: str,
        declared_versions: Mapping[str, str],
    ) -> CompanionResolution:
        """Return the companions needed to move ``package_name`` to
        ``target_version``.

        Never raises: registry failures and unknown versions produce an
        undetermined, empty resolution.
        """
        try:
            catalog = await self.data_store.get_package_data(package_name)
        except NetworkError as exc:
            logger.warning(
                "Could not determine companion upgrades for %s@%s: %s",
                package_name,
                target_version,
                exc,
            )
            return CompanionResolution.undetermined(str(exc))

        record = catalog.get(target_version)
        if record is None:
            logger.debug("%s has no published version %s", package_name, target_version)
            return CompanionResolution.undetermined(
                f"{package_name}@{target_version} is not published"
            )

        return CompanionResolution(
            upgrades=tuple(find_required_upgrades(record, declared_versions))
        )
