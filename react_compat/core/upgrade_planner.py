"""Upgrade planning for react-compat-check.

Aggregates per-package selections into an
:class:`~react_compat.models.upgrade.UpgradePlan` and applies it to a
:class:`~react_compat.core.manifest.Manifest`.

Rules:

* each non-skipped selection becomes a main upgrade written as
  ``^<version>`` into the section that declares the package;
* companions come from the record's nearest list when the nearest
  compatible release was chosen, otherwise from its latest list;
* companions are deduplicated by name, the first occurrence in selection
  order wins, and skipped selections contribute none;
* a companion is written into whichever section currently declares it.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Set, Tuple

from react_compat.utils.logger import get_logger
from react_compat.core.manifest import Manifest
from react_compat.models.dependency import CompanionUpgrade, DependencyRecord
from react_compat.models.upgrade import (
    MainUpgrade,
    UpgradeAction,
    UpgradePlan,
    UpgradeSelection,
)

logger = get_logger("upgrade_planner")

__all__ = ["apply_plan", "build_plan", "collect_companions"]

#: package → (manifest section, written value)
AppliedWrites = Dict[str, Tuple[str, str]]


def _index(records: Sequence[DependencyRecord]) -> Mapping[str, DependencyRecord]:
    return {record.name: record for record in records}


def collect_companions(
    selections: Sequence[UpgradeSelection],
    records: Sequence[DependencyRecord],
) -> List[CompanionUpgrade]:
    """Merge the companion lists of every non-skipped selection.

    Example::

        >>> [c.name for c in collect_companions(selections, records)]
        ['final-form']
    """
    by_name = _index(records)
    seen: Set[str] = set()
    companions: List[CompanionUpgrade] = []

    for selection in selections:
        if selection.is_skip:
            continue
        record = by_name.get(selection.package_name)
        if record is None:
            continue

        if selection.action is UpgradeAction.NEAREST_COMPATIBLE:
            candidates = record.required_upgrades_for_nearest
        else:
            candidates = record.required_upgrades_for_latest

        for companion in candidates:
            if companion.name in seen:
                continue
            seen.add(companion.name)
            companions.append(companion)

    return companions


def build_plan(
    selections: Sequence[UpgradeSelection],
    records: Sequence[DependencyRecord],
) -> UpgradePlan:
    """Turn selections into an :class:`UpgradePlan`.

    Selections naming a package without a record are ignored.
    """
    by_name = _index(records)
    main: List[MainUpgrade] = []

    for selection in selections:
        if selection.is_skip or not selection.target_version:
            continue
        record = by_name.get(selection.package_name)
        if record is None:
            logger.debug("No analysis record for %s, ignoring", selection.package_name)
            continue
        main.append(
            MainUpgrade(
                name=record.name,
                version=selection.target_version,
                dependency_class=record.dependency_class,
            )
        )

    return UpgradePlan(
        main_upgrades=main,
        companion_upgrades=collect_companions(selections, records),
    )


def apply_plan(
    manifest: Manifest,
    plan: UpgradePlan,
    *,
    include_companions: bool = True,
) -> AppliedWrites:
    """Write ``plan`` into ``manifest`` (in memory only).

    Companions not declared in any section are left out. When the same
    package is written twice, the later write wins.

    Returns:
        The effective writes, one entry per package.
    """
    applied: AppliedWrites = {}

    for upgrade in plan.main_upgrades:
        field_name = upgrade.dependency_class.manifest_field
        manifest.set_version(field_name, upgrade.name, upgrade.manifest_value)
        applied[upgrade.name] = (field_name, upgrade.manifest_value)

    if include_companions:
        for companion in plan.companion_upgrades:
            field_name = manifest.find_field(companion.name)
            if field_name is None:
                logger.debug("%s is not declared, skipping companion", companion.name)
                continue
            manifest.set_version(field_name, companion.name, companion.required_range)
            applied[companion.name] = (field_name, companion.required_range)

    for name, (field_name, value) in applied.items():
        logger.debug("%s.%s = %s", field_name, name, value)
    return applied
