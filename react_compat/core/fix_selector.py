"""Turns a fix policy or an explicit choice into upgrade selections.

These functions are pure. The interactive flow asks the user once per
package and feeds the answer to :func:`selection_for_action`; automation
passes a :class:`~react_compat.models.upgrade.FixPolicy` to
:func:`select_fixes`. Both produce the same
:class:`~react_compat.models.upgrade.UpgradeSelection` shape.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from react_compat.constants import UNKNOWN_VERSION
from react_compat.models.dependency import DependencyRecord
from react_compat.models.upgrade import FixPolicy, UpgradeAction, UpgradeSelection

__all__ = ["available_actions", "select_fixes", "selection_for_action"]


def available_actions(record: DependencyRecord) -> List[UpgradeAction]:
    """Return the actions that make sense for ``record``, best first.

    ``NEAREST_COMPATIBLE`` is offered only when a nearest compatible release
    exists and ``LATEST`` only when the latest version is known. ``SKIP`` is
    always offered.
    """
    actions = []
    if record.nearest_compatible_version:
        actions.append(UpgradeAction.NEAREST_COMPATIBLE)
    if _latest_target(record):
        actions.append(UpgradeAction.LATEST)
    actions.append(UpgradeAction.SKIP)
    return actions


def selection_for_action(
    record: DependencyRecord,
    action: UpgradeAction,
) -> UpgradeSelection:
    """Build the selection for an explicitly chosen action.

    ``LATEST`` falls back to ``SKIP`` when the latest version is unknown.

    Raises:
        ValueError: ``NEAREST_COMPATIBLE`` was chosen but the record has no
            nearest compatible release.
    """
    if action is UpgradeAction.NEAREST_COMPATIBLE:
        return UpgradeSelection(record.name, action, record.nearest_compatible_version)
    latest = _latest_target(record)
    if action is UpgradeAction.SKIP or latest is None:
        return UpgradeSelection(record.name, UpgradeAction.SKIP)
    return UpgradeSelection(record.name, UpgradeAction.LATEST, latest)


def _latest_target(record: DependencyRecord) -> Optional[str]:
    latest = record.latest_version
    if not latest or latest == UNKNOWN_VERSION:
        return None
    return latest


def select_fixes(
    records: Sequence[DependencyRecord],
    policy: FixPolicy,
) -> List[UpgradeSelection]:
    """Apply ``policy`` to every record, preserving order.

    * ``NONE``: every record is skipped.
    * ``NEAREST``: the nearest compatible release when there is one,
      otherwise the latest.
    * ``LATEST``: always the latest.

    A record whose latest version is unknown is skipped instead of being
    upgraded to the latest.
    """
    selections = []
    for record in records:
        if policy is FixPolicy.NONE:
            action = UpgradeAction.SKIP
        elif policy is FixPolicy.NEAREST and record.nearest_compatible_version:
            action = UpgradeAction.NEAREST_COMPATIBLE
        else:
            action = UpgradeAction.LATEST
        selections.append(selection_for_action(record, action))
    return selections
