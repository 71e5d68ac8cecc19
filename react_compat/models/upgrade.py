"""
Upgrade decision models for react-compat-check.

A :class:`UpgradeSelection` records what should happen to one incompatible
package; an :class:`UpgradePlan` aggregates selections into the concrete
manifest edits.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional

from react_compat.models.dependency import CompanionUpgrade, DependencyClass


class UpgradeAction(Enum):
    """What to do with one incompatible package."""

    SKIP = "skip"
    NEAREST_COMPATIBLE = "nearest-compatible"
    LATEST = "latest"


class FixPolicy(Enum):
    """Automated fix policy selected with ``--fix``."""

    NONE = "none"
    NEAREST = "nearest"
    LATEST = "latest"


@dataclass(frozen=True)
class UpgradeSelection:
    """A decision for a single package.

    ``target_version`` is ``None`` exactly when the action is ``SKIP``.

    Raises:
        ValueError: The action and target disagree.
    """

    package_name: str
    action: UpgradeAction
    target_version: Optional[str] = None

    def __post_init__(self) -> None:
        if self.action is UpgradeAction.SKIP and self.target_version is not None:
            raise ValueError(f"Skipped package {self.package_name!r} cannot have a target")
        if self.action is not UpgradeAction.SKIP and not self.target_version:
            raise ValueError(
                f"Action {self.action.value!r} for {self.package_name!r} needs a target"
            )

    @property
    def is_skip(self) -> bool:
        return self.action is UpgradeAction.SKIP


@dataclass(frozen=True)
class MainUpgrade:
    """A package moved to a chosen release."""

    name: str
    version: str
    dependency_class: DependencyClass

    @property
    def manifest_value(self) -> str:
        """Return the range written into ``package.json``."""
        return f"^{self.version}"


@dataclass
class UpgradePlan:
    """Main upgrades plus deduplicated companion upgrades.

    Attributes:
        main_upgrades: One entry per non-skipped selection, selection order.
        companion_upgrades: Companions of the selected targets, first
            occurrence kept per package name.
    """

    main_upgrades: List[MainUpgrade] = field(default_factory=list)
    companion_upgrades: List[CompanionUpgrade] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.main_upgrades
