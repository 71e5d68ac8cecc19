"""Unit tests for react_compat.models.upgrade."""

from __future__ import annotations

import pytest

from react_compat.models import (
    CompanionUpgrade,
    DependencyClass,
    FixPolicy,
    MainUpgrade,
    UpgradeAction,
    UpgradePlan,
    UpgradeSelection,
)


@pytest.mark.unit
class TestUpgradeSelection:
    """Tests for selection invariants."""

    def test_skip_without_target(self) -> None:
        selection = UpgradeSelection("react-select", UpgradeAction.SKIP)
        assert selection.is_skip

    def test_skip_with_target_rejected(self) -> None:
        with pytest.raises(ValueError, match="cannot have a target"):
            UpgradeSelection("react-select", UpgradeAction.SKIP, "5.9.0")

    @pytest.mark.parametrize("action", [UpgradeAction.LATEST, UpgradeAction.NEAREST_COMPATIBLE])
    def test_upgrade_without_target_rejected(self, action: UpgradeAction) -> None:
        with pytest.raises(ValueError, match="needs a target"):
            UpgradeSelection("react-select", action)

    def test_values(self) -> None:
        assert UpgradeAction.NEAREST_COMPATIBLE.value == "nearest-compatible"
        assert [p.value for p in FixPolicy] == ["none", "nearest", "latest"]


@pytest.mark.unit
class TestUpgradePlan:
    """Tests for the aggregated plan."""

    def test_manifest_value_is_caret_range(self) -> None:
        assert MainUpgrade("a", "5.9.0", DependencyClass.DIRECT).manifest_value == "^5.9.0"

    def test_empty(self) -> None:
        assert UpgradePlan().is_empty

    def test_not_empty_with_main_upgrade(self) -> None:
        plan = UpgradePlan(
            main_upgrades=[MainUpgrade("react-final-form", "7.0.0", DependencyClass.DIRECT)],
            companion_upgrades=[CompanionUpgrade("final-form", "4.20.0", "^4.20.10")],
        )
        assert not plan.is_empty

    def test_companions_alone_are_empty(self) -> None:
        plan = UpgradePlan(
            companion_upgrades=[CompanionUpgrade("final-form", "4.20.0", "^4.20.10")],
        )
        assert plan.is_empty
