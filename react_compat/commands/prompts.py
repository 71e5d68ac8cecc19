"""Interactive prompts for react-compat-check.

Each prompt asks one question and returns a plain value; all decision
logic lives in :mod:`react_compat.core.fix_selector`.
"""

from __future__ import annotations

from typing import List, Sequence

import click

from react_compat.models import DependencyRecord, UpgradeAction, UpgradePlan, UpgradeSelection
from react_compat.core.fix_selector import available_actions, selection_for_action
from react_compat.exceptions import InvalidVersionInputError
from react_compat.utils import confirm, get_raw_console

_SEE_ALL = "See all versions..."


def _choose(title: str, labels: Sequence[str], *, default: int = 1) -> int:
    """Print a numbered menu and return the zero-based index picked."""
    console = get_raw_console()
    console.print(f"\n[bold]{title}[/bold]")
    for number, label in enumerate(labels, start=1):
        console.print(f"  {number}) {label}")
    choice = click.prompt(
        "Select",
        type=click.IntRange(1, len(labels)),
        default=default,
    )
    return choice - 1


def prompt_react_version(major_versions: List[str], stable_versions: List[str]) -> str:
    """Ask which React version to target.

    Offers the newest release of each recent major plus an entry listing
    every recent stable release.

    Args:
        major_versions: Newest stable release per major, newest first.
        stable_versions: Stable releases, newest first.

    Raises:
        InvalidVersionInputError: No React releases are available.
    """
    if not major_versions:
        raise InvalidVersionInputError("No published React versions found")

    labels = [f"React {v.split('.')[0]} (latest: {v})" for v in major_versions]
    labels.append(_SEE_ALL)

    index = _choose("Which React version do you want to upgrade to?", labels)
    if index < len(major_versions):
        return major_versions[index]

    index = _choose("Select a React version", stable_versions or major_versions)
    return (stable_versions or major_versions)[index]


def _action_label(record: DependencyRecord, action: UpgradeAction) -> str:
    if action is UpgradeAction.NEAREST_COMPATIBLE:
        label = f"Upgrade to nearest compatible version {record.nearest_compatible_version}"
        companions = record.required_upgrades_for_nearest
    elif action is UpgradeAction.LATEST:
        label = f"Upgrade to latest version {record.latest_version}"
        companions = record.required_upgrades_for_latest
    else:
        return "Skip (leave unchanged)"

    if companions:
        names = ", ".join(c.name for c in companions)
        label += f" [dim](also upgrades {names})[/dim]"
    return label


def prompt_upgrade_action(record: DependencyRecord) -> UpgradeSelection:
    """Ask what to do with one incompatible package."""
    actions = available_actions(record)
    supported = record.peer_range or "N/A"
    index = _choose(
        f"{record.name}@{record.installed_version} supports React {supported}",
        [_action_label(record, a) for a in actions],
    )
    return selection_for_action(record, actions[index])


def confirm_upgrade(plan: UpgradePlan) -> bool:
    """Ask for final confirmation before touching ``package.json``."""
    count = len(plan.main_upgrades) + len(plan.companion_upgrades)
    plural = "package" if count == 1 else "packages"
    return confirm(f"\nProceed with upgrade of {count} {plural}?", default=True)
