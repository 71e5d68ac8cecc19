"""Upgrade flow for react-compat-check.

Turns the incompatible packages of an analysis into an upgrade plan,
either from a ``--fix`` policy or by asking once per package, then writes
the plan into ``package.json`` and runs the project's package manager.

The manifest is written before the installer runs; a failed write aborts
without installing and a failed install leaves the written manifest in
place.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from react_compat.context import CompatContext
from react_compat.commands.prompts import confirm_upgrade, prompt_upgrade_action
from react_compat.exceptions import FileOperationError, InstallerError
from react_compat.models import (
    AnalysisResult,
    DependencyRecord,
    FixPolicy,
    UpgradePlan,
    UpgradeSelection,
)
from react_compat.core import (
    Manifest,
    apply_plan,
    build_plan,
    detect_package_manager,
    install_command,
    run_install,
    select_fixes,
    write_manifest,
)
from react_compat.core.range_matcher import extract_installed_version
from react_compat.constants import EXIT_ERROR, EXIT_INCOMPATIBLE, EXIT_OK
from react_compat.utils import (
    colorize_update_type,
    get_logger,
    get_update_type,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.upgrade")


async def resolve_incompatibilities(
    ctx: CompatContext,
    manifest: Manifest,
    result: AnalysisResult,
    *,
    dry_run: bool = False,
    skip_install: bool = False,
) -> int:
    """Decide, plan and apply upgrades for every incompatible package.

    Without a fix policy the user is asked once per package and must
    confirm the plan; with ``nearest`` or ``latest`` the policy decides and
    the plan is applied directly. ``none`` leaves the project untouched.

    Returns:
        ``EXIT_OK`` when every incompatible package was upgraded,
        ``EXIT_INCOMPATIBLE`` when some remain, ``EXIT_ERROR`` when writing
        or installing failed.
    """
    records = result.incompatible
    config = ctx.config
    policy = FixPolicy(config.fix) if config.fix else None

    if policy is FixPolicy.NONE:
        print_warning(
            f"\n{len(records)} incompatible package(s) left unchanged (--fix none)"
        )
        return EXIT_INCOMPATIBLE

    # ── Step 1: Select an action per package ──────────────────────────
    interactive = policy is None
    if interactive:
        selections = [prompt_upgrade_action(record) for record in records]
    else:
        selections = select_fixes(records, policy)
        logger.info("Applied --fix %s to %d package(s)", policy.value, len(records))

    plan = build_plan(selections, records)
    if plan.is_empty:
        print_warning("\nNo upgrades selected")
        return EXIT_INCOMPATIBLE

    # ── Step 2: Show the plan ─────────────────────────────────────────
    _display_plan(plan, records, dry_run=dry_run)

    if dry_run:
        print_warning("\nDry run mode - package.json not modified")
        return EXIT_INCOMPATIBLE

    # ── Step 3: Confirm (interactive only) ────────────────────────────
    if interactive and not confirm_upgrade(plan):
        logger.info("Upgrade cancelled by user")
        print_warning("Upgrade cancelled")
        return EXIT_INCOMPATIBLE

    # ── Step 4: Write and install ─────────────────────────────────────
    applied = await apply_upgrades(
        manifest,
        plan,
        include_companions=config.update_companions,
        skip_install=skip_install,
    )
    if not applied:
        return EXIT_ERROR

    skipped = _skipped(selections)
    if skipped:
        print_warning(
            f"{len(skipped)} incompatible package(s) skipped: {', '.join(skipped)}"
        )
        return EXIT_INCOMPATIBLE
    return EXIT_OK


def _skipped(selections: Sequence[UpgradeSelection]) -> List[str]:
    return [s.package_name for s in selections if s.is_skip]


async def apply_upgrades(
    manifest: Manifest,
    plan: UpgradePlan,
    *,
    include_companions: bool = True,
    skip_install: bool = False,
) -> bool:
    """Write ``plan`` into ``package.json`` and run the package manager.

    Args:
        manifest: Manifest read at the start of the run.
        plan: The upgrades to write.
        include_companions: Also write companion upgrades.
        skip_install: Stop after writing the manifest.

    Returns:
        ``True`` when the manifest was written and the install (if run)
        succeeded.
    """
    applied = apply_plan(manifest, plan, include_companions=include_companions)

    try:
        write_manifest(manifest)
    except FileOperationError as e:
        print_error(f"Failed to update package.json: {e}")
        return False

    print_success(f"\nUpdated {len(applied)} package(s) in package.json")

    if skip_install:
        print_info("Skipping install (--skip-install)")
        return True

    return await _install(manifest.root)


async def _install(project_dir: Path) -> bool:
    manager = detect_package_manager(project_dir)
    command = install_command(manager)
    print_info(f"Running {command}...")

    try:
        exit_code = await run_install(project_dir, manager)
    except InstallerError as e:
        print_error(f"{e}")
        return False

    if exit_code != 0:
        print_error(f"{command} failed with exit code {exit_code}")
        print_warning("package.json has been updated; fix the install and rerun it")
        return False

    print_success("Dependencies installed")
    return True


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------


def _display_plan(
    plan: UpgradePlan,
    records: Sequence[DependencyRecord],
    *,
    dry_run: bool,
) -> None:
    """Render the planned manifest edits as a Rich table.

    Example output::

        ┏━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━┳━━━━━━━━━━━┓
        ┃ Package      ┃ Current ┃ Target   ┃ Change ┃ Kind      ┃
        ┡━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━╇━━━━━━━━━━━┩
        │ react-select │ 3.0.4   │ ^5.9.0   │ major  │ main      │
        │ final-form   │ 4.20.0  │ ^4.20.10 │ patch  │ companion │
        └──────────────┴─────────┴──────────┴────────┴───────────┘
    """
    installed: Dict[str, str] = {r.name: r.installed_version for r in records}
    title = "Upgrade Plan (Dry Run)" if dry_run else "Upgrade Plan"

    data = []
    for upgrade in plan.main_upgrades:
        data.append(
            _plan_row(
                upgrade.name,
                installed.get(upgrade.name),
                upgrade.manifest_value,
                upgrade.version,
                "main",
            )
        )
    for companion in plan.companion_upgrades:
        data.append(
            _plan_row(
                companion.name,
                companion.current_version,
                companion.required_range,
                extract_installed_version(companion.required_range),
                "companion",
            )
        )

    column_styles = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Target": {"justify": "center"},
        "Change": {"justify": "center"},
        "Kind": {"justify": "left"},
    }

    print_table(data, title=title, column_styles=column_styles)


def _plan_row(
    name: str,
    current: Optional[str],
    written: str,
    target_version: str,
    kind: str,
) -> Dict[str, str]:
    update_type = get_update_type(current, target_version)
    return {
        "Package": name,
        "Current": current or "not specified",
        "Target": f"[bold green]{written}[/bold green]",
        "Change": colorize_update_type(update_type),
        "Kind": kind,
    }
