"""Check flow for react-compat-check.

Reads ``package.json``, resolves the target React version, analyzes every
React-related dependency against it and renders the outcome, either as a
Rich table or as a JSON document. When incompatible packages remain and
the run is not in JSON mode, control passes to the upgrade flow in
:mod:`react_compat.commands.upgrade`.

All registry access goes through one :class:`NpmDataStore`, so each
package's metadata is fetched at most once per invocation.

Typical usage::

    # Pick the target interactively
    $ react-compat-check

    # Machine-readable report for CI
    $ react-compat-check --react 19 --json > report.json

    # Upgrade everything to the nearest compatible release
    $ react-compat-check --react 19.0.0 --fix nearest
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from react_compat.context import CompatContext
from react_compat.commands.prompts import prompt_react_version
from react_compat.commands.upgrade import resolve_incompatibilities
from react_compat.models import AnalysisResult, CompatibilityStatus, DependencyRecord
from react_compat.core import (
    DependencyAnalyzer,
    NpmDataStore,
    ReactVersionResolver,
    read_manifest,
)
from react_compat.constants import (
    ALL_VERSIONS_LIMIT,
    EXIT_INCOMPATIBLE,
    EXIT_OK,
    MAJOR_VERSION_CHOICES,
)
from react_compat.utils import (
    HTTPClient,
    colorize_status,
    get_logger,
    get_raw_console,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.check")

_STATUS_ORDER = {
    CompatibilityStatus.INCOMPATIBLE: 0,
    CompatibilityStatus.UNKNOWN: 1,
    CompatibilityStatus.COMPATIBLE: 2,
}


async def run_check(
    ctx: CompatContext,
    *,
    react_version: Optional[str],
    dry_run: bool = False,
    skip_install: bool = False,
) -> int:
    """Run one complete check, and the upgrade flow when needed.

    Args:
        ctx: Runtime context holding the effective configuration.
        react_version: Target React version as typed by the user, or
            ``None`` to ask interactively.
        dry_run: Show the upgrade plan without touching the project.
        skip_install: Write ``package.json`` but do not run the installer.

    Returns:
        The process exit code.

    Raises:
        ReactCompatError: Manifest, registry or version input errors.
    """
    config = ctx.config

    # ── Step 1: Read the manifest ─────────────────────────────────────
    manifest = read_manifest(ctx.project_dir)

    # ── Step 2: Resolve the target and analyze (shared data store) ────
    async with HTTPClient(
        timeout=config.timeout,
        max_concurrency=config.concurrency,
    ) as http:
        data_store = NpmDataStore(
            http,
            registry_url=config.registry_url,
            concurrent_limit=config.concurrency,
        )

        target = await _resolve_target(data_store, react_version)
        logger.info("Checking dependencies against React %s", target)

        analyzer = DependencyAnalyzer(
            data_store,
            extra_react_packages=config.react_packages,
        )
        result = await analyzer.analyze_project(
            manifest,
            target,
            include_dev=config.include_dev,
            include_optional=config.include_optional,
        )

    # ── Step 3: Report ────────────────────────────────────────────────
    if ctx.json_output:
        print(json.dumps(build_json_report(result), indent=2))
        return EXIT_INCOMPATIBLE if result.has_incompatible else EXIT_OK

    display_results(result)

    if not result.has_incompatible:
        if result.dependencies:
            print_success(f"\nAll React-related dependencies support React {target}")
        return EXIT_OK

    # ── Step 4: Upgrade ───────────────────────────────────────────────
    return await resolve_incompatibilities(
        ctx,
        manifest,
        result,
        dry_run=dry_run,
        skip_install=skip_install,
    )


async def _resolve_target(data_store: NpmDataStore, requested: Optional[str]) -> str:
    """Turn ``--react`` into a published version, prompting when absent."""
    resolver = ReactVersionResolver(data_store)
    if requested:
        return await resolver.resolve(requested)

    majors = await resolver.major_versions(limit=MAJOR_VERSION_CHOICES)
    stable = await resolver.stable_versions(limit=ALL_VERSIONS_LIMIT)
    return prompt_react_version(majors, stable)


def build_json_report(result: AnalysisResult) -> Dict[str, Any]:
    """Return the machine-readable report for ``result``.

    Example::

        >>> build_json_report(result)["summary"]
        {'total': 3, 'compatible': 2, 'incompatible': 1, 'withRequiredUpgrades': 0}
    """
    return result.to_json()


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def sort_for_display(records: List[DependencyRecord]) -> List[DependencyRecord]:
    """Order records incompatible first, then unknown, then compatible.

    The sort is stable, so manifest order is kept inside each group.
    """
    return sorted(records, key=lambda r: _STATUS_ORDER[r.status])


def display_results(result: AnalysisResult) -> None:
    """Render the compatibility table, companion upgrades and summary."""
    if not result.dependencies:
        print_warning("No React-related dependencies found.")
        return

    _display_table(result)
    _display_companions(result.dependencies)
    _display_summary(result)


def _display_table(result: AnalysisResult) -> None:
    """Render records as a Rich table.

    Example::

        ┏━━━━━━━━━━━━━━┳━━━━━━━━━━━┳━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┓
        ┃ Package      ┃ Installed ┃ Status         ┃ Supported React ┃ Nearest ┃ Latest ┃
        ┡━━━━━━━━━━━━━━╇━━━━━━━━━━━╇━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━┩
        │ react-select │ 3.0.4     │ ✗ incompatible │ ^16.8.0         │ 5.9.0   │ 5.10.2 │
        └──────────────┴───────────┴────────────────┴─────────────────┴─────────┴────────┘
    """
    data = [_create_table_row(r) for r in sort_for_display(result.dependencies)]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Installed": {"justify": "center", "style": "dim"},
        "Status": {"justify": "center", "no_wrap": True},
        "Supported React": {"justify": "left"},
        "Nearest Compatible": {"justify": "center", "style": "bright_cyan"},
        "Latest": {"justify": "center", "style": "bold green"},
    }

    print_table(
        data,
        title=f"React Compatibility Check for version {result.target_version}",
        column_styles=column_styles,
    )


def _create_table_row(record: DependencyRecord) -> Dict[str, str]:
    return {
        "Package": record.name,
        "Installed": record.installed_version,
        "Status": colorize_status(record.status.value),
        "Supported React": record.peer_range or "N/A",
        "Nearest Compatible": record.nearest_compatible_version or "-",
        "Latest": record.latest_version,
    }


def _display_companions(records: List[DependencyRecord]) -> None:
    """List the companion upgrades each package's preferred target needs."""
    with_companions = [r for r in records if r.has_required_upgrades]
    if not with_companions:
        return

    console = get_raw_console()
    console.print("\n[bold]Required companion upgrades:[/bold]")
    for record in with_companions:
        if record.nearest_compatible_version:
            target = record.nearest_compatible_version
            companions = record.required_upgrades_for_nearest
        else:
            target = record.latest_version
            companions = record.required_upgrades_for_latest
        if not companions:
            continue

        console.print(f"  {record.name}@{target} requires:")
        for companion in companions:
            console.print(
                f"    • {companion.name}: {companion.current_version} → "
                f"{companion.required_range}"
            )


def _display_summary(result: AnalysisResult) -> None:
    summary = result.summary()
    unknown = len(result.with_status(CompatibilityStatus.UNKNOWN))

    console = get_raw_console()
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  [green]Compatible:[/green] {summary['compatible']}")
    console.print(f"  [red]Incompatible:[/red] {summary['incompatible']}")
    console.print(f"  [yellow]Unknown:[/yellow] {unknown}")
    if summary["withRequiredUpgrades"]:
        console.print(
            f"  Need companion upgrades: {summary['withRequiredUpgrades']}"
        )
