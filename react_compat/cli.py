"""
Command-line interface for react-compat-check.

This module provides the main CLI entry point and handles global options,
configuration loading, and the mapping of outcomes to exit codes.
"""

from __future__ import annotations

import os
import sys
import json
import asyncio
import logging
from pathlib import Path
from typing import Optional

import click

from react_compat.config import load_config
from react_compat.__version__ import __version__
from react_compat.context import CompatContext
from react_compat.models import FixPolicy
from react_compat.exceptions import ReactCompatError
from react_compat.commands.check import run_check
from react_compat.utils.logger import get_logger, setup_logging
from react_compat.utils.console import print_error, print_warning, reconfigure_console
from react_compat.constants import (
    CONFIG_ENVVAR,
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
    REGISTRY_ENVVAR,
)

logger = get_logger("cli")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--react",
    "react_version",
    metavar="VERSION",
    help="Target React version (e.g. 19, 18.3 or 18.3.1). Prompted when omitted.",
)
@click.option(
    "--include-dev",
    is_flag=True,
    help="Also check devDependencies.",
)
@click.option(
    "--include-optional",
    is_flag=True,
    help="Also check optionalDependencies.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Print a JSON report instead of tables. Requires --react.",
)
@click.option(
    "--fix",
    type=click.Choice([p.value for p in FixPolicy], case_sensitive=False),
    default=None,
    help="Upgrade incompatible packages without prompting.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the upgrade plan without modifying package.json.",
)
@click.option(
    "--skip-install",
    is_flag=True,
    help="Update package.json but do not run the package manager.",
)
@click.option(
    "--project-dir",
    "-C",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory containing package.json.",
)
@click.option(
    "--registry",
    envvar=REGISTRY_ENVVAR,
    default=None,
    help="npm registry base URL.",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENVVAR,
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="REACT_COMPAT_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="react-compat-check",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    react_version: Optional[str],
    include_dev: bool,
    include_optional: bool,
    json_output: bool,
    fix: Optional[str],
    dry_run: bool,
    skip_install: bool,
    project_dir: Path,
    registry: Optional[str],
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Check React-related dependencies against a target React version.

    \b
    Exit codes:
      0  all dependencies compatible, or all incompatible ones upgraded
      1  incompatible dependencies remain
      2  error (network, manifest, installer, invalid input)

    \b
    Examples:
      react-compat-check
      react-compat-check --react 19 --include-dev
      react-compat-check --react 19 --json
      react-compat-check --react 19 --fix nearest --skip-install
    """
    _configure_logging(verbose)

    if not color:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    try:
        if json_output and not react_version:
            raise click.UsageError("--json requires --react <version>")

        compat_ctx = _build_context(
            config_path=config,
            project_dir=project_dir,
            verbose=verbose,
            color=color,
            json_output=json_output,
            include_dev=include_dev,
            include_optional=include_optional,
            fix=fix,
            registry=registry,
        )
        exit_code = asyncio.run(
            run_check(
                compat_ctx,
                react_version=react_version,
                dry_run=dry_run,
                skip_install=skip_install,
            )
        )
    except (ReactCompatError, click.UsageError) as exc:
        if not json_output:
            raise
        message = exc.message if isinstance(exc, ReactCompatError) else exc.format_message()
        logger.debug("Error in JSON mode: %s", exc, exc_info=True)
        print(json.dumps({"error": message}))
        exit_code = EXIT_ERROR

    ctx.exit(exit_code)


def _build_context(
    *,
    config_path: Optional[Path],
    project_dir: Path,
    verbose: int,
    color: bool,
    json_output: bool,
    include_dev: bool,
    include_optional: bool,
    fix: Optional[str],
    registry: Optional[str],
) -> CompatContext:
    """Load configuration and layer the command-line options over it.

    Raises:
        ConfigError: The configuration file is invalid.
    """
    root = project_dir.resolve()
    loaded = load_config(config_path, search_dir=root)

    # Flags can only switch sections on; the file supplies the default
    loaded.include_dev = include_dev or loaded.include_dev
    loaded.include_optional = include_optional or loaded.include_optional
    if fix is not None:
        loaded.fix = fix.lower()
    if registry:
        loaded.registry_url = registry.rstrip("/")

    compat_ctx = CompatContext()
    compat_ctx.config_path = config_path or loaded.source_path
    compat_ctx.verbose = verbose
    compat_ctx.color = color
    compat_ctx.config = loaded
    compat_ctx.project_dir = root
    compat_ctx.json_output = json_output

    logger.debug("react-compat-check v%s", __version__)
    logger.debug("Project directory: %s", root)
    logger.debug("Config path: %s", compat_ctx.config_path)
    logger.debug("Effective configuration: %s", loaded.to_log_dict())
    logger.debug("Verbosity: %s | Color: %s", verbose, color)
    return compat_ctx


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


def main() -> int:
    """Main entry point for the react-compat-check CLI.

    Returns:
        Exit code:
            0   All compatible, or every incompatible package upgraded
            1   Incompatible packages remain
            2   Application or usage error
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else EXIT_OK

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return EXIT_INTERRUPTED

    except ReactCompatError as exc:
        print_error(str(exc))
        logger.debug(
            "ReactCompatError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return EXIT_ERROR

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return EXIT_INTERRUPTED

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
