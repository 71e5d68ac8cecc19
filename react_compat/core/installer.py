"""Package-manager invocation.

Runs ``<manager> install`` in the project directory after the manifest has
been rewritten. The child process inherits the terminal, so the package
manager's own progress output is shown as-is.
"""

from __future__ import annotations

import shutil
import asyncio
from pathlib import Path

from react_compat.utils.logger import get_logger
from react_compat.exceptions import InstallerError
from react_compat.core.manifest import install_command

logger = get_logger("installer")

__all__ = ["run_install"]


async def run_install(project_dir: Path, manager: str) -> int:
    """Run the install command of ``manager`` inside ``project_dir``.

    Returns:
        The installer's exit status.

    Raises:
        InstallerError: The executable is not on ``PATH`` or could not be
            started.
    """
    command = install_command(manager)
    executable = shutil.which(manager)
    if executable is None:
        raise InstallerError(
            f"{manager} was not found on PATH",
            command=command,
        )

    logger.info("Running %s in %s", command, project_dir)
    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "install",
            cwd=str(project_dir),
        )
    except OSError as exc:
        raise InstallerError(
            f"Failed to start {command}: {exc}",
            command=command,
        ) from exc

    exit_code = await process.wait()
    logger.debug("%s exited with %d", command, exit_code)
    return exit_code
