"""
``python -m react_compat`` support; equivalent to ``react-compat-check``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not start.

    Usually a dependency (click, httpx, rich) is missing from the active
    environment.
    """
    sys.stderr.write(
        "react-compat-check CLI could not be loaded.\n"
        f"Python version : {sys.version}\n"
        f"ImportError: {exc}\n"
    )


def main() -> int:
    try:
        # Deferred so a broken install still reports something useful
        from react_compat.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
