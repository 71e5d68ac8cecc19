"""
Shared runtime context for a react-compat-check invocation.

Bundles the loaded configuration with the options resolved from the command
line, so the check and upgrade flows receive a single object.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from react_compat.config import CompatConfig


class CompatContext:
    """Runtime context for one CLI invocation.

    Attributes:
        config_path: Path to the configuration file, if one was loaded.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Effective configuration after CLI overrides.
        project_dir: Directory holding ``package.json``.
        json_output: Emit the JSON report instead of tables and prompts.
    """

    __slots__ = ("config_path", "verbose", "color", "config", "project_dir", "json_output")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: CompatConfig = CompatConfig()
        self.project_dir: Path = Path.cwd()
        self.json_output: bool = False
