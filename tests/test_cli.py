"""Unit tests for react_compat.cli.

The check flow itself is mocked; these tests cover option handling,
JSON-mode error reporting and exit code mapping.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

import react_compat.utils.logger as logger_module
from react_compat.cli import _build_context, cli, main
from react_compat.exceptions import ManifestNotFoundError, NetworkError


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep environment and logging changes made by the CLI local to a test."""
    monkeypatch.setenv("NO_COLOR", "1")
    for name in ("REACT_COMPAT_REGISTRY", "REACT_COMPAT_CONFIG", "REACT_COMPAT_COLOR"):
        monkeypatch.delenv(name, raising=False)
    yield
    root_logger = logging.getLogger("react_compat")
    root_logger.handlers.clear()
    root_logger.propagate = True
    logger_module._logging_configured = False


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "package.json").write_text('{"dependencies": {}}', encoding="utf-8")
    return tmp_path


# ============================================================================
# Option handling
# ============================================================================


@pytest.mark.unit
class TestCliOptions:
    """Tests for argument parsing and context construction."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("react-compat-check ")

    def test_passes_options_to_check(self, runner: CliRunner, project: Path) -> None:
        with patch(
            "react_compat.cli.run_check", new_callable=AsyncMock, return_value=1
        ) as mock_run:
            result = runner.invoke(
                cli,
                [
                    "--react",
                    "19",
                    "--include-dev",
                    "--fix",
                    "NEAREST",
                    "--dry-run",
                    "-C",
                    str(project),
                ],
            )

        assert result.exit_code == 1
        ctx = mock_run.await_args.args[0]
        assert ctx.project_dir == project.resolve()
        assert ctx.config.include_dev is True
        assert ctx.config.include_optional is False
        assert ctx.config.fix == "nearest"
        assert mock_run.await_args.kwargs == {
            "react_version": "19",
            "dry_run": True,
            "skip_install": False,
        }

    def test_registry_from_environment(self, runner: CliRunner, project: Path) -> None:
        with patch(
            "react_compat.cli.run_check", new_callable=AsyncMock, return_value=0
        ) as mock_run:
            result = runner.invoke(
                cli,
                ["--react", "19", "-C", str(project)],
                env={"REACT_COMPAT_REGISTRY": "https://mirror.example.com/"},
            )

        assert result.exit_code == 0
        ctx = mock_run.await_args.args[0]
        assert ctx.config.registry_url == "https://mirror.example.com"

    def test_invalid_fix_value(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--fix", "oldest", "-C", str(project)])
        assert result.exit_code == 2


@pytest.mark.unit
class TestBuildContext:
    """Tests for layering CLI options over the configuration file."""

    def test_cli_overrides_file(self, tmp_path: Path) -> None:
        (tmp_path / "react-compat.toml").write_text(
            '[react-compat]\ninclude_dev = true\nfix = "latest"\n',
            encoding="utf-8",
        )

        ctx = _build_context(
            config_path=None,
            project_dir=tmp_path,
            verbose=0,
            color=False,
            json_output=False,
            include_dev=False,
            include_optional=True,
            fix="NEAREST",
            registry="https://registry.example.com/",
        )

        assert ctx.config.include_dev is True
        assert ctx.config.include_optional is True
        assert ctx.config.fix == "nearest"
        assert ctx.config.registry_url == "https://registry.example.com"
        assert ctx.config_path == (tmp_path / "react-compat.toml").resolve()
        assert ctx.color is False

    def test_file_values_kept_without_flags(self, tmp_path: Path) -> None:
        (tmp_path / "react-compat.toml").write_text(
            '[react-compat]\nfix = "latest"\n', encoding="utf-8"
        )

        ctx = _build_context(
            config_path=None,
            project_dir=tmp_path,
            verbose=0,
            color=True,
            json_output=True,
            include_dev=False,
            include_optional=False,
            fix=None,
            registry=None,
        )

        assert ctx.config.fix == "latest"
        assert ctx.json_output is True


# ============================================================================
# JSON mode
# ============================================================================


@pytest.mark.unit
class TestJsonMode:
    """Tests for machine-readable error reporting."""

    def test_requires_react(self, runner: CliRunner, project: Path) -> None:
        result = runner.invoke(cli, ["--json", "-C", str(project)])

        assert result.exit_code == 2
        assert json.loads(result.stdout) == {"error": "--json requires --react <version>"}

    def test_missing_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--json", "--react", "19", "-C", str(tmp_path)])

        assert result.exit_code == 2
        assert json.loads(result.stdout) == {
            "error": "No package.json found in the project directory"
        }

    def test_registry_failure(self, runner: CliRunner, project: Path) -> None:
        with patch(
            "react_compat.cli.run_check",
            new_callable=AsyncMock,
            side_effect=NetworkError("Request failed after 4 attempts"),
        ):
            result = runner.invoke(cli, ["--json", "--react", "19", "-C", str(project)])

        assert result.exit_code == 2
        assert json.loads(result.stdout) == {"error": "Request failed after 4 attempts"}

    def test_errors_propagate_outside_json_mode(
        self, runner: CliRunner, tmp_path: Path
    ) -> None:
        result = runner.invoke(cli, ["--react", "19", "-C", str(tmp_path)])

        assert isinstance(result.exception, ManifestNotFoundError)


# ============================================================================
# main() exit codes
# ============================================================================


@pytest.mark.unit
class TestMainExitCodes:
    """Tests for mapping outcomes to process exit codes."""

    @pytest.mark.parametrize("code", [0, 1, 2])
    def test_returns_cli_result(self, code: int) -> None:
        with patch("react_compat.cli.cli", return_value=code):
            assert main() == code

    @pytest.mark.parametrize(
        "error,expected",
        [
            (click.UsageError("bad option"), 2),
            (click.Abort(), 130),
            (KeyboardInterrupt(), 130),
            (ManifestNotFoundError("No package.json found in the project directory"), 2),
            (RuntimeError("boom"), 2),
        ],
        ids=["usage", "abort", "interrupt", "react-compat-error", "unexpected"],
    )
    def test_exceptions(self, error: BaseException, expected: int) -> None:
        with patch("react_compat.cli.cli", side_effect=error):
            assert main() == expected

    def test_error_message_printed(self, capsys: pytest.CaptureFixture) -> None:
        with patch(
            "react_compat.cli.cli",
            side_effect=ManifestNotFoundError("No package.json found in the project directory"),
        ):
            main()

        assert "[ERROR] No package.json found" in capsys.readouterr().out
