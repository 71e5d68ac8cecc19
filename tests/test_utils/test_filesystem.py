from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from react_compat.exceptions import FileOperationError
from react_compat.utils.filesystem import safe_read_file, safe_write_file


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Create a small package.json in a temporary directory."""
    path = tmp_path / "package.json"
    path.write_text('{\n  "name": "app"\n}\n', encoding="utf-8")
    return path


# ============================================================================
# safe_read_file
# ============================================================================


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for bounded text reads."""

    def test_reads_content(self, manifest_file: Path) -> None:
        assert safe_read_file(manifest_file) == '{\n  "name": "app"\n}\n'

    def test_accepts_str_path(self, manifest_file: Path) -> None:
        assert "app" in safe_read_file(str(manifest_file))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="File not found") as exc_info:
            safe_read_file(tmp_path / "missing.json")
        assert exc_info.value.operation == "read"

    def test_directory_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Not a file"):
            safe_read_file(tmp_path)

    def test_too_large(self, manifest_file: Path) -> None:
        with pytest.raises(FileOperationError, match="File too large"):
            safe_read_file(manifest_file, max_size=5)

    def test_size_limit_disabled(self, manifest_file: Path) -> None:
        assert safe_read_file(manifest_file, max_size=None)

    def test_invalid_encoding(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(FileOperationError, match="Failed to read"):
            safe_read_file(path)


# ============================================================================
# safe_write_file
# ============================================================================


@pytest.mark.unit
class TestSafeWriteFile:
    """Tests for atomic replacement."""

    def test_replaces_content(self, manifest_file: Path) -> None:
        safe_write_file(manifest_file, '{"name": "renamed"}\n')
        assert manifest_file.read_text(encoding="utf-8") == '{"name": "renamed"}\n'

    def test_creates_new_file(self, tmp_path: Path) -> None:
        target = tmp_path / "new.json"
        safe_write_file(target, "{}")
        assert target.read_text(encoding="utf-8") == "{}"

    def test_no_temp_files_left(self, manifest_file: Path) -> None:
        safe_write_file(manifest_file, "{}")
        assert [p.name for p in manifest_file.parent.iterdir()] == ["package.json"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Directory does not exist") as exc_info:
            safe_write_file(tmp_path / "nope" / "package.json", "{}")
        assert exc_info.value.operation == "write"

    def test_failed_replace_keeps_original(self, manifest_file: Path) -> None:
        with patch.object(Path, "replace", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError, match="Atomic write failed"):
                safe_write_file(manifest_file, "{}")

        assert "app" in manifest_file.read_text(encoding="utf-8")
        assert [p.name for p in manifest_file.parent.iterdir()] == ["package.json"]
