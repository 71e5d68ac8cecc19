"""
File access helpers for ``package.json``.

Reads are size-bounded and writes replace the file atomically through a
sibling temporary file. Every failure surfaces as ``FileOperationError``.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from react_compat.utils.logger import get_logger
from react_compat.exceptions import FileOperationError
from react_compat.constants import MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Return the text of ``file_path``.

    Args:
        file_path: File to read.
        max_size: Largest accepted size in bytes; ``None`` for no limit.
        encoding: Text encoding.

    Raises:
        FileOperationError: Missing, not a regular file, larger than
            ``max_size``, or not decodable.
    """
    path = Path(file_path)

    def fail(message: str, exc: Optional[Exception] = None) -> FileOperationError:
        return FileOperationError(
            message, file_path=str(path), operation="read", original_error=exc
        )

    if not path.exists():
        raise fail(f"File not found: {path}")
    if not path.is_file():
        raise fail(f"Not a file: {path}")

    size = path.stat().st_size
    if max_size is not None and size > max_size:
        raise fail(f"File too large: {size} bytes (max {max_size})")

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise fail(f"Failed to read file: {exc}", exc) from exc


def safe_write_file(file_path: PathLike, content: str) -> None:
    """Replace ``file_path`` with ``content`` in one step.

    The new text is written and fsynced to a hidden temporary file in the
    same directory, then renamed over the target. Readers see either the
    old file or the new one.

    Raises:
        FileOperationError: The directory is missing or the write failed.
    """
    target = Path(file_path)
    if not target.parent.is_dir():
        raise FileOperationError(
            f"Directory does not exist: {target.parent}",
            file_path=str(target),
            operation="write",
        )

    fd, temp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        temp_path.replace(target)
    except OSError as exc:
        _discard(temp_path)
        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", temp_path, exc)
