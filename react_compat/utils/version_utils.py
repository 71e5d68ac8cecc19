"""
Classification of version changes for the upgrade plan table.
"""

from __future__ import annotations

from typing import Optional

from semantic_version import Version


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Describe the move from ``current_version`` to ``target_version``.

    Returns ``"new"`` when nothing is installed yet, ``"same"``,
    ``"downgrade"``, the first differing component (``"major"``,
    ``"minor"``, ``"patch"``), ``"update"`` when only the pre-release part
    changes, or ``"unknown"`` when either side is missing or not a full
    ``MAJOR.MINOR.PATCH`` version.

    Examples:
        >>> get_update_type("3.0.4", "5.9.0")
        'major'
        >>> get_update_type("v4.20.0", "4.20.10")
        'patch'
    """
    if target_version is None:
        return "unknown"
    if current_version is None:
        return "new"

    try:
        current = _to_version(current_version)
        target = _to_version(target_version)
    except ValueError:
        return "unknown"

    if target == current:
        return "same"
    if target < current:
        return "downgrade"

    for component in ("major", "minor", "patch"):
        if getattr(current, component) != getattr(target, component):
            return component
    return "update"


def _to_version(text: str) -> Version:
    return Version(text.strip().lstrip("vV"))
