"""npm version-range evaluation for react-compat-check.

Decides whether a candidate React version satisfies a package's peer range.
Ranges are parsed with :class:`semantic_version.NpmSpec`, which implements
the npm grammar (``^``, ``~``, x-ranges, hyphen ranges and ``||`` unions).

Registries contain plenty of hand-written ranges that npm itself tolerates
but a strict parser rejects, e.g. ``">= 16.8.0"`` or ``"^16.8.0||^17"``.
:func:`normalize_range` therefore parses strictly first and, on failure,
retries once with a tidied rewrite of the range. A range that fails both
attempts evaluates to :attr:`CompatibilityStatus.UNKNOWN`.

Everything here is pure and deterministic.

Typical usage::

    >>> evaluate("19.0.0", "^16.8.0 || ^19.0.0")
    <CompatibilityStatus.COMPATIBLE: 'compatible'>
    >>> evaluate("19.0.0", None)
    <CompatibilityStatus.UNKNOWN: 'unknown'>
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Union

import semantic_version

from react_compat.utils.logger import get_logger
from react_compat.models.dependency import CompatibilityStatus

logger = get_logger("range_matcher")

__all__ = [
    "coerce_version",
    "evaluate",
    "extract_installed_version",
    "normalize_range",
    "parse_version",
    "rewrite_range",
    "satisfies",
]

VersionLike = Union[str, semantic_version.Version]

# ``||`` with any surrounding whitespace
_OR_SEPARATOR = re.compile(r"\s*\|\|\s*")

# Comparison operator separated from its version by whitespace
_DETACHED_OPERATOR = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")

# One- or two-component version, optionally behind an operator
_PARTIAL_BLOCK = re.compile(r"^(<=|>=|<|>|=|\^|~)?[vV]?(\d+)(?:\.(\d+))?$")

# First numeric run, the way npm's coerce() finds it
_COERCIBLE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")

# Leading range operators on a declared dependency
_RANGE_PREFIX = re.compile(r"^[\^~>=<]+")

# A full MAJOR.MINOR.PATCH, keeping any pre-release or build suffix
_EXACT_VERSION = re.compile(
    r"\d+\.\d+\.\d+(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
)


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


def parse_version(text: Optional[str]) -> Optional[semantic_version.Version]:
    """Parse a strict semantic version, returning ``None`` when invalid.

    A single leading ``v`` and surrounding whitespace are tolerated.
    """
    if not text:
        return None
    cleaned = text.strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:]
    try:
        return semantic_version.Version(cleaned)
    except ValueError:
        return None


def coerce_version(value: Optional[VersionLike]) -> Optional[semantic_version.Version]:
    """Coerce loose input to a plain ``MAJOR.MINOR.PATCH`` version.

    Leading noise is skipped and missing components default to zero, so
    ``"v19"`` becomes ``19.0.0`` and ``"18.2"`` becomes ``18.2.0``.
    Pre-release and build suffixes are dropped.

    Returns:
        The coerced version, or ``None`` when no digits are present.
    """
    if value is None:
        return None
    if isinstance(value, semantic_version.Version):
        return semantic_version.Version(
            major=value.major, minor=value.minor, patch=value.patch
        )

    match = _COERCIBLE.search(value)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return semantic_version.Version(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
    )


def extract_installed_version(declared: str) -> str:
    """Reduce a declared dependency range to the version it pins.

    Leading operators are removed and the first full ``MAJOR.MINOR.PATCH``
    (with any pre-release tag) is returned. When there is none, the
    operator-stripped text is returned unchanged.

    Example::

        >>> extract_installed_version("^1.2.3 || ^2.0.0")
        '1.2.3'
        >>> extract_installed_version("~2.0")
        '2.0'
    """
    stripped = _RANGE_PREFIX.sub("", declared.strip())
    match = _EXACT_VERSION.search(stripped)
    return match.group(0) if match else stripped


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------


@lru_cache(maxsize=2048)
def _parse_spec(range_text: str) -> Optional[semantic_version.NpmSpec]:
    try:
        return semantic_version.NpmSpec(range_text)
    except ValueError:
        return None


def _pad_block(block: str) -> str:
    """Pad ``16`` to ``16.0.0`` and ``16.8`` to ``16.8.0``, keeping the operator."""
    match = _PARTIAL_BLOCK.match(block)
    if match is None:
        return block
    operator, major, minor = match.groups()
    return f"{operator or ''}{major}.{minor or 0}.0"


def rewrite_range(range_text: str) -> str:
    """Return a tidied version of a loosely written npm range.

    Each ``||`` alternative is cleaned independently:

    * whitespace is collapsed and ``||`` is rendered as ``" || "``;
    * hyphen ranges (``"16.8 - 19"``) are left as written;
    * otherwise operators are attached to their versions (``">= 16"``
      becomes ``">=16"``) and one- or two-component versions are padded.

    The result is not guaranteed to be valid.
    """
    alternatives = []
    for alternative in _OR_SEPARATOR.split(range_text.strip()):
        alternative = " ".join(alternative.split())
        if " - " in alternative:
            alternatives.append(alternative)
            continue
        alternative = _DETACHED_OPERATOR.sub(r"\1", alternative)
        alternatives.append(" ".join(_pad_block(b) for b in alternative.split(" ")))
    return " || ".join(alternatives)


def normalize_range(range_text: Optional[str]) -> Optional[semantic_version.NpmSpec]:
    """Parse an npm range, retrying once with :func:`rewrite_range`.

    Returns:
        The parsed range, or ``None`` when the range is absent, blank, or
        unparsable even after rewriting.
    """
    if range_text is None:
        return None
    text = range_text.strip()
    if not text:
        return None

    spec = _parse_spec(text)
    if spec is not None:
        return spec

    rewritten = rewrite_range(text)
    if rewritten != text:
        spec = _parse_spec(rewritten)
        if spec is not None:
            logger.debug("Parsed range %r as %r", range_text, rewritten)
            return spec

    logger.debug("Unparsable range %r", range_text)
    return None


def satisfies(version: Optional[VersionLike], range_text: Optional[str]) -> Optional[bool]:
    """Return whether ``version`` (coerced) lies within ``range_text``.

    Returns:
        ``True`` or ``False``, or ``None`` when the range cannot be parsed or
        the version cannot be coerced.
    """
    spec = normalize_range(range_text)
    if spec is None:
        return None
    candidate = coerce_version(version)
    if candidate is None:
        return None
    return spec.match(candidate)


def evaluate(
    candidate: Optional[VersionLike],
    range_text: Optional[str],
) -> CompatibilityStatus:
    """Decide whether ``candidate`` satisfies a peer range.

    Args:
        candidate: Target version, coerced before matching.
        range_text: npm range, or ``None`` when no peer range is declared.

    Returns:
        ``COMPATIBLE`` or ``INCOMPATIBLE``; ``UNKNOWN`` when the range is
        absent or unparsable, or the candidate cannot be coerced.
    """
    matched = satisfies(candidate, range_text)
    if matched is None:
        return CompatibilityStatus.UNKNOWN
    return CompatibilityStatus.COMPATIBLE if matched else CompatibilityStatus.INCOMPATIBLE
