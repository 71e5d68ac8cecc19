"""Target React version resolution.

Turns what the user typed after ``--react`` into a published React version
and supplies the lists the interactive picker offers.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from react_compat.utils.logger import get_logger
from react_compat.exceptions import InvalidVersionInputError
from react_compat.constants import REACT_PACKAGE
from react_compat.models.catalog import VersionCatalog
from react_compat.core.data_store import NpmDataStore

logger = get_logger("react_versions")

__all__ = ["ReactVersionResolver"]

_MAJOR_MINOR = re.compile(r"^(\d+)(?:\.(\d+))?$")


class ReactVersionResolver:
    """Resolves and lists versions of the ``react`` package.

    Registry errors propagate unchanged: without React's own metadata no
    analysis is possible.

    Args:
        data_store: Shared registry cache.
    """

    def __init__(self, data_store: NpmDataStore) -> None:
        self.data_store = data_store

    async def _catalog(self) -> VersionCatalog:
        return await self.data_store.get_package_data(REACT_PACKAGE)

    async def stable_versions(self, limit: Optional[int] = None) -> List[str]:
        """Return stable React versions, newest first."""
        catalog = await self._catalog()
        versions = [raw for raw, _ in catalog.parsed_versions()]
        return versions[:limit] if limit is not None else versions

    async def major_versions(self, limit: Optional[int] = None) -> List[str]:
        """Return the newest stable release of each major, majors descending.

        Example::

            >>> await resolver.major_versions(limit=3)
            ['19.1.0', '18.3.1', '17.0.2']
        """
        catalog = await self._catalog()
        newest: Dict[int, str] = {}
        for raw, parsed in catalog.parsed_versions():
            newest.setdefault(parsed.major, raw)
        versions = list(newest.values())
        return versions[:limit] if limit is not None else versions

    async def resolve(self, requested: str) -> str:
        """Resolve user input to a published React version.

        Accepted forms: an exact published version (``"18.2.0"``, a leading
        ``v`` is fine), a major (``"18"`` → newest stable 18.x.y) or a
        major.minor (``"18.2"`` → newest stable 18.2.z).

        Raises:
            InvalidVersionInputError: The input matches no published version.
        """
        text = requested.strip()
        if text[:1] in ("v", "V"):
            text = text[1:]

        catalog = await self._catalog()
        if text in catalog.versions:
            return text

        match = _MAJOR_MINOR.match(text)
        if match is not None:
            major = int(match.group(1))
            minor = int(match.group(2)) if match.group(2) is not None else None
            for raw, parsed in catalog.parsed_versions():
                if parsed.major == major and (minor is None or parsed.minor == minor):
                    logger.info("Resolved React %s to %s", requested, raw)
                    return raw

        raise InvalidVersionInputError(
            f"Invalid or unknown React version: {requested}",
            requested=requested,
        )
