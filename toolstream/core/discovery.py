"""Tools discovery — lists tools tarballs in an environment's storages.

Tools live at ``tools/juju-<number>-<series>-<arch>.tgz``. Storages are
searched in order; the first holding any tools for the requested major
version supplies all of them.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import requests

from toolstream.core.errors import DiscoveryError
from toolstream.models.tools import ArtifactCandidate, BinaryVersion, ToolsFilter
from toolstream.storage.base import Storage

logger = logging.getLogger(__name__)

TOOLS_PREFIX = "tools/juju-"
TOOLS_SUFFIX = ".tgz"


def tools_name(version: BinaryVersion) -> str:
    """Return the storage name for tools of *version*."""
    return f"{TOOLS_PREFIX}{version}{TOOLS_SUFFIX}"


class ArtifactDiscovery:
    """Finds tools candidates across an ordered list of storages.

    Parameters
    ----------
    storages:
        Storages to search, most preferred first (private, then public).
    """

    def __init__(self, storages: Sequence[Storage]) -> None:
        self._storages = list(storages)

    def read_list(self, storage: Storage, major_version: int) -> list[ArtifactCandidate]:
        """Return every tools candidate for *major_version* in *storage*."""
        prefix = f"{TOOLS_PREFIX}{major_version}."
        try:
            names = storage.list(prefix)
        except (OSError, requests.RequestException) as exc:
            raise DiscoveryError(f"cannot list tools in {storage!r}: {exc}") from exc

        candidates = []
        for name in names:
            if not name.startswith(prefix) or not name.endswith(TOOLS_SUFFIX):
                continue
            text = name[len(TOOLS_PREFIX):-len(TOOLS_SUFFIX)]
            try:
                version = BinaryVersion.parse(text)
            except ValueError as exc:
                raise DiscoveryError(
                    f"malformed tools name {name!r} in {storage!r}: {exc}"
                ) from exc
            candidates.append(ArtifactCandidate(url=storage.url(name), version=version))
        return candidates

    def find_tools(
        self, major_version: int, tools_filter: ToolsFilter | None = None
    ) -> list[ArtifactCandidate]:
        """Return matching candidates, sorted by version, series, arch.

        An empty result is not an error.
        """
        tools_filter = tools_filter or ToolsFilter()
        found: list[ArtifactCandidate] = []
        for storage in self._storages:
            found = self.read_list(storage, major_version)
            if found:
                logger.debug("Found %d tools in %r", len(found), storage)
                break
        matching = [c for c in found if tools_filter.matches(c.version)]
        return sorted(matching, key=ArtifactCandidate.sort_key)
