"""Builds tools metadata records from discovered candidates."""

from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import unquote, urlparse

from toolstream.core.errors import EncodingError
from toolstream.core.hasher import ContentHasher
from toolstream.core.simplestreams import marshal_tools_metadata
from toolstream.models.metadata import (
    TOOLS_FILE_TYPE,
    ContentDigest,
    MetadataDocumentPair,
    ToolsMetadataRecord,
)
from toolstream.models.tools import ArtifactCandidate

logger = logging.getLogger(__name__)


def storage_path_from_url(url: str) -> str:
    """Return the path of *url* without its leading separator.

    The path is taken verbatim from the URL: it is not made relative to any
    storage base URL, because at this point there is no telling whether the
    tools came from private or public storage.
    """
    path = unquote(urlparse(url).path).lstrip("/")
    if not path:
        raise EncodingError(f"cannot derive a storage path from {url!r}")
    return path


class MetadataAssembler:
    """Accumulates one ``ToolsMetadataRecord`` per candidate.

    Parameters
    ----------
    hasher:
        Used to fetch and hash each tarball when *fetch* is true.
    fetch:
        Whether to download tarballs to fill in ``size`` and ``sha256``.
    """

    def __init__(self, hasher: ContentHasher | None = None, *, fetch: bool = True) -> None:
        self._hasher = hasher or ContentHasher()
        self._fetch = fetch
        self._records: list[ToolsMetadataRecord] = []

    @property
    def fetch(self) -> bool:
        return self._fetch

    @property
    def records(self) -> list[ToolsMetadataRecord]:
        """Records assembled so far, in candidate order."""
        return list(self._records)

    def digest_for(self, candidate: ArtifactCandidate) -> ContentDigest | None:
        """Fetch and hash *candidate*, or return ``None`` if fetching is off.

        ``TransferError`` from the hasher propagates unchanged.
        """
        if not self._fetch:
            return None
        return self._hasher.hash_url(candidate.url)

    def append(
        self, candidate: ArtifactCandidate, digest: ContentDigest | None
    ) -> ToolsMetadataRecord:
        record = ToolsMetadataRecord(
            release=candidate.series,
            version=str(candidate.number),
            arch=candidate.arch,
            path=storage_path_from_url(candidate.url),
            file_type=TOOLS_FILE_TYPE,
            size=digest.size if digest else 0,
            sha256=digest.sha256 if digest else "",
        )
        self._records.append(record)
        return record

    def process(self, candidate: ArtifactCandidate) -> ToolsMetadataRecord:
        """Hash (if enabled) and record a single candidate."""
        return self.append(candidate, self.digest_for(candidate))

    def serialize(self, updated: datetime) -> MetadataDocumentPair:
        """Encode every record assembled so far as an index/products pair."""
        logger.debug("Serializing %d tools records", len(self._records))
        return marshal_tools_metadata(self._records, updated)
