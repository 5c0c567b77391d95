"""Streaming size and SHA-256 computation for tools tarballs.

Content is consumed one chunk at a time, so a tarball of any size is hashed
without holding it in memory. A read that fails partway raises
``TransferError`` and yields no digest at all.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from typing import BinaryIO

import requests

from toolstream.core.errors import TransferError
from toolstream.models.metadata import ContentDigest

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 16


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


class ContentHasher:
    """Computes total length and SHA-256 of streamed content.

    Parameters
    ----------
    session:
        HTTP session used by :meth:`hash_url`. A new one is created if not
        provided.
    timeout:
        Per-request timeout in seconds passed to ``requests``.
    chunk_size:
        Bytes read per iteration.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._chunk_size = chunk_size

    def hash_stream(self, chunks: Iterable[bytes], *, source: str = "<stream>") -> ContentDigest:
        """Consume *chunks* to completion and return the digest."""
        digest = hashlib.sha256()
        size = 0
        try:
            for chunk in chunks:
                if not chunk:
                    continue
                digest.update(chunk)
                size += len(chunk)
        except (OSError, requests.RequestException) as exc:
            raise TransferError(
                f"reading {source} failed after {size} bytes: {exc}"
            ) from exc
        return ContentDigest(size=size, sha256=digest.hexdigest())

    def hash_file(self, fh: BinaryIO, *, source: str = "<file>") -> ContentDigest:
        """Hash a binary file object, reading it in fixed-size chunks."""
        return self.hash_stream(
            iter(lambda: fh.read(self._chunk_size), b""), source=source
        )

    def hash_url(self, url: str) -> ContentDigest:
        """Download *url* and hash the response body as it streams in."""
        logger.debug("Fetching %s for hashing", url)
        try:
            response = self._session.get(url, stream=True, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransferError(f"fetching {url} failed: {exc}") from exc
        with response:
            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise TransferError(f"fetching {url} failed: {exc}") from exc
            result = self.hash_stream(
                response.iter_content(chunk_size=self._chunk_size), source=url
            )
        logger.debug("Hashed %s: %d bytes sha256=%s", url, result.size, result.sha256)
        return result
