"""Local directory sink — a directory fronted by a loopback storage server.

Writes go over HTTP to a ``LocalStorageServer`` bound to an ephemeral
loopback port, so the directory behaves exactly like remote storage.
Addresses resolve to filesystem paths under the directory.
"""

from __future__ import annotations

import logging
import os

import requests

from toolstream.core.errors import PublishError
from toolstream.models.config import normalize_path
from toolstream.storage.http import HttpStorage
from toolstream.storage.localserver import LocalStorageServer, serve

logger = logging.getLogger(__name__)


class LocalDirectorySink:
    """Publishes into *directory* through a loopback storage server.

    The server starts on construction and stops on :meth:`close` (or when
    leaving the ``with`` block), whether or not the run succeeded.

    Parameters
    ----------
    directory:
        Directory holding tools and receiving metadata. ``~`` is expanded
        and relative paths are made absolute.
    session:
        HTTP session for talking to the loopback server.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        directory: str,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self._directory = normalize_path(directory)
        self._server: LocalStorageServer = serve(self._directory, "127.0.0.1:0")
        self._storage = HttpStorage(self._server.address, session, timeout=timeout)

    @property
    def sink_name(self) -> str:
        return "local_dir"

    @property
    def storage(self) -> HttpStorage:
        return self._storage

    @property
    def directory(self) -> str:
        return self._directory

    @property
    def address(self) -> str:
        """The ``host:port`` the loopback server is bound to."""
        return self._server.address

    def put(self, path: str, data: bytes) -> str:
        try:
            self._storage.put(path, data)
        except requests.RequestException as exc:
            raise PublishError(
                f"cannot write {self.resolve_address(path)}: {exc}"
            ) from exc
        logger.debug("LocalDirectorySink: wrote %d bytes to %s", len(data), path)
        return path

    def resolve_address(self, path: str) -> str:
        """Return ``<directory>/<path>``."""
        return os.path.join(self._directory, *path.split("/"))

    def close(self) -> None:
        self._server.close()

    def __enter__(self) -> LocalDirectorySink:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
