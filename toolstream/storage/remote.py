"""Environment storage sink — publishes into an environment's own storage."""

from __future__ import annotations

import logging

import requests

from toolstream.core.errors import PublishError
from toolstream.storage.base import Storage

logger = logging.getLogger(__name__)


class EnvironStorageSink:
    """Delegates writes to an environment's ``Storage``.

    Parameters
    ----------
    storage:
        The environment's (private) storage.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    @property
    def sink_name(self) -> str:
        return "environ"

    @property
    def storage(self) -> Storage:
        return self._storage

    def put(self, path: str, data: bytes) -> str:
        try:
            self._storage.put(path, data)
        except (OSError, requests.RequestException) as exc:
            raise PublishError(f"cannot write {path}: {exc}") from exc
        logger.debug("EnvironStorageSink: wrote %d bytes to %s", len(data), path)
        return path

    def resolve_address(self, path: str) -> str:
        """Return the storage URL for *path*."""
        return self._storage.url(path)
