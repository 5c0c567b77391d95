"""HTTP client for storage served with the local-storage protocol.

``GET /<name>`` reads an object, ``GET /<prefix>*`` lists names (one per
line) and ``PUT /<name>`` writes one. ``LocalStorageServer`` speaks this
protocol for a local directory.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

_SAFE = "/:"


class HttpStorage:
    """``Storage`` implementation backed by an HTTP endpoint.

    Parameters
    ----------
    base_url:
        Root URL of the storage, e.g. ``http://127.0.0.1:8040``. A bare
        ``host:port`` address is accepted and treated as plain HTTP.
    session:
        Shared HTTP session. A new one is created if not provided.
    timeout:
        Per-request timeout in seconds.

    Transport failures surface as ``requests`` exceptions; callers wrap
    them in the pipeline error that fits their step.
    """

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        if "://" not in base_url:
            base_url = f"http://{base_url}"
        self._base = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base

    def url(self, name: str) -> str:
        return f"{self._base}/{quote(name, safe=_SAFE)}"

    def get(self, name: str) -> bytes:
        response = self._session.get(self.url(name), timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def list(self, prefix: str) -> list[str]:
        response = self._session.get(
            f"{self._base}/{quote(prefix, safe=_SAFE)}*", timeout=self._timeout
        )
        response.raise_for_status()
        names = [line for line in response.text.splitlines() if line]
        return sorted(names)

    def put(self, name: str, data: bytes) -> None:
        logger.debug("PUT %s (%d bytes)", name, len(data))
        response = self._session.put(
            self.url(name), data=data, timeout=self._timeout
        )
        response.raise_for_status()

    def __repr__(self) -> str:
        return f"HttpStorage({self._base!r})"
