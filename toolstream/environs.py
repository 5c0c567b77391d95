"""Environments — named bundles of the storages tools are published in.

An environment has a private ``storage`` (where generated metadata goes by
default) and an optional read-only ``public_storage`` consulted when the
private one holds no tools.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import requests

from toolstream.config import GeneratorSettings
from toolstream.storage.base import Storage
from toolstream.storage.http import HttpStorage


@runtime_checkable
class Environ(Protocol):
    """The storage accessors the pipeline needs from an environment."""

    @property
    def name(self) -> str:
        ...

    @property
    def storage(self) -> Storage | None:
        ...

    @property
    def public_storage(self) -> Storage | None:
        ...


class HttpEnviron:
    """An environment whose storages are reachable over HTTP.

    Parameters
    ----------
    name:
        Environment name, used in messages.
    storage:
        Private storage, or ``None`` when only a local directory is used.
    public_storage:
        Public storage searched for tools as a fallback.
    """

    def __init__(
        self,
        name: str,
        storage: Storage | None = None,
        public_storage: Storage | None = None,
    ) -> None:
        self._name = name
        self._storage = storage
        self._public_storage = public_storage

    @property
    def name(self) -> str:
        return self._name

    @property
    def storage(self) -> Storage | None:
        return self._storage

    @property
    def public_storage(self) -> Storage | None:
        return self._public_storage

    @classmethod
    def from_settings(
        cls, settings: GeneratorSettings, session: requests.Session | None = None
    ) -> HttpEnviron:
        """Build the environment described by *settings*."""
        session = session or requests.Session()
        timeout = settings.http_timeout
        storage = (
            HttpStorage(settings.storage_url, session, timeout=timeout)
            if settings.storage_url
            else None
        )
        public = (
            HttpStorage(settings.public_storage_url, session, timeout=timeout)
            if settings.public_storage_url
            else None
        )
        return cls(settings.environment_name, storage, public)

    def __repr__(self) -> str:
        return f"HttpEnviron({self._name!r})"
