"""Storage backends and publishing sinks.

Two ``StorageSink`` implementations share one contract:

- ``EnvironStorageSink`` publishes to the environment's own storage;
- ``LocalDirectorySink`` publishes to a local directory served on loopback.

``open_sink`` picks one at startup from the run configuration.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from typing import TYPE_CHECKING

import requests

from toolstream.core.errors import PublishError
from toolstream.models.config import GenerateConfig
from toolstream.storage.base import Storage, StorageSink
from toolstream.storage.http import HttpStorage
from toolstream.storage.local_dir import LocalDirectorySink
from toolstream.storage.localserver import LocalStorageServer, serve
from toolstream.storage.remote import EnvironStorageSink

if TYPE_CHECKING:
    from toolstream.environs import Environ


@contextlib.contextmanager
def open_sink(
    config: GenerateConfig,
    environ: Environ,
    session: requests.Session | None = None,
    *,
    timeout: float | None = None,
) -> Iterator[StorageSink]:
    """Yield the sink for *config*, tearing it down on exit.

    Raises
    ------
    PublishError
        If the local directory cannot be served, or no local directory is
        configured and the environment has no writable storage.
    """
    if config.local:
        try:
            local = LocalDirectorySink(config.output_directory, session, timeout=timeout)
        except OSError as exc:
            raise PublishError(f"cannot serve {config.output_directory}: {exc}") from exc
        with local as sink:
            yield sink
        return
    if environ.storage is None:
        raise PublishError(
            f"environment {environ.name!r} has no storage to publish to; "
            "configure a storage URL or an output directory"
        )
    yield EnvironStorageSink(environ.storage)


__all__ = [
    "Storage",
    "StorageSink",
    "HttpStorage",
    "LocalStorageServer",
    "serve",
    "EnvironStorageSink",
    "LocalDirectorySink",
    "open_sink",
]
