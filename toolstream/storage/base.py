"""Storage and sink protocols.

``Storage`` is the object store an environment exposes. ``StorageSink`` is
what the orchestrator publishes through; it has two interchangeable
implementations, selected once at startup by ``open_sink``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Name-addressed object store."""

    def get(self, name: str) -> bytes:
        """Return the content stored under *name*."""
        ...

    def list(self, prefix: str) -> list[str]:
        """Return the sorted names that start with *prefix*."""
        ...

    def url(self, name: str) -> str:
        """Return a URL clients can use to retrieve *name*."""
        ...

    def put(self, name: str, data: bytes) -> None:
        """Store *data* under *name*, replacing any previous content."""
        ...


@runtime_checkable
class StorageSink(Protocol):
    """Publishing target for generated metadata.

    Attributes
    ----------
    sink_name : str
        Human-readable identifier (``"environ"``, ``"local_dir"``).
    storage : Storage
        The store behind the sink; discovery reads tools from it.
    """

    @property
    def sink_name(self) -> str:
        ...

    @property
    def storage(self) -> Storage:
        ...

    def put(self, path: str, data: bytes) -> str:
        """Write *data* at logical *path* and return the path.

        Raises
        ------
        PublishError
            If the write fails for any reason.
        """
        ...

    def resolve_address(self, path: str) -> str:
        """Return where *path* lives, for progress reporting only."""
        ...
