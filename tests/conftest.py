"""Shared test fixtures for toolstream."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest
import requests
from rich.console import Console

from toolstream.core.errors import PublishError
from toolstream.models.tools import ArtifactCandidate, BinaryVersion

FIXED_NOW = datetime(2013, 9, 24, 10, 30, 0, tzinfo=timezone.utc)


class MemoryStorage:
    """In-memory ``Storage`` with an optional failing name set."""

    def __init__(
        self,
        base_url: str = "https://storage.example.com/env",
        objects: dict[str, bytes] | None = None,
        *,
        fail_puts: set[str] | None = None,
        fail_list: bool = False,
    ) -> None:
        self.base_url = base_url
        self.objects: dict[str, bytes] = dict(objects or {})
        self.fail_puts = fail_puts or set()
        self.fail_list = fail_list
        self.puts: list[str] = []

    def get(self, name: str) -> bytes:
        return self.objects[name]

    def list(self, prefix: str) -> list[str]:
        if self.fail_list:
            raise requests.ConnectionError("storage unreachable")
        return sorted(n for n in self.objects if n.startswith(prefix))

    def url(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def put(self, name: str, data: bytes) -> None:
        if name in self.fail_puts:
            raise requests.ConnectionError(f"connection reset writing {name}")
        self.objects[name] = data
        self.puts.append(name)

    def __repr__(self) -> str:
        return f"MemoryStorage({self.base_url!r})"


class MemorySink:
    """``StorageSink`` over a ``MemoryStorage``, for orchestrator tests."""

    def __init__(self, storage: MemoryStorage) -> None:
        self._storage = storage

    @property
    def sink_name(self) -> str:
        return "memory"

    @property
    def storage(self) -> MemoryStorage:
        return self._storage

    def put(self, path: str, data: bytes) -> str:
        try:
            self._storage.put(path, data)
        except requests.RequestException as exc:
            raise PublishError(f"cannot write {path}: {exc}") from exc
        return path

    def resolve_address(self, path: str) -> str:
        return self._storage.url(path)


class StaticEnviron:
    """Environment with fixed storages."""

    def __init__(self, storage=None, public_storage=None, name: str = "test-env") -> None:
        self.name = name
        self.storage = storage
        self.public_storage = public_storage


@pytest.fixture
def make_storage() -> Callable[..., MemoryStorage]:
    """Factory fixture: build a MemoryStorage, optionally seeded with tools."""

    def _factory(
        *versions: str,
        base_url: str = "https://storage.example.com/env",
        objects: dict[str, bytes] | None = None,
        fail_puts: set[str] | None = None,
        fail_list: bool = False,
    ) -> MemoryStorage:
        seeded = {
            f"tools/juju-{version}.tgz": version.encode() * 3 for version in versions
        }
        seeded.update(objects or {})
        return MemoryStorage(base_url, seeded, fail_puts=fail_puts, fail_list=fail_list)

    return _factory


@pytest.fixture
def make_sink() -> Callable[[MemoryStorage], MemorySink]:
    """Factory fixture: wrap a MemoryStorage in a StorageSink."""
    return MemorySink


@pytest.fixture
def make_environ() -> Callable[..., StaticEnviron]:
    """Factory fixture: build an environment with fixed storages."""
    return StaticEnviron


@pytest.fixture
def memory_storage(make_storage) -> MemoryStorage:
    return make_storage()


@pytest.fixture
def quiet_console() -> Console:
    """A console writing to an in-memory buffer."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def make_candidate() -> Callable[..., ArtifactCandidate]:
    """Factory fixture: build an ArtifactCandidate from a binary version."""

    def _factory(
        version: str = "1.2.3-precise-amd64",
        url: str | None = None,
    ) -> ArtifactCandidate:
        url = url or f"https://host/tools/juju-{version}.tgz"
        return ArtifactCandidate(url=url, version=BinaryVersion.parse(version))

    return _factory


@pytest.fixture
def tools_dir(tmp_path: Path) -> Path:
    """A directory holding three tools tarballs in the standard layout."""
    root = tmp_path / "tools-root"
    tools = root / "tools"
    tools.mkdir(parents=True)
    for version, payload in [
        ("1.2.3-precise-amd64", b"precise-amd64 tarball"),
        ("1.2.3-precise-i386", b"precise-i386 tarball bytes"),
        ("1.3.0-raring-amd64", b"x" * 100_000),
    ]:
        (tools / f"juju-{version}.tgz").write_bytes(payload)
    (tools / "README").write_text("not a tarball")
    return root
