"""End-to-end integration tests — discovery through publish over real HTTP.

These tests run the Orchestrator against the loopback storage server, so the
hasher, discovery, assembler, encoder and both sinks work together.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path

import pytest

from toolstream.core.errors import TransferError
from toolstream.core.orchestrator import Orchestrator
from toolstream.core.simplestreams import index_product_ids, unmarshal_products
from toolstream.models.config import GenerateConfig
from toolstream.models.stages import PipelineState
from toolstream.storage import HttpStorage, serve

STREAMS = Path("tools") / "streams" / "v1"


def _tarballs(tools_dir: Path) -> dict[str, bytes]:
    return {
        f"tools/{p.name}": p.read_bytes()
        for p in (tools_dir / "tools").iterdir()
        if p.suffix == ".tgz"
    }


class TestLocalDirectoryPipeline:
    """generate-tools -d <dir>: tools found and metadata written in one directory."""

    @pytest.fixture
    def result(self, make_environ, tools_dir, quiet_console, clock):
        config = GenerateConfig(major_version=1, output_directory=str(tools_dir))
        orch = Orchestrator(make_environ(), config, console=quiet_console, clock=clock, timeout=10)
        return orch.run()

    def test_run_done(self, result):
        assert result.state == PipelineState.DONE
        assert len(result.records) == 3

    def test_hashes_match_file_contents(self, result, tools_dir):
        contents = _tarballs(tools_dir)
        for record in result.records:
            data = contents[record.path]
            assert record.size == len(data)
            assert record.sha256 == hashlib.sha256(data).hexdigest()

    def test_written_addresses_are_filesystem_paths(self, result, tools_dir):
        assert result.written == [
            os.path.join(str(tools_dir), str(STREAMS), "com.ubuntu.juju:released:tools.json"),
            os.path.join(str(tools_dir), str(STREAMS), "index.json"),
        ]
        for address in result.written:
            assert Path(address).is_file()

    def test_documents_consistent(self, result, tools_dir):
        products_raw = (tools_dir / STREAMS / "com.ubuntu.juju:released:tools.json").read_bytes()
        index_raw = (tools_dir / STREAMS / "index.json").read_bytes()
        assert unmarshal_products(products_raw) == result.records
        assert index_product_ids(index_raw) == sorted(json.loads(products_raw)["products"])

    def test_documents_indented(self, result, tools_dir):
        index_text = (tools_dir / STREAMS / "index.json").read_text()
        assert index_text.startswith('{\n    "')

    def test_tarballs_untouched(self, result, tools_dir):
        assert _tarballs(tools_dir)["tools/juju-1.3.0-raring-amd64.tgz"] == b"x" * 100_000

    def test_rerun_overwrites(self, make_environ, result, tools_dir, quiet_console, clock):
        config = GenerateConfig(major_version=1, fetch=False, output_directory=str(tools_dir))
        again = Orchestrator(make_environ(), config, console=quiet_console, clock=clock).run()
        products_raw = (tools_dir / STREAMS / "com.ubuntu.juju:released:tools.json").read_bytes()
        assert unmarshal_products(products_raw) == again.records
        assert all(r.sha256 == "" for r in again.records)


class TestEnvironStoragePipeline:
    """Metadata published to an environment's HTTP storage."""

    @pytest.fixture
    def storage_server(self, tools_dir):
        server = serve(tools_dir)
        try:
            yield server
        finally:
            server.close()

    def test_publishes_to_environ_storage(self, make_environ, storage_server, tools_dir, quiet_console, clock):
        storage = HttpStorage(storage_server.address, timeout=10)
        environ = make_environ(storage=storage)
        orch = Orchestrator(
            environ, GenerateConfig(major_version=1), console=quiet_console, clock=clock, timeout=10
        )
        result = orch.run()

        assert result.written == [
            storage.url("tools/streams/v1/com.ubuntu.juju:released:tools.json"),
            storage.url("tools/streams/v1/index.json"),
        ]
        assert unmarshal_products(storage.get("tools/streams/v1/com.ubuntu.juju:released:tools.json")) == result.records
        assert (tools_dir / STREAMS / "index.json").is_file()

    def test_public_fallback_publishes_privately(self, make_environ, tools_dir, tmp_path, quiet_console, clock):
        private_dir = tmp_path / "private"
        with serve(tools_dir) as public_server, serve(private_dir) as private_server:
            environ = make_environ(
                storage=HttpStorage(private_server.address, timeout=10),
                public_storage=HttpStorage(public_server.address, timeout=10),
            )
            result = Orchestrator(
                environ, GenerateConfig(major_version=1, fetch=False), console=quiet_console, clock=clock
            ).run()
        assert len(result.records) == 3
        assert (private_dir / STREAMS / "index.json").is_file()
        assert not (tools_dir / STREAMS).exists()

    def test_missing_tarball_fails_without_writing(self, make_environ, storage_server, tools_dir, quiet_console, clock):
        storage = HttpStorage(storage_server.address, timeout=10)

        class _VanishingStorage:
            """Lists a tarball that is gone by the time it is fetched."""

            def __getattr__(self, name):
                return getattr(storage, name)

            def list(self, prefix):
                return storage.list(prefix) + ["tools/juju-1.9.9-precise-amd64.tgz"]

        orch = Orchestrator(
            make_environ(storage=_VanishingStorage()),
            GenerateConfig(major_version=1),
            console=quiet_console,
            clock=clock,
            timeout=10,
        )
        with pytest.raises(TransferError):
            orch.run()
        assert orch.state == PipelineState.FAILED
        assert not (tools_dir / STREAMS).exists()
