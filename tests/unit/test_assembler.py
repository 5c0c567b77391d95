"""Tests for MetadataAssembler — record building, fetch modes, path heuristic."""

from __future__ import annotations

import pytest

from toolstream.core.assembler import MetadataAssembler, storage_path_from_url
from toolstream.core.errors import EncodingError, TransferError
from toolstream.core.hasher import sha256_hex
from toolstream.core.simplestreams import unmarshal_products
from toolstream.models.metadata import ContentDigest, ToolsMetadataRecord

SCENARIO_URL = "https://host/tools/1.2.3/ubuntu-amd64.tar.gz"
SCENARIO_CONTENT = bytes(range(42))


class _StubHasher:
    """Returns digests of fixed per-URL content; raises for listed URLs."""

    def __init__(self, contents: dict[str, bytes], failing: set[str] | None = None) -> None:
        self.contents = contents
        self.failing = failing or set()
        self.fetched: list[str] = []

    def hash_url(self, url: str) -> ContentDigest:
        self.fetched.append(url)
        if url in self.failing:
            raise TransferError(f"fetching {url} failed: connection reset")
        data = self.contents[url]
        return ContentDigest(size=len(data), sha256=sha256_hex(data))


class TestStoragePathFromUrl:
    def test_strips_scheme_host_and_separator(self):
        assert storage_path_from_url(SCENARIO_URL) == "tools/1.2.3/ubuntu-amd64.tar.gz"

    def test_no_leading_separator_for_doubled_slash(self):
        assert storage_path_from_url("https://host//tools/x.tgz") == "tools/x.tgz"

    def test_percent_decoded(self):
        assert storage_path_from_url("http://127.0.0.1:1/tools/a%3Ab.tgz") == "tools/a:b.tgz"

    def test_query_ignored(self):
        assert storage_path_from_url("https://host/tools/x.tgz?sig=abc") == "tools/x.tgz"

    def test_not_relative_to_storage_base(self):
        # Private and public storages under different bucket prefixes yield
        # different paths for the same tarball: the base URL is not removed.
        private = storage_path_from_url("https://s3.example.com/env-bucket/tools/juju-1.2.3-precise-amd64.tgz")
        public = storage_path_from_url("https://tools.example.com/tools/juju-1.2.3-precise-amd64.tgz")
        assert private == "env-bucket/tools/juju-1.2.3-precise-amd64.tgz"
        assert public == "tools/juju-1.2.3-precise-amd64.tgz"

    def test_empty_path_raises(self):
        with pytest.raises(EncodingError):
            storage_path_from_url("https://host")


class TestMetadataAssembler:
    def test_fetch_enabled_scenario(self, make_candidate):
        candidate = make_candidate("1.2.3-ubuntu-amd64", url=SCENARIO_URL)
        hasher = _StubHasher({SCENARIO_URL: SCENARIO_CONTENT})
        record = MetadataAssembler(hasher, fetch=True).process(candidate)
        assert record == ToolsMetadataRecord(
            release="ubuntu",
            version="1.2.3",
            arch="amd64",
            path="tools/1.2.3/ubuntu-amd64.tar.gz",
            file_type="tar.gz",
            size=42,
            sha256=sha256_hex(SCENARIO_CONTENT),
        )

    def test_fetch_disabled_scenario(self, make_candidate):
        candidate = make_candidate("1.2.3-ubuntu-amd64", url=SCENARIO_URL)
        hasher = _StubHasher({})
        record = MetadataAssembler(hasher, fetch=False).process(candidate)
        assert record.size == 0
        assert record.sha256 == ""
        assert record.path == "tools/1.2.3/ubuntu-amd64.tar.gz"
        assert hasher.fetched == []

    def test_digest_for_is_none_without_fetch(self, make_candidate):
        assembler = MetadataAssembler(_StubHasher({}), fetch=False)
        assert assembler.digest_for(make_candidate()) is None

    def test_transfer_error_propagates(self, make_candidate):
        candidate = make_candidate()
        hasher = _StubHasher({}, failing={candidate.url})
        assembler = MetadataAssembler(hasher, fetch=True)
        with pytest.raises(TransferError):
            assembler.process(candidate)
        assert assembler.records == []

    def test_records_accumulate_in_order(self, make_candidate):
        assembler = MetadataAssembler(_StubHasher({}), fetch=False)
        for version in ["1.2.3-raring-amd64", "1.2.3-precise-amd64"]:
            assembler.process(make_candidate(version))
        assert [r.release for r in assembler.records] == ["raring", "precise"]

    def test_records_is_a_copy(self, make_candidate):
        assembler = MetadataAssembler(_StubHasher({}), fetch=False)
        assembler.process(make_candidate())
        assembler.records.clear()
        assert len(assembler.records) == 1

    def test_serialize_produces_pair(self, make_candidate, clock):
        assembler = MetadataAssembler(_StubHasher({}), fetch=False)
        assembler.process(make_candidate("1.2.3-precise-amd64"))
        pair = assembler.serialize(clock())
        assert unmarshal_products(pair.products) == assembler.records

    def test_serialize_with_no_candidates(self, clock):
        pair = MetadataAssembler(_StubHasher({}), fetch=True).serialize(clock())
        assert unmarshal_products(pair.products) == []

    def test_every_path_is_relative(self, make_candidate):
        assembler = MetadataAssembler(_StubHasher({}), fetch=False)
        for url in [
            "https://host/tools/juju-1.2.3-precise-amd64.tgz",
            "http://127.0.0.1:8040//tools/juju-1.2.3-precise-i386.tgz",
            "https://bucket.example.com/env/tools/juju-1.2.3-raring-amd64.tgz",
        ]:
            assembler.process(make_candidate("1.2.3-precise-amd64", url=url))
        assert all(not r.path.startswith("/") for r in assembler.records)
