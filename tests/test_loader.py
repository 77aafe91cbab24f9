"""Unit tests for TraceLoader and the blob stores (pure filesystem, no browser)."""

from __future__ import annotations

import json
import os
import tempfile

import pytest

from tracelens.core.config import RESOURCES_DIR_ENV, default_resources_dir, dom_trace_path, network_trace_path
from tracelens.core.errors import TraceParseError
from tracelens.storage.blob_store import FileBlobStore, InMemoryBlobStore
from tracelens.storage.loader import TraceLoader, load_trace
from tracelens.storage.snapshot_storage import SnapshotStorage


def write_lines(path: str, records: list) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for r in records:
            f.write((r if isinstance(r, str) else json.dumps(r)) + "\n")


NETWORK = [
    {"resourceId": "r1", "frameId": "f1", "url": "http://x/a", "contentHash": "h1"},
    {"resourceId": "r2", "frameId": "f1", "url": "http://x/b", "contentHash": "h2"},
]
DOM = [
    {"frameId": "f1", "pageId": "f1", "isMainFrame": True, "snapshotName": "s1"},
]


class TestTraceLoader:
    def setup_method(self):
        self.tmpdir = tempfile.mkdtemp()
        self.prefix = os.path.join(self.tmpdir, "trace")
        self.storage = SnapshotStorage()

    async def test_round_trip(self):
        write_lines(network_trace_path(self.prefix), NETWORK)
        write_lines(dom_trace_path(self.prefix), DOM)

        stats = await self.storage.load(self.prefix)

        assert stats.resources == 2
        assert stats.snapshots == 1
        assert [r.resource_id for r in self.storage.resources()] == ["r1", "r2"]
        renderer = self.storage.snapshot_by_name("f1", "s1")
        assert renderer is not None
        ids = {ref.resource_id for url in renderer.resource_urls() for ref in renderer.references(url)}
        assert ids == {"r1", "r2"}

    async def test_blank_lines_skipped(self):
        write_lines(network_trace_path(self.prefix), ["", json.dumps(NETWORK[0]), "   ", json.dumps(NETWORK[1])])
        write_lines(dom_trace_path(self.prefix), ["", json.dumps(DOM[0])])
        stats = await TraceLoader(self.storage).load(self.prefix)
        assert stats.resources == 2
        assert stats.snapshots == 1

    async def test_network_replayed_before_dom(self):
        # Every snapshot sees every resource, regardless of timestamps
        write_lines(network_trace_path(self.prefix), [
            {**NETWORK[0], "timestamp": 100},
            {**NETWORK[1], "timestamp": 300},
        ])
        write_lines(dom_trace_path(self.prefix), [{**DOM[0], "timestamp": 200}])
        await self.storage.load(self.prefix)
        renderer = self.storage.snapshot_by_name("f1", "s1")
        assert sorted(renderer.resource_urls()) == ["http://x/a", "http://x/b"]

    async def test_subscribers_notified_during_load(self):
        write_lines(network_trace_path(self.prefix), NETWORK)
        write_lines(dom_trace_path(self.prefix), DOM + [{**DOM[0], "snapshotName": "s2"}])
        seen = []
        self.storage.subscribe(seen.append)
        await self.storage.load(self.prefix)
        assert [r.snapshot_name for r in seen] == ["s1", "s2"]

    async def test_malformed_network_line_aborts(self):
        write_lines(network_trace_path(self.prefix), [NETWORK[0], "{not json", NETWORK[1]])
        write_lines(dom_trace_path(self.prefix), DOM)
        with pytest.raises(TraceParseError) as exc_info:
            await self.storage.load(self.prefix)
        assert exc_info.value.line_number == 2
        assert exc_info.value.path == network_trace_path(self.prefix)
        assert self.storage.resources() == []
        assert self.storage.snapshot_by_name("f1", "s1") is None

    async def test_malformed_dom_line_aborts(self):
        write_lines(network_trace_path(self.prefix), NETWORK)
        write_lines(dom_trace_path(self.prefix), [DOM[0], {"frameId": "f2"}])
        with pytest.raises(TraceParseError) as exc_info:
            await self.storage.load(self.prefix)
        assert exc_info.value.line_number == 2
        # Network log was fully replayed before the DOM log failed
        assert len(self.storage.resources()) == 2
        assert self.storage.snapshot_by_name("f1", "s1") is None

    async def test_invalid_utf8_line_aborts_with_location(self):
        with open(network_trace_path(self.prefix), "wb") as f:
            f.write(json.dumps(NETWORK[0]).encode() + b"\n")
            f.write(b"{\"resourceId\": \"r2\", \"url\": \"http://x/\xff\"}\n")
        write_lines(dom_trace_path(self.prefix), DOM)
        with pytest.raises(TraceParseError) as exc_info:
            await self.storage.load(self.prefix)
        assert exc_info.value.line_number == 2
        assert exc_info.value.path == network_trace_path(self.prefix)
        assert self.storage.resources() == []

    async def test_non_object_line_aborts(self):
        write_lines(network_trace_path(self.prefix), ["[1, 2, 3]"])
        write_lines(dom_trace_path(self.prefix), DOM)
        with pytest.raises(TraceParseError):
            await self.storage.load(self.prefix)

    async def test_missing_trace_file_raises(self):
        with pytest.raises(FileNotFoundError):
            await self.storage.load(os.path.join(self.tmpdir, "absent"))

    async def test_load_trace_uses_file_blob_store(self):
        resources_dir = os.path.join(self.tmpdir, "resources")
        os.makedirs(resources_dir)
        with open(os.path.join(resources_dir, "h1"), "wb") as f:
            f.write(b"<html></html>")
        write_lines(network_trace_path(self.prefix), NETWORK)
        write_lines(dom_trace_path(self.prefix), DOM)

        storage = await load_trace(self.prefix, resources_dir=resources_dir)

        assert isinstance(storage.blob_store, FileBlobStore)
        assert storage.resource_content("h1") == b"<html></html>"
        with pytest.raises(FileNotFoundError):
            storage.resource_content("h2")


class TestBlobStores:
    def setup_method(self):
        self.tmpdir = tempfile.mkdtemp()

    def test_file_store_put_and_get(self):
        store = FileBlobStore(os.path.join(self.tmpdir, "blobs"))
        store.put("abc", b"data")
        assert "abc" in store
        assert store.get("abc") == b"data"
        assert os.path.isfile(os.path.join(self.tmpdir, "blobs", "abc"))

    def test_file_store_missing_blob_raises(self):
        store = FileBlobStore(self.tmpdir)
        assert "nope" not in store
        with pytest.raises(FileNotFoundError):
            store.get("nope")

    def test_file_store_rejects_paths_outside_dir(self):
        store = FileBlobStore(os.path.join(self.tmpdir, "blobs"))
        with open(os.path.join(self.tmpdir, "secret"), "wb") as f:
            f.write(b"outside")
        for bad in ("../secret", "a/b", "..", ""):
            assert bad not in store
            with pytest.raises(ValueError):
                store.get(bad)
            with pytest.raises(ValueError):
                store.put(bad, b"x")
        assert not os.path.exists(os.path.join(self.tmpdir, "blobs"))

    def test_in_memory_store(self):
        store = InMemoryBlobStore()
        store.put("abc", b"data")
        assert "abc" in store
        assert len(store) == 1
        assert store.get("abc") == b"data"
        with pytest.raises(KeyError):
            store.get("nope")

    def test_default_resources_dir_from_env(self, monkeypatch):
        monkeypatch.setenv(RESOURCES_DIR_ENV, self.tmpdir)
        assert default_resources_dir() == self.tmpdir
        assert FileBlobStore().resources_dir == FileBlobStore(self.tmpdir).resources_dir

    def test_default_resources_dir_fallback(self, monkeypatch):
        monkeypatch.delenv(RESOURCES_DIR_ENV, raising=False)
        assert default_resources_dir().endswith(os.path.join(".tracelens", "resources"))
