"""Tests for key-value stores and the recent-files history."""

import json
from pathlib import Path

import pytest

from nodeset_toolkit.importer.history import RECENT_FILES_KEY, RecentFileEntry, RecentFiles
from nodeset_toolkit.importer.storage import FileStore, KeyValueStore, MemoryStore, StoreError


class FailingStore:
    """Store whose every operation fails."""

    def get(self, key):
        raise StoreError("backend offline", key=key)

    def put(self, key, value):
        raise StoreError("backend offline", key=key)


def _entry(i: int, name: str = "") -> RecentFileEntry:
    return RecentFileEntry(id=f"id-{i}", name=name or f"file{i}.xml", size=100 + i, loaded_at=f"2024-01-{i + 1:02d}T00:00:00+00:00")


class TestStores:
    def test_memory_store_roundtrip(self):
        store = MemoryStore()
        assert store.get("k") is None
        store.put("k", b"v")
        assert store.get("k") == b"v"

    def test_stores_satisfy_protocol(self, tmp_path: Path):
        assert isinstance(MemoryStore(), KeyValueStore)
        assert isinstance(FileStore(tmp_path), KeyValueStore)

    def test_file_store_writes_json_file(self, tmp_path: Path):
        store = FileStore(tmp_path / "store")
        store.put(RECENT_FILES_KEY, b"[]")
        assert (tmp_path / "store" / f"{RECENT_FILES_KEY}.json").read_bytes() == b"[]"
        assert store.get(RECENT_FILES_KEY) == b"[]"
        assert not list((tmp_path / "store").glob("*.tmp"))
        assert (tmp_path / "store" / f"{RECENT_FILES_KEY}.lock").exists()

    def test_file_store_missing_key(self, tmp_path: Path):
        assert FileStore(tmp_path).get("absent") is None

    def test_file_store_rejects_path_like_keys(self, tmp_path: Path):
        with pytest.raises(StoreError):
            FileStore(tmp_path).put("../escape", b"x")

    def test_file_store_unusable_root_never_leaks_os_error(self, tmp_path: Path):
        store = FileStore(tmp_path / ("x" * 300))
        try:
            assert store.get("k") is None
        except StoreError:
            pass
        with pytest.raises(StoreError):
            store.put("k", b"x")

    def test_file_store_write_failure_raises_store_error(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(StoreError):
            FileStore(blocker).put("k", b"x")


class TestRecentFiles:
    def test_record_newest_first(self):
        history = RecentFiles(MemoryStore())
        history.record(_entry(1))
        history.record(_entry(2))
        assert [e.id for e in history.entries] == ["id-2", "id-1"]

    def test_capped_at_five(self):
        history = RecentFiles(MemoryStore())
        for i in range(6):
            history.record(_entry(i))
        names = [e.name for e in history.entries]
        assert names == ["file5.xml", "file4.xml", "file3.xml", "file2.xml", "file1.xml"]

    def test_same_name_replaces_older_entry(self):
        history = RecentFiles(MemoryStore())
        history.record(_entry(1, "a.xml"))
        history.record(_entry(2, "b.xml"))
        history.record(_entry(3, "a.xml"))
        assert [(e.name, e.id) for e in history.entries] == [("a.xml", "id-3"), ("b.xml", "id-2")]

    def test_persisted_and_reloaded(self):
        store = MemoryStore()
        RecentFiles(store).record(_entry(1))
        payload = json.loads(store.get(RECENT_FILES_KEY))
        assert payload[0]["loadedAt"] == "2024-01-02T00:00:00+00:00"
        assert RecentFiles(store).entries == [_entry(1)]

    def test_clear(self):
        store = MemoryStore()
        history = RecentFiles(store)
        history.record(_entry(1))
        history.clear()
        assert history.entries == []
        assert RecentFiles(store).entries == []

    def test_find(self):
        history = RecentFiles(MemoryStore())
        history.record(_entry(1, "a.xml"))
        assert history.find("a.xml").id == "id-1"
        assert history.find("b.xml") is None

    @pytest.mark.parametrize("raw", [
        b"{not json",
        b"\xff\xfe\x00garbage",
        json.dumps({"id": "x"}).encode(),
        json.dumps([{"id": "x", "name": "a.xml"}]).encode(),
    ])
    def test_corrupted_data_yields_empty(self, raw):
        history = RecentFiles(MemoryStore({RECENT_FILES_KEY: raw}))
        assert history.entries == []

    def test_failing_store_degrades_to_memory(self):
        history = RecentFiles(FailingStore())
        assert history.entries == []
        history.record(_entry(1))
        assert [e.id for e in history.entries] == ["id-1"]
