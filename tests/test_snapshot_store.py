"""
Tests for the snapshot storage adapters.

Covers:
    - MemorySnapshotStore load/save/clear
    - JsonFileSnapshotStore: missing file, round trip, unreadable content
    - SqlSnapshotStore: empty table, insert then update of a single row
    - build_snapshot_store backend selection
"""

import pytest

from journeymap.core.exceptions import StorageError
from journeymap.models.entities import AppState
from journeymap.models.snapshot import StoredSnapshot
from journeymap.services.snapshot_store import (
    JsonFileSnapshotStore,
    MemorySnapshotStore,
    SqlSnapshotStore,
    build_snapshot_store,
)


class _FakeApp:
    def __init__(self, **config):
        self.config = config


class TestMemoryStore:
    def test_empty(self):
        assert MemorySnapshotStore().load() == AppState()

    def test_save_load_clear(self, state):
        store = MemorySnapshotStore()
        store.save(state)
        assert store.load() == state
        store.clear()
        assert store.load() == AppState()

    def test_initial(self, sample_snapshot):
        assert [c.name for c in MemorySnapshotStore(sample_snapshot).load().clients] == ["Acme", "Empty Co"]


class TestJsonFileStore:
    def test_missing_file(self, tmp_path):
        assert JsonFileSnapshotStore(tmp_path / "none.json").load() == AppState()

    def test_round_trip(self, tmp_path, state):
        store = JsonFileSnapshotStore(tmp_path / "nested" / "state.json")
        store.save(state)
        assert store.path.exists()
        assert store.load() == state

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileSnapshotStore(path).load()

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileSnapshotStore(path).load()


class TestSqlStore:
    def test_empty(self):
        assert SqlSnapshotStore("test-key").load() == AppState()

    def test_save_then_update(self, state):
        store = SqlSnapshotStore("test-key")
        store.save(state)
        assert store.load() == state

        store.save(AppState())
        assert store.load() == AppState()
        assert StoredSnapshot.query.filter_by(key="test-key").count() == 1

    def test_keys_are_independent(self, state):
        SqlSnapshotStore("a").save(state)
        assert SqlSnapshotStore("b").load() == AppState()


class TestBuildStore:
    def test_memory(self):
        assert isinstance(build_snapshot_store(_FakeApp(STORAGE_BACKEND="memory")), MemorySnapshotStore)

    def test_json(self, tmp_path):
        store = build_snapshot_store(_FakeApp(STORAGE_BACKEND="json", SNAPSHOT_PATH=str(tmp_path / "s.json")))
        assert isinstance(store, JsonFileSnapshotStore)

    def test_sql(self):
        store = build_snapshot_store(_FakeApp(STORAGE_BACKEND="sql", SNAPSHOT_KEY="k"))
        assert isinstance(store, SqlSnapshotStore)
        assert store.key == "k"

    def test_unknown(self):
        with pytest.raises(RuntimeError):
            build_snapshot_store(_FakeApp(STORAGE_BACKEND="redis"))

    def test_testing_app_uses_memory(self, app):
        assert isinstance(app.extensions["snapshot_store"], MemorySnapshotStore)
