"""Unit tests for the record store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from catalog.database import RecordStore
from catalog.errors import ProductNotFound


@pytest.mark.unit
class TestRecordStore:
    def test_insert_assigns_increasing_ids(self, store: RecordStore) -> None:
        a = store.insert("x", "a")
        b = store.insert("y", "b")
        assert (a.id, b.id) == (1, 2)
        assert store.get(1).name == "a"
        assert len(store) == 2

    def test_ids_not_reused_after_remove(self, store: RecordStore) -> None:
        store.insert("x", "a")
        last = store.insert("x", "b")
        store.remove(last.id)
        assert store.insert("x", "c").id == last.id + 1

    def test_get_missing_raises(self, store: RecordStore) -> None:
        with pytest.raises(ProductNotFound) as exc:
            store.get(42)
        assert exc.value.product_id == 42

    def test_replace_keeps_id(self, store: RecordStore) -> None:
        p = store.insert("x", "a")
        updated = store.replace(p.id, "y", "b")
        assert updated.id == p.id
        assert store.get(p.id).category == "y"
        assert store.get(p.id).name == "b"

    def test_replace_and_remove_missing(self, store: RecordStore) -> None:
        with pytest.raises(ProductNotFound):
            store.replace(7, "x", "a")
        with pytest.raises(ProductNotFound):
            store.remove(7)

    def test_remove_returns_record(self, store: RecordStore) -> None:
        p = store.insert("x", "a")
        assert store.remove(p.id) == p
        assert p.id not in store

    def test_clear_resets_ids(self, store: RecordStore) -> None:
        store.insert("x", "a")
        store.clear()
        assert len(store) == 0
        assert store.insert("x", "b").id == 1


@pytest.mark.unit
class TestSnapshot:
    def test_reload_from_file(self, data_file: Path) -> None:
        store = RecordStore(data_file)
        store.insert("x", "a")
        b = store.insert("y", "b")
        store.remove(b.id)

        reopened = RecordStore(data_file)
        assert [p.name for p in reopened.items()] == ["a"]
        # the removed id stays burned after a restart
        assert reopened.insert("z", "c").id == b.id + 1

    def test_snapshot_format(self, data_file: Path) -> None:
        store = RecordStore(data_file)
        store.insert("x", "a")
        raw = json.loads(data_file.read_text(encoding="utf-8"))
        assert raw == {"next_id": 2, "products": [{"id": 1, "category": "x", "name": "a"}]}

    def test_corrupt_file_refuses_to_load(self, data_file: Path) -> None:
        data_file.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            RecordStore(data_file)

    def test_duplicate_ids_refuse_to_load(self, data_file: Path) -> None:
        entry = {"id": 1, "category": "x", "name": "a"}
        data_file.write_text(json.dumps({"next_id": 2, "products": [entry, entry]}), encoding="utf-8")
        with pytest.raises(ValueError):
            RecordStore(data_file)

    def test_failed_write_rolls_back(self, tmp_path: Path) -> None:
        store = RecordStore(tmp_path / "gone" / "catalog.json")
        # the parent directory does not exist, so every flush fails
        with pytest.raises(OSError):
            store.insert("x", "a")
        assert len(store) == 0
        assert store.next_id == 1
