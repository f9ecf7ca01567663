"""
Contract tests for the catalog store, run against both backings.
"""
import json
import random
import threading

import pytest
from sqlalchemy import text

from domain.errors import NotFound, StoreUnavailable
from domain.models import MANUAL_ENTRY_SOURCE, Work
from services.catalog_store import (
    JsonCatalogStore,
    SqlCatalogStore,
    build_catalog_store,
    decode_catalog,
    encode_catalog,
)
from settings import Settings


def _as_map(works):
    return {w.id: w for w in works}


class TestStoreContract:
    def test_create_then_get(self, store):
        created = store.create("A. Author", "T1", "000")
        assert created.id
        fetched = store.get(created.id)
        assert fetched == created
        assert fetched.from_import is False
        assert fetched.source == MANUAL_ENTRY_SOURCE

    def test_create_get_delete_leaves_catalog_empty(self, store):
        created = store.create("A. Author", "T1", "000")
        fetched = store.get(created.id)
        assert (fetched.author, fetched.title, fetched.isbn) == ("A. Author", "T1", "000")
        store.delete(created.id)
        assert store.list_all() == []

    def test_delete_then_get_is_not_found(self, store):
        created = store.create("A", "T", "1")
        store.delete(created.id)
        with pytest.raises(NotFound):
            store.get(created.id)

    def test_unknown_ids_raise_not_found(self, store):
        with pytest.raises(NotFound):
            store.get("missing")
        with pytest.raises(NotFound):
            store.update("missing", "A", "T", "1")
        with pytest.raises(NotFound):
            store.delete("missing")

    def test_update_only_touches_editable_fields(self, store):
        store.merge([Work(id="x1", author="B", title="T2", isbn="111", source="libsys", from_import=True)])
        updated = store.update("x1", "C", "T3", "222")
        assert updated == Work(id="x1", author="C", title="T3", isbn="222", source="libsys", from_import=True)
        assert store.get("x1") == updated

    def test_merge_overwrites_manual_entry(self, store):
        manual = store.create("A", "Manual", "1")
        store.merge([Work(id=manual.id, author="B", title="Imported", isbn="2", source="libsys", from_import=True)])
        merged = store.get(manual.id)
        assert merged.title == "Imported"
        assert merged.source == "libsys"
        assert merged.from_import is True
        assert len(store.list_all()) == 1

    def test_merge_counts_distinct_ids(self, store):
        batch = [
            Work(id="a", title="first", from_import=True),
            Work(id="a", title="second", from_import=True),
            Work(id="b", title="other", from_import=True),
        ]
        assert store.merge(batch) == 2
        assert store.get("a").title == "second"

    def test_export_round_trips_to_list_all(self, store):
        store.create("A", "T1", "1")
        store.create("Ünïcode", "T2", "")
        store.merge([Work(id="x1", author="B", title="T3", isbn="3", source="libsys", from_import=True)])
        snapshot = store.export_snapshot()
        assert decode_catalog(snapshot) == _as_map(store.list_all())
        assert store.export_snapshot() == snapshot

    def test_random_operations_match_reference_mapping(self, store):
        rng = random.Random(1234)
        reference = {}
        for step in range(60):
            op = rng.choice(["create", "create", "update", "delete"])
            if op == "create" or not reference:
                work = store.create(f"author{step}", f"title{step}", str(step))
                reference[work.id] = work
            elif op == "update":
                work_id = rng.choice(sorted(reference))
                reference[work_id] = reference[work_id].with_fields("edited", f"t{step}", "")
                store.update(work_id, "edited", f"t{step}", "")
            else:
                work_id = rng.choice(sorted(reference))
                del reference[work_id]
                store.delete(work_id)
        assert _as_map(store.list_all()) == reference

    def test_concurrent_creates_are_not_lost(self, store):
        errors = []

        def worker(n):
            try:
                for i in range(10):
                    store.create(f"worker{n}", f"title{i}", "")
            except Exception as e:  # pragma: no cover - surfaced by the assert below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(store.list_all()) == 40


class TestJsonCatalogStore:
    def test_missing_file_bootstraps_empty_catalog(self, tmp_path):
        store = JsonCatalogStore(tmp_path / "nested" / "catalog.json")
        assert store.list_all() == []
        store.create("A", "T", "1")
        assert (tmp_path / "nested" / "catalog.json").exists()

    def test_every_mutation_persists_full_catalog(self, tmp_path):
        path = tmp_path / "catalog.json"
        store = JsonCatalogStore(path)
        work = store.create("A", "T", "1")
        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert on_disk[work.id]["title"] == "T"
        assert on_disk[work.id]["from_import"] is False

        reopened = JsonCatalogStore(path)
        assert reopened.get(work.id) == work

    def test_malformed_file_is_store_unavailable(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonCatalogStore(path)
        with pytest.raises(StoreUnavailable):
            store.list_all()
        with pytest.raises(StoreUnavailable):
            store.create("A", "T", "1")
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_write_failure_keeps_previous_catalog(self, tmp_path, monkeypatch):
        path = tmp_path / "catalog.json"
        store = JsonCatalogStore(path)
        existing = store.create("A", "T", "1")
        before = path.read_bytes()

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("storage.file_storage.os.replace", boom)
        with pytest.raises(StoreUnavailable):
            store.create("B", "T2", "2")
        monkeypatch.undo()

        assert path.read_bytes() == before
        assert store.list_all() == [existing]
        assert [p.name for p in tmp_path.iterdir()] == ["catalog.json"]

    def test_loads_legacy_catalog_layout(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(
            json.dumps({
                "abc": {"id": "abc", "author": "A", "title": "T", "isbn": "1", "source": "manual entry", "FromImport": False},
                "x1": {"id": "x1", "author": "B", "title": "T2", "isbn": "111", "source": "libsys", "FromImport": True},
            }),
            encoding="utf-8",
        )
        store = JsonCatalogStore(path)
        assert store.get("x1").from_import is True
        assert store.get("abc").from_import is False


class TestSqlCatalogStore:
    def test_database_failure_is_store_unavailable(self, tmp_path):
        store = SqlCatalogStore.from_url(f"sqlite:///{tmp_path / 'works.db'}")
        with store.engine.begin() as conn:
            conn.execute(text("DROP TABLE works"))
        with pytest.raises(StoreUnavailable):
            store.list_all()
        with pytest.raises(StoreUnavailable):
            store.create("A", "T", "1")
        store.engine.dispose()

    def test_rows_survive_reopen(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'works.db'}"
        store = SqlCatalogStore.from_url(url)
        work = store.create("A", "T", "1")
        store.engine.dispose()

        reopened = SqlCatalogStore.from_url(url)
        assert reopened.get(work.id) == work
        reopened.engine.dispose()


def test_encode_is_deterministic_and_decodable():
    works = {
        "b": Work(id="b", title="B"),
        "a": Work(id="a", title="A", source="libsys", from_import=True),
    }
    reordered = {"a": works["a"], "b": works["b"]}
    assert encode_catalog(works) == encode_catalog(reordered)
    assert decode_catalog(encode_catalog(works)) == works


def test_decode_rejects_non_object_documents():
    with pytest.raises(ValueError):
        decode_catalog(b"[]")
    with pytest.raises(ValueError):
        decode_catalog(b'{"a": "not an object"}')


def test_build_catalog_store_selects_backing(tmp_path, monkeypatch):
    monkeypatch.setenv("CATALOG_BACKEND", "json")
    monkeypatch.setenv("CATALOG_PATH", str(tmp_path / "catalog.json"))
    assert isinstance(build_catalog_store(Settings.from_env()), JsonCatalogStore)

    monkeypatch.setenv("CATALOG_BACKEND", "sqlite")
    monkeypatch.setenv("CATALOG_DATABASE_URL", f"sqlite:///{tmp_path / 'works.db'}")
    sql_store = build_catalog_store(Settings.from_env())
    assert isinstance(sql_store, SqlCatalogStore)
    sql_store.engine.dispose()

    monkeypatch.setenv("CATALOG_BACKEND", "postgres-please")
    with pytest.raises(ValueError):
        build_catalog_store(Settings.from_env())


def test_decode_uses_key_only_when_id_is_absent():
    works = decode_catalog(b'{"a": {"title": "T"}}')
    assert list(works) == ["a"]
    assert works["a"].id == "a"
    with pytest.raises(ValueError):
        decode_catalog(b'{"a": {"id": null, "title": "T"}}')


def test_string_import_flag_is_store_unavailable(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text('{"a": {"id": "a", "title": "T", "from_import": "false"}}', encoding="utf-8")
    store = JsonCatalogStore(path)
    with pytest.raises(StoreUnavailable):
        store.list_all()
