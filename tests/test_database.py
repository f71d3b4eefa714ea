import duckdb
import pytest

from DayFlow.database import KeyValueStore, init_database
from DayFlow.errors import StorageUnavailable


def test_database_schema_creation(tmp_path, monkeypatch):
    db_path = tmp_path / "dayflow.db"
    monkeypatch.setattr("DayFlow.database.DB_PATH", db_path)
    init_database()
    assert db_path.exists()
    with duckdb.connect(str(db_path)) as conn:
        tables = set(row[0] for row in conn.execute("SHOW TABLES").fetchall())
        assert "kv_store" in tables
        columns = set(row[0] for row in conn.execute("DESCRIBE kv_store").fetchall())
        assert {"key", "value", "updated_at"} <= columns


def test_put_is_an_upsert(kv):
    assert kv.get("missing") is None
    kv.put("dayflow_categories", "[]")
    kv.put("dayflow_categories", '[{"id": "work"}]')
    assert kv.get("dayflow_categories") == '[{"id": "work"}]'
    assert kv.keys() == ["dayflow_categories"]


def test_keys_filters_by_prefix_and_sorts(kv):
    kv.put("dayflow_activities_2024-06-06", "[]")
    kv.put("dayflow_activities_2024-06-05", "[]")
    kv.put("dayflow_categories", "[]")
    assert kv.keys("dayflow_activities_") == [
        "dayflow_activities_2024-06-05",
        "dayflow_activities_2024-06-06",
    ]


def test_delete_removes_key(kv):
    kv.put("k", "v")
    kv.delete("k")
    assert kv.get("k") is None


def test_values_survive_reopen(settings):
    first = KeyValueStore(settings.db_path)
    first.put("k", "persisted")
    first.close()

    second = KeyValueStore(settings.db_path)
    try:
        assert second.get("k") == "persisted"
    finally:
        second.close()


def test_transaction_commits_all_writes(kv):
    with kv.transaction():
        kv.put("a", "1")
        kv.put("b", "2")
    assert kv.get("a") == "1"
    assert kv.get("b") == "2"


def test_transaction_rolls_back_on_error(kv):
    kv.put("a", "before")
    with pytest.raises(RuntimeError):
        with kv.transaction():
            kv.put("a", "after")
            kv.put("b", "new")
            raise RuntimeError("boom")
    assert kv.get("a") == "before"
    assert kv.get("b") is None


def test_nested_transaction_joins_outer(kv):
    with pytest.raises(RuntimeError):
        with kv.transaction():
            with kv.transaction():
                kv.put("inner", "1")
            raise RuntimeError("outer failed")
    assert kv.get("inner") is None


def test_unopenable_storage_raises_storage_unavailable(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")
    store = KeyValueStore(blocker / "dayflow.db")
    with pytest.raises(StorageUnavailable):
        store.get("anything")
