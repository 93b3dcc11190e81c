"""Unit tests for the benchmark stores.

Every behavioural test runs against both the in-memory store and the
SQLAlchemy store on an in-memory SQLite database.
"""

import threading

import pytest

from llm_bench.models import drop_tables
from llm_bench.storage import DatabaseManager, InMemoryBenchmarkStore, SqlBenchmarkStore, build_store
from llm_bench.utils.errors import BenchmarkNotFoundError


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Fresh store for each backend."""
    if request.param == "memory":
        backend = InMemoryBenchmarkStore()
    else:
        backend = SqlBenchmarkStore(DatabaseManager("sqlite:///:memory:"))
    yield backend
    backend.close()


class TestCreate:
    """Test record creation."""

    def test_assigns_id_and_timestamp(self, store, record_data):
        record = store.create(record_data())

        assert record.id == 1
        assert record.created_at.tzinfo is not None
        assert record.model == "llama-3"
        assert record.favorite is False
        assert record.notes is None

    def test_ids_strictly_increasing(self, store, record_data):
        ids = [store.create(record_data()).id for _ in range(5)]

        assert ids == [1, 2, 3, 4, 5]

    def test_deleted_ids_never_reused(self, store, record_data):
        for _ in range(3):
            store.create(record_data())
        store.delete(3)
        store.delete(2)

        record = store.create(record_data())

        assert record.id == 4

    def test_scenario_delete_then_create(self, store, record_data):
        first = store.create(record_data())
        store.delete(first.id)

        with pytest.raises(BenchmarkNotFoundError):
            store.get(1)
        assert store.create(record_data()).id == 2

    def test_store_owned_keys_ignored(self, store, record_data):
        data = record_data()
        data.update({"id": 99, "createdAt": "2000-01-01T00:00:00Z", "api_key": "sk-123"})

        record = store.create(data)

        assert record.id == 1
        assert record.created_at.year != 2000

    def test_missing_model_stored_as_none(self, store, record_data):
        record = store.create(record_data(model=""))

        assert record.model is None

    def test_results_round_trip(self, store, record_data):
        data = record_data()
        created = store.create(data)

        assert store.get(created.id).results == data["results"]


class TestRead:
    """Test get, list and count."""

    def test_get_returns_created_record(self, store, record_data):
        created = store.create(record_data(notes="baseline"))

        fetched = store.get(created.id)

        assert fetched == created

    def test_get_unknown_id(self, store):
        with pytest.raises(BenchmarkNotFoundError) as exc_info:
            store.get(42)

        assert exc_info.value.benchmark_id == 42
        assert exc_info.value.code == "NOT_FOUND"

    def test_list_and_count(self, store, record_data):
        for model in ("a", "b", "c"):
            store.create(record_data(model=model))

        assert store.count() == 3
        assert [r.model for r in store.list()] == ["a", "b", "c"]
        assert [r.model for r in store.list(offset=1, limit=1)] == ["b"]

    def test_empty_store(self, store):
        assert store.list() == []
        assert store.count() == 0

    def test_health_check(self, store, record_data):
        store.create(record_data())

        health = store.health_check()

        assert health["status"] == "healthy"
        assert health["backend"] == store.backend_name
        assert health["statistics"]["record_count"] == 1


class TestUpdate:
    """Test partial updates of notes and favorite."""

    def test_toggle_favorite_keeps_identity(self, store, record_data):
        created = store.create(record_data())

        updated = store.update(created.id, favorite=True)

        assert updated.favorite is True
        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert store.get(created.id).favorite is True

    def test_unspecified_fields_untouched(self, store, record_data):
        created = store.create(record_data(notes="keep me"))

        updated = store.update(created.id, favorite=True)

        assert updated.notes == "keep me"

    def test_notes_only(self, store, record_data):
        created = store.create(record_data(favorite=True))

        updated = store.update(created.id, notes="slow warmup")

        assert updated.notes == "slow warmup"
        assert updated.favorite is True

    def test_clear_notes(self, store, record_data):
        created = store.create(record_data(notes="old"))

        assert store.update(created.id, notes=None).notes is None

    def test_returned_snapshot_is_unaffected_by_later_updates(self, store, record_data):
        created = store.create(record_data())

        store.update(created.id, favorite=True)

        assert created.favorite is False

    def test_update_unknown_id(self, store):
        with pytest.raises(BenchmarkNotFoundError):
            store.update(7, favorite=True)


class TestDelete:
    """Test permanent deletion."""

    def test_delete_removes_record(self, store, record_data):
        created = store.create(record_data())

        store.delete(created.id)

        assert store.count() == 0
        with pytest.raises(BenchmarkNotFoundError):
            store.get(created.id)

    def test_delete_unknown_id(self, store):
        with pytest.raises(BenchmarkNotFoundError):
            store.delete(1)

    def test_delete_twice(self, store, record_data):
        created = store.create(record_data())
        store.delete(created.id)

        with pytest.raises(BenchmarkNotFoundError):
            store.delete(created.id)


class TestConcurrency:
    """Test that concurrent writers never share an id."""

    def test_concurrent_creates_get_unique_ids(self, record_data):
        store = InMemoryBenchmarkStore()
        ids = []
        ids_lock = threading.Lock()

        def worker():
            for _ in range(20):
                record = store.create(record_data())
                with ids_lock:
                    ids.append(record.id)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(ids) == list(range(1, 101))
        assert store.count() == 100


class TestBuildStore:
    """Test store construction from configuration."""

    def test_memory_backend(self):
        assert isinstance(build_store("memory"), InMemoryBenchmarkStore)

    def test_sql_backend(self):
        store = build_store("sql", "sqlite:///:memory:")
        try:
            assert isinstance(store, SqlBenchmarkStore)
            assert store.health_check()["connection_test"] is True
        finally:
            store.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_store("redis")

    def test_sql_store_persists_across_managers(self, tmp_path, record_data):
        url = f"sqlite:///{tmp_path / 'bench.db'}"
        first = build_store("sql", url)
        created = first.create(record_data(notes="persisted"))
        first.close()

        second = build_store("sql", url)
        try:
            fetched = second.get(created.id)
            assert fetched.notes == "persisted"
            assert fetched.created_at == created.created_at
        finally:
            second.close()

    def test_sql_health_check_reports_missing_table(self):
        db_manager = DatabaseManager("sqlite:///:memory:")
        store = SqlBenchmarkStore(db_manager)
        drop_tables(db_manager.engine)
        try:
            health = store.health_check()
            assert health["status"] == "unhealthy"
            assert health["backend"] == "sql"
        finally:
            store.close()
