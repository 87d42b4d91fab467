"""Key-value store backends plus snapshot export/restore."""

from __future__ import annotations

from pathlib import Path
from typing import Generator, List

import psycopg
import pytest
from pydantic import TypeAdapter, ValidationError

from crm_panel.config import DatabaseConfig, Settings
from crm_panel.models import Customer
from crm_panel.storage import (
    FileStore,
    KeyValueStore,
    MemoryStore,
    PostgresStore,
    create_store,
    export_snapshot,
    restore_snapshot,
)

CUSTOMERS = TypeAdapter(List[Customer])


@pytest.fixture(params=["memory", "file"])
def backend(request: pytest.FixtureRequest, tmp_path: Path) -> KeyValueStore:
    """Run the shared contract against each local backend."""
    if request.param == "file":
        return FileStore(tmp_path / "storage")
    return MemoryStore()


@pytest.fixture
def pg_store() -> Generator[PostgresStore, None, None]:
    try:
        store = PostgresStore(DatabaseConfig.from_env())
    except psycopg.OperationalError as exc:  # pragma: no cover - environment dependent
        pytest.skip(f"Postgres backend unavailable: {exc}")
    store.clear()
    try:
        yield store
    finally:
        store.clear()
        store.close()


# ------------------------------------------------------------------------------
# Shared contract
# ------------------------------------------------------------------------------


def test_raw_round_trip_and_remove(backend: KeyValueStore) -> None:
    assert backend.get_raw("customers") is None
    backend.set_raw("customers", "[]")
    assert backend.get_raw("customers") == "[]"
    assert backend.contains("customers")

    assert backend.remove("customers") is True
    assert backend.remove("customers") is False
    assert backend.get_raw("customers") is None


def test_keys_are_sorted_and_clear_empties_store(backend: KeyValueStore) -> None:
    backend.set_raw("staff", "[]")
    backend.set_raw("customers", "[]")
    backend.set_raw("user_pref_theme", '"dark"')

    assert backend.keys() == ["customers", "staff", "user_pref_theme"]
    backend.clear()
    assert backend.keys() == []


def test_typed_items_use_the_adapter(backend: KeyValueStore) -> None:
    customer = Customer(first_name="Ada", last_name="Lovelace", email="ada@example.com")
    backend.set_item("customers", [customer], CUSTOMERS)

    loaded = backend.get_item("customers", CUSTOMERS)
    assert loaded is not None
    assert loaded[0].id == customer.id
    assert loaded[0].email == "ada@example.com"


def test_get_item_raises_on_corrupt_payload(backend: KeyValueStore) -> None:
    backend.set_raw("customers", "{not json")
    with pytest.raises(ValidationError):
        backend.get_item("customers", CUSTOMERS)


def test_file_store_rejects_unsafe_keys(tmp_path: Path) -> None:
    store = FileStore(tmp_path)
    with pytest.raises(ValueError, match="Storage key"):
        store.set_raw("../escape", "{}")


def test_file_store_persists_between_instances(tmp_path: Path) -> None:
    FileStore(tmp_path).set_raw("ui_settings", '{"theme": "dark"}')

    reopened = FileStore(tmp_path)
    assert reopened.get_raw("ui_settings") == '{"theme": "dark"}'
    assert (tmp_path / "ui_settings.json").exists()


# ------------------------------------------------------------------------------
# Factory and snapshots
# ------------------------------------------------------------------------------


def test_create_store_selects_backend(tmp_path: Path) -> None:
    database = DatabaseConfig(host="localhost", port=5432, user="crm", password="crm", dbname="crm_panel")
    assert isinstance(create_store(Settings(database=database)), MemoryStore)

    file_settings = Settings(storage_backend="file", storage_path=tmp_path, database=database)
    store = create_store(file_settings)
    assert isinstance(store, FileStore)
    assert store.root == tmp_path


def test_snapshot_restores_previous_state() -> None:
    store = MemoryStore({"customers": "[]", "staff": "[1]"})
    snapshot = export_snapshot(store)
    store.set_raw("customers", "[2]")
    store.set_raw("leads", "[]")

    restored = restore_snapshot(store, snapshot)

    assert restored == 2
    assert store.keys() == ["customers", "staff"]
    assert store.get_raw("customers") == "[]"


def test_snapshot_can_select_keys_and_merge() -> None:
    source = MemoryStore({"customers": "[]", "staff": "[]", "missing_ok": "1"})
    snapshot = export_snapshot(source, keys=["customers", "absent"])
    assert snapshot == {"customers": "[]"}

    target = MemoryStore({"leads": "[]"})
    restore_snapshot(target, snapshot, clear=False)
    assert target.keys() == ["customers", "leads"]


# ------------------------------------------------------------------------------
# Postgres
# ------------------------------------------------------------------------------


def test_postgres_store_upserts_and_lists(pg_store: PostgresStore) -> None:
    pg_store.set_raw("customers", "[]")
    pg_store.set_raw("customers", '[{"first_name": "Ada"}]')
    pg_store.set_raw("staff", "[]")

    assert pg_store.get_raw("customers") == '[{"first_name": "Ada"}]'
    assert pg_store.keys() == ["customers", "staff"]
    assert pg_store.remove("staff") is True
    assert pg_store.remove("staff") is False
