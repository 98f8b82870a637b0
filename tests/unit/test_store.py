import sqlite3

import pytest

from trip_expenses.infrastructure.store import KeyValueStore, MemoryStore, SQLiteStore, build_store
from trip_expenses.shared.exceptions import StoreError


def test_memory_store_roundtrip():
    store = MemoryStore()

    store.set("expense_list", "[]")
    assert store.get("expense_list") == "[]"
    store.delete("expense_list")
    assert store.get("expense_list") is None
    assert isinstance(store, KeyValueStore)


def test_sqlite_store_persists_across_instances(tmp_path):
    db_path = tmp_path / "nested" / "expenses.sqlite3"
    SQLiteStore(db_path).set("expense_list", '[{"id": "expense-1"}]')

    reopened = SQLiteStore(db_path)

    assert reopened.get("expense_list") == '[{"id": "expense-1"}]'
    reopened.set("expense_list", "[]")
    assert reopened.get("expense_list") == "[]"
    reopened.delete("expense_list")
    assert reopened.get("expense_list") is None


def test_sqlite_errors_surface_as_store_error(tmp_path, monkeypatch):
    store = SQLiteStore(tmp_path / "expenses.sqlite3")

    def broken_connect():
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(store, "_connect", broken_connect)

    with pytest.raises(StoreError):
        store.get("expense_list")
    with pytest.raises(StoreError):
        store.set("expense_list", "[]")


def test_build_store_defaults_to_memory(monkeypatch):
    monkeypatch.delenv("EXPENSE_STORE", raising=False)

    assert build_store().backend == "memory"


def test_build_store_sqlite(monkeypatch, tmp_path):
    monkeypatch.setenv("EXPENSE_STORE", "sqlite")
    monkeypatch.setenv("EXPENSE_STORE_PATH", str(tmp_path / "ledger.sqlite3"))

    assert build_store().backend == "sqlite"


def test_build_store_redis_without_url_falls_back(monkeypatch):
    monkeypatch.setenv("EXPENSE_STORE", "redis")
    monkeypatch.delenv("REDIS_URL", raising=False)

    assert build_store().backend == "memory"


def test_build_store_unknown_backend_falls_back(monkeypatch):
    monkeypatch.setenv("EXPENSE_STORE", "dynamo")

    assert build_store().backend == "memory"
