# SalesPro Tests - Record Store
#
# Tests for:
# - Identifier assignment and non-reuse after delete / clear
# - Secondary index lookups
# - Fixed-key settings collection
# - Schema bootstrap idempotency
# - Snapshot replace (all-or-nothing)

import sqlite3

import pytest

from salespro.constants import ATTENDANCE, CRM, SALES, SETTINGS, SETTINGS_KEY
from salespro.db.database import Database
from salespro.db.schema import SCHEMA_VERSION
from salespro.errors import StorageError, StorageUnavailableError
from salespro.models.settings import default_settings
from tests.conftest import make_sale, run


def _sale_record(day="2024-06-10", price=100.0):
    rec = make_sale(day=day, price=price).to_record()
    rec.pop("id")
    return rec


class TestIdentifiers:

    def test_ids_strictly_increase(self, store):
        first = run(store.create(SALES, _sale_record()))
        second = run(store.create(SALES, _sale_record()))
        assert second > first

    def test_deleted_id_is_never_reused(self, store):
        """Deleting the newest record must not hand its id out again."""
        ids = [run(store.create(SALES, _sale_record())) for _ in range(3)]
        run(store.delete(SALES, ids[-1]))
        fresh = run(store.create(SALES, _sale_record()))
        assert fresh > ids[-1]

    def test_clear_keeps_counting(self, store):
        last = run(store.create(SALES, _sale_record()))
        run(store.clear(SALES))
        assert run(store.count(SALES)) == 0
        assert run(store.create(SALES, _sale_record())) > last

    def test_create_ignores_supplied_id(self, store):
        first = run(store.create(SALES, _sale_record()))
        rec = _sale_record()
        rec["id"] = first
        second = run(store.create(SALES, rec))
        assert second != first
        assert run(store.count(SALES)) == 2


class TestReadsAndWrites:

    def test_put_replaces_whole_record(self, store):
        key = run(store.create(SALES, _sale_record(price=100.0)))
        rec = run(store.get(SALES, key))
        rec["price"] = 250.0
        rec["bill_id"] = None
        assert run(store.put(SALES, rec)) == key
        assert run(store.get(SALES, key))["price"] == 250.0
        assert run(store.count(SALES)) == 1

    def test_get_missing_returns_none(self, store):
        assert run(store.get(SALES, 999)) is None

    def test_by_date_index(self, store):
        run(store.create(SALES, _sale_record(day="2024-06-01")))
        run(store.create(SALES, _sale_record(day="2024-06-02")))
        run(store.create(SALES, _sale_record(day="2024-06-02")))
        rows = run(store.get_by_index(SALES, "by-date", "2024-06-02"))
        assert len(rows) == 2
        assert all(r["date"] == "2024-06-02" for r in rows)

    def test_by_status_index(self, store):
        base = {
            "date": "2024-06-01", "timestamp": 1, "category": "Complaint",
            "customer_name": "A", "contact_number": "9876543210",
            "product": "", "message": "",
        }
        run(store.create(CRM, {**base, "status": "Open"}))
        run(store.create(CRM, {**base, "status": "Closed"}))
        assert len(run(store.get_by_index(CRM, "by-status", "Closed"))) == 1

    def test_unknown_index_rejected(self, store):
        with pytest.raises(ValueError):
            run(store.get_by_index(ATTENDANCE, "by-status", "Present"))

    def test_unknown_collection_rejected(self, store):
        with pytest.raises(ValueError):
            run(store.get_all("orders"))

    def test_settings_need_explicit_key(self, store):
        with pytest.raises(ValueError):
            run(store.create(SETTINGS, {"user_name": "x"}))
        rec = {**default_settings().to_record(), "user_name": "x"}
        assert run(store.put(SETTINGS, rec)) == SETTINGS_KEY
        assert run(store.get(SETTINGS, SETTINGS_KEY))["user_name"] == "x"


class TestSchema:

    def test_initialize_is_idempotent(self, db):
        db.initialize_schema()
        db.initialize_schema()
        assert db.schema_version() == SCHEMA_VERSION

    def test_migration_adds_missing_columns(self, tmp_path):
        path = tmp_path / "old.db"
        conn = sqlite3.connect(path)
        conn.execute(
            "CREATE TABLE sales (id INTEGER PRIMARY KEY AUTOINCREMENT, date TEXT NOT NULL,"
            " timestamp INTEGER NOT NULL, product_name TEXT NOT NULL, quantity INTEGER NOT NULL,"
            " price REAL NOT NULL, bill_image BLOB, bill_id TEXT);"
        )
        conn.commit()
        conn.close()

        db = Database(path)
        db.connect()
        db.initialize_schema()
        try:
            assert {"bill_image_type", "bill_number", "customer_number"} <= db._table_columns("sales")
        finally:
            db.disconnect()

    def test_not_connected_is_unavailable(self, tmp_path):
        db = Database(tmp_path / "never.db")
        with pytest.raises(StorageUnavailableError):
            db.fetchall("SELECT 1;")

    def test_corrupt_file_is_unavailable(self, tmp_path):
        path = tmp_path / "garbage.db"
        path.write_bytes(b"this is not a sqlite database at all" * 100)
        db = Database(path)
        db.connect()
        try:
            with pytest.raises(StorageError):
                db.initialize_schema()
        finally:
            db.disconnect()


class TestReplaceAll:

    def test_replace_keeps_ids_and_drops_the_rest(self, store):
        run(store.create(SALES, _sale_record()))
        run(store.create(SALES, _sale_record()))
        snapshot = {SALES: [{**_sale_record(day="2023-01-01"), "id": 42}]}
        counts = run(store.replace_all(snapshot))
        assert counts[SALES] == 1
        assert counts[ATTENDANCE] == 0
        rows = run(store.get_all(SALES))
        assert [r["id"] for r in rows] == [42]
        assert run(store.create(SALES, _sale_record())) > 42

    def test_failed_replace_rolls_back(self, store):
        key = run(store.create(SALES, _sale_record()))
        bad = {**_sale_record(), "id": 7, "product_name": None}  # NOT NULL violation
        with pytest.raises(StorageError):
            run(store.replace_all({SALES: [bad]}))
        rows = run(store.get_all(SALES))
        assert [r["id"] for r in rows] == [key]
