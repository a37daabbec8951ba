"""
Asynchronous keyed collections on top of Database.

Blocking sqlite calls run on a worker thread through asyncio.to_thread so
callers await every operation. Each call is atomic on its own; replace_all()
and dump_all() span every collection inside one transaction.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional

import structlog

from salespro.db.database import Database
from salespro.db.schema import COLLECTIONS, CollectionSpec

logger = structlog.get_logger(__name__)

Record = dict[str, Any]


def _spec(collection: str) -> CollectionSpec:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


class RecordStore:
    def __init__(self, db: Database):
        self.db = db
        self._locks: dict[str, asyncio.Lock] = {}

    def lock(self, collection: str) -> asyncio.Lock:
        """
        Per-collection write queue for read-then-write sequences.
        Plain store calls never take it themselves.
        """
        _spec(collection)
        if collection not in self._locks:
            self._locks[collection] = asyncio.Lock()
        return self._locks[collection]

    # ---- sync helpers (run on a worker thread) ----

    def _insert(self, spec: CollectionSpec, record: Record) -> int:
        cols = ", ".join(spec.columns)
        marks = ",".join("?" for _ in spec.columns)
        return self.db.execute_id(
            f"INSERT INTO {spec.name}({cols}) VALUES({marks});",
            [record.get(c) for c in spec.columns],
        )

    def _upsert(self, spec: CollectionSpec, record: Record) -> Any:
        key = record.get(spec.key)
        if key is None:
            if not spec.auto_key:
                raise ValueError(f"{spec.name} records need an explicit {spec.key!r}")
            return self._insert(spec, record)
        cols = (spec.key,) + spec.columns
        marks = ",".join("?" for _ in cols)
        self.db.execute(
            f"INSERT OR REPLACE INTO {spec.name}({', '.join(cols)}) VALUES({marks});",
            [record.get(c) for c in cols],
        )
        return key

    def _select_all(self, spec: CollectionSpec) -> list[Record]:
        rows = self.db.fetchall(f"SELECT * FROM {spec.name} ORDER BY {spec.key};")
        return [dict(r) for r in rows]

    # ---- public API ----

    async def create(self, collection: str, record: Record) -> int:
        """Insert with a fresh identifier; any id in record is ignored."""
        spec = _spec(collection)
        if not spec.auto_key:
            raise ValueError(f"{collection} has a fixed key; use put()")
        key = await asyncio.to_thread(self._insert, spec, record)
        logger.debug("record_created", collection=collection, key=key)
        return key

    async def put(self, collection: str, record: Record) -> Any:
        """Insert or fully replace by key. Records without a key are created."""
        spec = _spec(collection)
        key = await asyncio.to_thread(self._upsert, spec, record)
        logger.debug("record_put", collection=collection, key=key)
        return key

    async def get(self, collection: str, key: Any) -> Optional[Record]:
        spec = _spec(collection)

        def _fn():
            r = self.db.fetchone(
                f"SELECT * FROM {spec.name} WHERE {spec.key}=?;",
                (key,),
            )
            return dict(r) if r else None

        return await asyncio.to_thread(_fn)

    async def get_all(self, collection: str) -> list[Record]:
        spec = _spec(collection)
        return await asyncio.to_thread(self._select_all, spec)

    async def get_by_index(self, collection: str, index_name: str, value: Any) -> list[Record]:
        spec = _spec(collection)
        try:
            column = spec.indexes[index_name]
        except KeyError:
            raise ValueError(f"{collection} has no index {index_name!r}") from None

        def _fn():
            rows = self.db.fetchall(
                f"SELECT * FROM {spec.name} WHERE {column}=? ORDER BY {spec.key};",
                (value,),
            )
            return [dict(r) for r in rows]

        return await asyncio.to_thread(_fn)

    async def delete(self, collection: str, key: Any) -> None:
        spec = _spec(collection)
        await asyncio.to_thread(
            self.db.execute,
            f"DELETE FROM {spec.name} WHERE {spec.key}=?;",
            (key,),
        )
        logger.debug("record_deleted", collection=collection, key=key)

    async def clear(self, collection: str) -> None:
        """Remove every record. Auto identifiers keep counting up afterwards."""
        spec = _spec(collection)
        await asyncio.to_thread(self.db.execute, f"DELETE FROM {spec.name};")
        logger.info("collection_cleared", collection=collection)

    async def count(self, collection: str) -> int:
        spec = _spec(collection)

        def _fn():
            r = self.db.fetchone(f"SELECT COUNT(*) AS c FROM {spec.name};")
            return int(r["c"]) if r else 0

        return await asyncio.to_thread(_fn)

    async def dump_all(self) -> dict[str, list[Record]]:
        """Consistent snapshot of every collection."""
        def _fn():
            with self.db.transaction():
                return {name: self._select_all(spec) for name, spec in COLLECTIONS.items()}

        return await asyncio.to_thread(_fn)

    async def replace_all(self, snapshot: dict[str, list[Record]]) -> dict[str, int]:
        """
        Clear every collection and write snapshot back, keys preserved.
        Collections missing from snapshot end up empty.
        All-or-nothing: any failure rolls the whole replacement back.
        Returns the number of records restored per collection.
        """
        def _fn():
            restored: dict[str, int] = {}
            with self.db.transaction():
                for name, spec in COLLECTIONS.items():
                    self.db.execute(f"DELETE FROM {spec.name};")
                for name, spec in COLLECTIONS.items():
                    records = snapshot.get(name) or []
                    for record in records:
                        self._upsert(spec, record)
                    restored[name] = len(records)
                    logger.info("collection_restored", collection=name, records=len(records))
            return restored

        return await asyncio.to_thread(_fn)
