from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import structlog

from salespro.config import DB_PATH
from salespro.db.schema import ALL_SCHEMAS, INDEX_STATEMENTS, SCHEMA_VERSION
from salespro.errors import StorageError, StorageQuotaExceededError, StorageUnavailableError

logger = structlog.get_logger(__name__)

_UNAVAILABLE_MARKERS = (
    "unable to open",
    "readonly",
    "read-only",
    "locked",
    "disk i/o error",
    "not a database",
)


def _translate(exc: sqlite3.Error) -> StorageError:
    """Map a sqlite3 failure onto the storage error the caller should see."""
    msg = str(exc).lower()
    if isinstance(exc, sqlite3.DatabaseError):
        if "full" in msg:
            return StorageQuotaExceededError(f"Device storage is full: {exc}")
        if any(marker in msg for marker in _UNAVAILABLE_MARKERS):
            return StorageUnavailableError(f"Device storage unavailable: {exc}")
    return StorageError(f"Storage operation failed: {exc}")


class Database:
    """
    Manages the SQLite connection and schema initialization.
    Runs in autocommit mode: every statement is atomic on its own and
    transaction() groups several statements into one all-or-nothing unit.
    Safe to call from worker threads; one lock guards the connection.
    """

    def __init__(self, db_path: Optional[Path | str] = None):
        self.db_path = Path(db_path) if db_path else Path(DB_PATH)
        self.conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    def connect(self) -> None:
        """
        Establish database connection.
        - Creates data directory if missing
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create data directory: {exc}") from exc
        try:
            self.conn = sqlite3.connect(
                self.db_path,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise _translate(exc) from exc
        self.conn.row_factory = sqlite3.Row
        logger.debug("database_connected", path=str(self.db_path))

    def disconnect(self) -> None:
        """Close database connection."""
        with self._lock:
            if self.conn:
                self.conn.close()
            self.conn = None

    def close(self) -> None:
        """Alias for disconnect()."""
        self.disconnect()

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StorageUnavailableError("Database not connected")
        return self.conn

    def execute(self, sql: str, params: Iterable[Any] = ()) -> None:
        """Execute SQL statement with parameters."""
        with self._lock:
            conn = self._require_conn()
            try:
                conn.execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    def execute_id(self, sql: str, params: Iterable[Any] = ()) -> int:
        """Execute INSERT and return last row ID."""
        with self._lock:
            conn = self._require_conn()
            try:
                cur = conn.execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise _translate(exc) from exc
            return int(cur.lastrowid)

    def fetchone(self, sql: str, params: Iterable[Any] = ()) -> Optional[sqlite3.Row]:
        """Fetch single row."""
        with self._lock:
            conn = self._require_conn()
            try:
                return conn.execute(sql, tuple(params)).fetchone()
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    def fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        """Fetch all rows."""
        with self._lock:
            conn = self._require_conn()
            try:
                return conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as exc:
                raise _translate(exc) from exc

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """
        Group statements into one transaction.
        Rolls back and re-raises on any exception raised inside the block.
        """
        with self._lock:
            conn = self._require_conn()
            try:
                conn.execute("BEGIN IMMEDIATE;")
            except sqlite3.Error as exc:
                raise _translate(exc) from exc
            try:
                yield self
            except BaseException:
                self._rollback(conn)
                raise
            try:
                conn.execute("COMMIT;")
            except sqlite3.Error as exc:
                self._rollback(conn)
                raise _translate(exc) from exc

    def _rollback(self, conn: sqlite3.Connection) -> None:
        # sqlite may already have rolled back on its own (e.g. disk full)
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK;")
            except sqlite3.Error as exc:
                logger.warning("rollback_failed", error=str(exc))

    def initialize_schema(self) -> None:
        """
        Create all tables and indexes if missing.
        - Runs ALL_SCHEMAS from schema.py
        - Creates indexes
        - Runs safe migrations for older files
        Idempotent: an existing database is left as it is.
        """
        with self.transaction():
            for stmt in ALL_SCHEMAS:
                self.execute(stmt)
            for stmt in INDEX_STATEMENTS:
                self.execute(stmt)

        self._migrate_if_needed()

        current = self.schema_version()
        if current != SCHEMA_VERSION:
            self.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)};")
            logger.info("schema_version_set", previous=current, version=SCHEMA_VERSION)

    def schema_version(self) -> int:
        r = self.fetchone("PRAGMA user_version;")
        return int(r[0]) if r else 0

    def _table_columns(self, table: str) -> set[str]:
        """Get set of column names for a table using PRAGMA."""
        rows = self.fetchall(f"PRAGMA table_info({table});")
        return {r["name"] for r in rows}

    def _table_exists(self, table: str) -> bool:
        """Check if table exists."""
        r = self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;",
            (table,),
        )
        return r is not None

    def _add_column_if_missing(self, table: str, col: str, coldef: str) -> None:
        """
        Safely add column to table if it doesn't exist.
        Uses PRAGMA table_info to check before ALTERing.
        """
        if col not in self._table_columns(table):
            self.execute(f"ALTER TABLE {table} ADD COLUMN {col} {coldef};")
            logger.info("column_added", table=table, column=col)

    def _migrate_if_needed(self) -> None:
        """
        Add columns that files created by earlier builds lack.
        Safe: only adds if column doesn't exist.
        """
        if self._table_exists("sales"):
            self._add_column_if_missing("sales", "bill_image_type", "TEXT")
            self._add_column_if_missing("sales", "bill_number", "TEXT")
            self._add_column_if_missing("sales", "customer_number", "TEXT")

        if self._table_exists("settings"):
            self._add_column_if_missing("settings", "store_name", "TEXT")
            self._add_column_if_missing("settings", "profile_photo", "TEXT")
            self._add_column_if_missing("settings", "store_lat", "REAL")
            self._add_column_if_missing("settings", "store_lng", "REAL")
