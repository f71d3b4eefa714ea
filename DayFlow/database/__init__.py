# Database schema and utilities for DayFlow
#
# DayFlow keeps device-local state in a single key/value table: one entry for
# the global category list and one entry per calendar day. Values are JSON text.

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Union

import duckdb

from DayFlow.errors import StorageUnavailable

log = logging.getLogger(__name__)

DB_PATH = Path(__file__).parent.parent / 'storage' / 'dayflow.db'

SCHEMA_QUERIES = [
    '''
    CREATE TABLE IF NOT EXISTS kv_store (
        key VARCHAR PRIMARY KEY,
        value VARCHAR,
        updated_at TIMESTAMP
    );
    ''',
]

PathLike = Union[str, Path]


def get_connection(db_path: Optional[PathLike] = None):
    path = Path(db_path) if db_path else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def init_database(db_path: Optional[PathLike] = None):
    with get_connection(db_path) as conn:
        for query in SCHEMA_QUERIES:
            conn.execute(query)


class KeyValueStore:
    """
    Durable key/value storage on top of DuckDB. Writes are upserts, so the
    last write for a key wins. All driver and filesystem failures surface
    as StorageUnavailable.
    """

    def __init__(self, db_path: Optional[PathLike] = None):
        self.db_path = Path(db_path) if db_path else DB_PATH
        self._conn: Optional[duckdb.DuckDBPyConnection] = None
        self._tx_depth = 0

    # --------------- connection -------------------------------------------
    def _connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            try:
                conn = get_connection(self.db_path)
                for query in SCHEMA_QUERIES:
                    conn.execute(query)
            except (duckdb.Error, OSError) as e:
                log.error(f"Cannot open DayFlow storage at {self.db_path}: {e}")
                raise StorageUnavailable(f"Cannot open storage at {self.db_path}: {e}") from e
            self._conn = conn
            log.debug(f"Opened DayFlow storage at {self.db_path}")
        return self._conn

    def _execute(self, query: str, params: Optional[list] = None):
        conn = self._connection()
        try:
            return conn.execute(query, params or [])
        except duckdb.Error as e:
            log.error(f"Storage query failed: {e}")
            raise StorageUnavailable(f"Storage query failed: {e}") from e

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # --------------- public API -------------------------------------------
    def get(self, key: str) -> Optional[str]:
        row = self._execute("SELECT value FROM kv_store WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def put(self, key: str, value: str) -> None:
        self._execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
            """,
            [key, value, datetime.now(timezone.utc).replace(tzinfo=None)],
        )

    def delete(self, key: str) -> None:
        self._execute("DELETE FROM kv_store WHERE key = ?", [key])

    def keys(self, prefix: str = "") -> List[str]:
        rows = self._execute(
            "SELECT key FROM kv_store WHERE starts_with(key, ?) ORDER BY key", [prefix]
        ).fetchall()
        return [row[0] for row in rows]

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        """All writes inside the block are committed together or not at all. Nests."""
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        self._execute("BEGIN TRANSACTION;")
        self._tx_depth = 1
        try:
            yield self
        except BaseException:
            self._tx_depth = 0
            self._rollback()
            raise
        self._tx_depth = 0
        try:
            self._execute("COMMIT;")
        except StorageUnavailable:
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self._connection().execute("ROLLBACK;")
        except duckdb.Error as e:
            log.error(f"Rollback failed: {e}")
