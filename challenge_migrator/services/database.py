"""SQLite storage for the error ledger."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Generator

logger = structlog.get_logger(__name__)

# id order is the ledger's insertion order
_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS failure_records (
           id INTEGER PRIMARY KEY AUTOINCREMENT,
           entity_type_key TEXT NOT NULL,
           entity_id TEXT NOT NULL,
           id_is_numeric INTEGER NOT NULL DEFAULT 0,
           error_type TEXT,
           error_message TEXT,
           occurred_at TEXT NOT NULL
       )""",
    """CREATE INDEX IF NOT EXISTS idx_failure_records_entity_type_key
           ON failure_records(entity_type_key)""",
)


class Database:
    """Lazily opened SQLite connection holding the failure_records table.

    ``busy_timeout`` is how long a write waits on another process's lock
    before sqlite3 raises ``OperationalError``; the ledger retries those.
    """

    def __init__(self, db_path: str = "data/migration.db", busy_timeout: float = 5.0) -> None:
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Open the connection on first use."""
        if self._connection is None:
            conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            self._connection = conn
            logger.debug("database_connected", path=self.db_path)
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Commit on success, roll back and re-raise on any error."""
        conn = self.connection
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()

    def execute(self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()) -> sqlite3.Cursor:
        return self.connection.execute(sql, params)

    def fetchall(
        self, sql: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def close(self) -> None:
        """Close the connection; the next query reopens it."""
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None

    def init_db(self) -> None:
        """Create the failure_records table and its index if missing."""
        with self.transaction() as cursor:
            for statement in _SCHEMA:
                cursor.execute(statement)
        logger.info("database_initialized", path=self.db_path)
