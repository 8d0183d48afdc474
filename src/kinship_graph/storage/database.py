"""SQLite connection, schema and transaction scopes.

One ``Database`` owns one connection in autocommit mode. ``transaction()``
opens ``BEGIN IMMEDIATE`` at the outermost level and a ``SAVEPOINT`` when
nested, so a failing inner scope rolls back only itself. ``snapshot()``
opens a deferred read transaction so multi-query reads observe one state.
"""
from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Generator

from ..logging import get_logger

logger = get_logger(__name__)


SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

-- People (backs the bundled person directory)
CREATE TABLE IF NOT EXISTS people (
    person_id TEXT PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    email TEXT,
    birthday TEXT,
    date_died TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_people_name ON people(last_name, first_name);

-- Relationship edges: one row per direction
CREATE TABLE IF NOT EXISTS relationships (
    edge_id TEXT PRIMARY KEY,
    subject_id TEXT NOT NULL,
    object_id TEXT NOT NULL,
    relationship_type TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    initiated_by_id TEXT,
    start_date TEXT,
    end_date TEXT,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (subject_id, object_id, relationship_type),
    CHECK (subject_id <> object_id)
);
CREATE INDEX IF NOT EXISTS idx_relationships_object_subject ON relationships(object_id, subject_id);
CREATE INDEX IF NOT EXISTS idx_relationships_status ON relationships(status);
CREATE INDEX IF NOT EXISTS idx_relationships_initiator ON relationships(initiated_by_id);
"""


class Database:
    """SQLite database shared by the edge store and the person directory."""

    def __init__(self, db_path: Path | str = ":memory:", busy_timeout_ms: int = 5000):
        """Initialize storage.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory
            busy_timeout_ms: How long a writer waits on a locked database
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.busy_timeout_ms = busy_timeout_ms
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._depth = 0
        self._initialize_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            conn = sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)};")
            if self.db_path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL;")
            self._connection = conn
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Write scope. Nested scopes are savepoints."""
        with self._lock:
            conn = self._get_connection()
            depth = self._depth
            savepoint = f"sp_{depth}"
            conn.execute("BEGIN IMMEDIATE" if depth == 0 else f"SAVEPOINT {savepoint}")
            self._depth += 1
            try:
                yield conn
            except BaseException:
                if depth == 0:
                    conn.execute("ROLLBACK")
                else:
                    conn.execute(f"ROLLBACK TO {savepoint}")
                    conn.execute(f"RELEASE {savepoint}")
                raise
            else:
                conn.execute("COMMIT" if depth == 0 else f"RELEASE {savepoint}")
            finally:
                self._depth -= 1

    @contextmanager
    def snapshot(self) -> Generator[sqlite3.Connection, None, None]:
        """Read scope. Joins an enclosing transaction if there is one."""
        with self._lock:
            conn = self._get_connection()
            if self._depth > 0:
                yield conn
                return
            conn.execute("BEGIN DEFERRED")
            self._depth += 1
            try:
                yield conn
            finally:
                self._depth -= 1
                conn.execute("COMMIT")

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def execute(self, sql: str, params: tuple | list = ()) -> sqlite3.Cursor:
        with self._lock:
            return self._get_connection().execute(sql, params)

    def fetchone(self, sql: str, params: tuple | list = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._get_connection().execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple | list = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._get_connection().execute(sql, params).fetchall()

    def _initialize_schema(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        conn.executescript(SCHEMA_SQL)
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                    (SCHEMA_VERSION, datetime.now(UTC).isoformat()),
                )
                logger.info("database.initialized", path=self.db_path, version=SCHEMA_VERSION)

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
