"""
SQLite-backed store for customers, orders, incidents and invoices.

CONCEPT: Explicit lifecycle
===========================
The store is a handle that the process creates once at start-up and
disposes at shutdown. Nothing in the package opens the database at import
time; whoever needs it is handed a Database.

Each operation gets its own connection, so request handlers running on
different threads never share one.

Usage:
    database = Database(DB_PATH).open()   # creates tables if needed
    with database.connect() as conn:
        conn.execute("SELECT ...")
    database.close()
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from carebot.config import DB_PATH
from carebot.utils.logging import get_logger

logger = get_logger("database")


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    external_id   TEXT NOT NULL UNIQUE,
    name          TEXT NOT NULL,
    email         TEXT UNIQUE,
    phone_number  TEXT NOT NULL,
    created_at    TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS orders (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    order_id          TEXT NOT NULL UNIQUE,
    user_id           INTEGER NOT NULL REFERENCES users(id),
    product_name      TEXT NOT NULL,
    plan              TEXT NOT NULL,
    status            TEXT NOT NULL
                      CHECK (status IN ('Active', 'Expired', 'Pending')),
    date              TEXT NOT NULL,
    in_service_date   TEXT,
    out_service_date  TEXT,
    created_at        TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS incidents (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    incident_id  TEXT NOT NULL UNIQUE,
    user_id      INTEGER NOT NULL REFERENCES users(id),
    date         TEXT NOT NULL,
    description  TEXT NOT NULL,
    status       TEXT NOT NULL
                 CHECK (status IN ('Open', 'Pending', 'Resolved')),
    created_at   TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS invoices (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id            INTEGER NOT NULL REFERENCES users(id),
    order_id           INTEGER NOT NULL REFERENCES orders(id),
    period_start_date  TEXT NOT NULL,
    period_end_date    TEXT NOT NULL,
    price              TEXT NOT NULL,
    adjustment         TEXT
);

CREATE INDEX IF NOT EXISTS idx_orders_user ON orders(user_id);
CREATE INDEX IF NOT EXISTS idx_incidents_user ON incidents(user_id);
CREATE INDEX IF NOT EXISTS idx_invoices_user ON invoices(user_id);
"""

TABLES = ("invoices", "incidents", "orders", "users")


class StoreError(RuntimeError):
    """Raised when the store is used outside its open/close lifecycle."""


class Database:
    """Handle on one SQLite database file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or DB_PATH)
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "Database":
        """Create the parent directory and schema, then mark the handle usable."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._new_connection()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
        self._open = True
        logger.info(f"SQLite store ready at {self.path}")
        return self

    def close(self) -> None:
        """Dispose of the handle. Further use raises StoreError."""
        if self._open:
            logger.info(f"Closing SQLite store at {self.path}")
        self._open = False

    def reset(self) -> None:
        """Drop every table and recreate the schema (used by the seed script)."""
        conn = self._new_connection()
        try:
            for table in TABLES:
                conn.execute(f"DROP TABLE IF EXISTS {table}")
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
        self._open = True
        logger.warning(f"Store at {self.path} was reset")

    def _new_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode=WAL")  # Better concurrent access
        return conn

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection that commits on success and rolls back on error.
        """
        if not self._open:
            raise StoreError(f"Database {self.path} is not open")

        conn = self._new_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
