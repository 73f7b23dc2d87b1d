"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), running blocking queries from coroutines
(``run_in_connection``), applying migrations on application start
(``init_db``) and probing connectivity (``ping``).  It uses SQLite as
a lightweight embedded database; to switch to another DBMS you would
replace connection logic and adapt SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import asyncio
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, TypeVar

from .config import settings


logger = logging.getLogger(__name__)

T = TypeVar("T")


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'DONE')),
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: indices for the list filters and statistics
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_tasks_user_id ON tasks(user_id);
        CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
        CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at);
        CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path (or the special
    ``:memory:`` name), use it directly.  Otherwise resolve it relative
    to the project root.
    """
    db_url = settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` objects so columns can be
    accessed by name.  Foreign key enforcement is switched on for the
    lifetime of the connection; SQLite disables it by default, which
    would silently skip the ``ON DELETE CASCADE`` from users to tasks.

    A ``casefold`` SQL function is registered for case-insensitive
    search; the built-in ``LOWER`` only folds ASCII letters.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _call_with_connection(fn: Callable[[sqlite3.Connection], T]) -> T:
    conn = get_connection()
    try:
        result = fn(conn)
        conn.commit()
        return result
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


async def run_in_connection(fn: Callable[[sqlite3.Connection], T]) -> T:
    """Run ``fn`` with a fresh connection in a worker thread.

    The connection is committed when ``fn`` returns and rolled back if
    it raises.  Because every call gets its own connection, several
    calls can be awaited together with ``asyncio.gather``.
    """
    return await asyncio.to_thread(_call_with_connection, fn)


def utc_now() -> str:
    """Return the current UTC time as a sortable ISO‑8601 string."""
    return to_storage_timestamp(datetime.now(timezone.utc))


def to_storage_timestamp(value: datetime) -> str:
    """Normalise ``value`` to the format stored in timestamp columns.

    Naive datetimes are treated as UTC.  Microseconds are always
    rendered so that string comparison matches chronological order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  To add a migration, append it with an incremented
    version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version


async def ping() -> None:
    """Execute ``SELECT 1`` against the store.  Raises if it is unreachable."""
    await run_in_connection(lambda conn: conn.execute("SELECT 1").fetchone())
