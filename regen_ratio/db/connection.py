"""
SQLite connection handling for the durable key-value store.

``get_connection()`` opens one short-lived connection per logical read or
write:

  - The database file and its parent directory are created on first use.
  - ``sqlite3.Row`` is the row factory, so columns are addressable by name.
  - With ``write=True`` the transaction starts ``IMMEDIATE``, taking the
    write lock up front; a concurrent writer waits up to ``busy_timeout_ms``
    instead of failing half way through.
  - The schema is applied on open, so a fresh file is usable straight away.
  - Commit on clean exit, rollback on any exception, always close.

Usage::

    from regen_ratio.db.connection import get_connection

    with get_connection("data/db/regen_ratio.db", write=True) as conn:
        KeyValueRepository(conn).put("key", "value")
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from regen_ratio.db.schema import apply_schema

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _open(db_path: str, busy_timeout_ms: int) -> sqlite3.Connection:
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # isolation_level=None: transactions are issued explicitly below.
    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    return conn


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    write: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Yield a configured connection wrapped in a single transaction.

    Args:
        db_path: SQLite file path, or ``":memory:"``.
        wal_mode: Switch the journal to WAL so reads never block on the writer.
        busy_timeout_ms: How long to wait on a locked database.
        write: Begin ``IMMEDIATE`` (take the write lock now) instead of
            ``DEFERRED``.

    Yields:
        An open ``sqlite3.Connection`` inside a transaction.

    Raises:
        sqlite3.Error: If the database cannot be opened, locked, or queried.
        OSError: If the parent directory cannot be created.
    """
    conn = _open(db_path, busy_timeout_ms)
    try:
        if wal_mode and db_path != MEMORY_DB:
            conn.execute("PRAGMA journal_mode = WAL;")
        conn.execute("BEGIN IMMEDIATE;" if write else "BEGIN;")
        apply_schema(conn)
        yield conn
        conn.execute("COMMIT;")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK;")
        raise
    finally:
        conn.close()
