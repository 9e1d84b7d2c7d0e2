"""
SQLite schema DDL for the durable key-value store.

One table, one row per key. The whole project list lives in a single row
(``value`` holds the JSON array), so every write is a single-statement
UPSERT inside one transaction.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_KV_STORE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_ALL_DDL = [_DDL_KV_STORE]

ALL_TABLE_NAMES = ["kv_store"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent - safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    for ddl in _ALL_DDL:
        conn.execute(ddl)
    logger.debug("Schema applied: %d table(s) created/verified.", len(ALL_TABLE_NAMES))
