"""
Repository for the ``kv_store`` table.

The connection is opened by the caller (via ``get_connection()``), which
owns the transaction. All SQL is explicit; there is no ORM.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from regen_ratio.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class KeyValueRepository:
    """Read/write access to ``kv_store`` rows.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        logger.debug("SQL: %s", " ".join(sql.split()))
        return self.conn.execute(sql, params)

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key``, or ``None`` if absent."""
        row = self._execute("SELECT value FROM kv_store WHERE key = ?;", (key,)).fetchone()
        return row["value"] if row else None

    def put(self, key: str, value: str) -> None:
        """Insert or overwrite ``key`` with ``value``."""
        self._execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value      = excluded.value,
                updated_at = excluded.updated_at;
            """,
            (key, value, utcnow().isoformat()),
        )
