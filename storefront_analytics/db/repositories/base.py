"""
Base repository providing shared SQLite execution helpers.

All repositories inherit from ``BaseRepository`` and receive a
``sqlite3.Connection`` at construction time. The connection is assumed
to be opened and managed by the caller (typically via ``get_connection()``).

Design:
  - No ORM — all SQL is explicit and lives in repository methods.
  - Repositories speak Pydantic models, not raw dicts.
  - Any ``sqlite3.Error`` surfaces as ``RepositoryError``; callers never
    see driver-specific exceptions and the engine never retries.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from storefront_analytics.errors import RepositoryError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared SQL execution helpers for all repository classes.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> sqlite3.Cursor:
        """Execute a single SQL statement.

        Args:
            sql: SQL string with ``?`` or ``:name`` placeholders.
            params: Positional tuple or named dict of parameters.

        Returns:
            The resulting ``sqlite3.Cursor``.

        Raises:
            RepositoryError: If the store rejects or cannot run the statement.
        """
        logger.debug("SQL: %s | params: %s", sql.strip(), params)
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise RepositoryError(f"{type(self).__name__} query failed: {exc}") from exc

    def fetchone(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or ``None``."""
        try:
            return self.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise RepositoryError(f"{type(self).__name__} fetch failed: {exc}") from exc

    def fetchall(
        self,
        sql: str,
        params: tuple[Any, ...] | dict[str, Any] = (),
    ) -> list[sqlite3.Row]:
        """Execute a query and return all rows."""
        try:
            return self.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(f"{type(self).__name__} fetch failed: {exc}") from exc

    def count(self, table: str) -> int:
        """Return the number of rows in ``table``."""
        row = self.fetchone(f"SELECT COUNT(*) AS n FROM {table};")
        assert row is not None
        return int(row["n"])


def placeholders(n: int) -> str:
    """Return ``?, ?, ...`` for an ``IN (...)`` clause of ``n`` values."""
    return ", ".join("?" for _ in range(n))
