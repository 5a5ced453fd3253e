"""
SQLite connection management.

Two kinds of connection are handed out by ``get_connection()``:

  - Read-write (``init-db``, ``import-data``): creates the database file and
    its parent directories if needed, switches the store to WAL so the
    engine can read while checkout writes, commits on clean exit and rolls
    back on exception.
  - Read-only (every analytics query): opens an existing file only and sets
    ``PRAGMA query_only`` so any write fails. A missing file raises
    ``FileNotFoundError`` instead of leaving an empty database behind, and
    the journal mode is left as the writer set it.

Both set a busy timeout and use the ``sqlite3.Row`` factory.

Usage::

    from storefront_analytics.db.connection import get_connection

    with get_connection("data/db/storefront.db", read_only=True) as conn:
        engine = AnalyticsEngine.from_connection(conn, config)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

_MEMORY = ":memory:"


def _connect_read_only(db_path: str, timeout_s: float) -> sqlite3.Connection:
    if not Path(db_path).is_file():
        raise FileNotFoundError(f"Database not found: {db_path}")
    conn = sqlite3.connect(db_path, timeout=timeout_s)
    conn.execute("PRAGMA query_only = ON;")
    return conn


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    read_only: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path: Path to the SQLite database file. Use ``":memory:"`` for
            in-memory databases (useful in tests).
        wal_mode: If ``True``, switch a read-write connection to WAL journal
            mode. Ignored for read-only connections.
        busy_timeout_ms: Milliseconds to wait when the database is locked
            before raising ``OperationalError``.
        read_only: Open an existing database without write access.

    Yields:
        An open, configured ``sqlite3.Connection``.

    Raises:
        FileNotFoundError: If ``read_only`` and ``db_path`` does not exist.
        sqlite3.OperationalError: If the database cannot be opened or is locked.
    """
    timeout_s = busy_timeout_ms / 1000
    if read_only and db_path != _MEMORY:
        conn = _connect_read_only(db_path, timeout_s)
    else:
        if db_path != _MEMORY:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path, timeout=timeout_s)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms};")

        if wal_mode and not read_only:
            conn.execute("PRAGMA journal_mode = WAL;")

        yield conn
        if not read_only:
            conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
