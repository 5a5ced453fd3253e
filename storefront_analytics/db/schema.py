"""
SQLite schema DDL for the two collaborator stores.

The engine only reads these tables. They are created here so the CLI and
the test-suite can stand up a local store; in production the catalog and
checkout services own them.

``orders.items`` holds the line items as a serialized JSON array, exactly as
checkout wrote them. No normalized line-item table exists.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.
Timestamps are fixed-width ISO-8601 UTC text (see ``utils.time_utils``).
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_PRODUCTS = """
CREATE TABLE IF NOT EXISTS products (
    product_id  TEXT    PRIMARY KEY,
    name        TEXT    NOT NULL,
    price       REAL    NOT NULL DEFAULT 0,
    category    TEXT,
    material    TEXT,
    stock       INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
    created_at  TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_stock    ON products (stock);
CREATE INDEX IF NOT EXISTS idx_products_created  ON products (created_at);
"""

_DDL_ORDERS = """
CREATE TABLE IF NOT EXISTS orders (
    order_id        TEXT    PRIMARY KEY,
    customer_email  TEXT    NOT NULL,
    items           TEXT    NOT NULL,
    total           REAL    NOT NULL DEFAULT 0,
    status          TEXT    NOT NULL DEFAULT 'pending',
    created_at      TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_orders_created   ON orders (created_at);
CREATE INDEX IF NOT EXISTS idx_orders_customer  ON orders (customer_email, created_at);
"""

_ALL_DDL: list[str] = [_DDL_PRODUCTS, _DDL_ORDERS]

ALL_TABLE_NAMES: list[str] = ["products", "orders"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]
