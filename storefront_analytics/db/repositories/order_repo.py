"""
Repository for the checkout service's ``orders`` table.

Read methods are the Order Repository interface the engine consumes. Every
read orders rows by ``(created_at, order_id)`` so repeated scans of unchanged
data iterate in the same order, which keeps frequency-rank tie-breaks
deterministic.

Orders are returned with their ``items`` blob untouched; parsing belongs to
``storefront_analytics.history.accessor``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from storefront_analytics.db.repositories.base import BaseRepository
from storefront_analytics.models.order import Order
from storefront_analytics.utils.time_utils import from_db_timestamp, to_db_timestamp

logger = logging.getLogger(__name__)

_CHRONOLOGICAL = "ORDER BY created_at ASC, order_id ASC"
_NEWEST_FIRST = "ORDER BY created_at DESC, order_id DESC"


class OrderRepository(BaseRepository):
    """Read access to ``orders`` (plus a loader-only ``upsert``)."""

    def upsert(self, order: Order) -> str:
        """Insert or replace an order row.

        Args:
            order: The ``Order`` to persist.

        Returns:
            The ``order_id``.
        """
        self.execute(
            """
            INSERT INTO orders (order_id, customer_email, items, total, status, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(order_id) DO UPDATE SET
                customer_email = excluded.customer_email,
                items          = excluded.items,
                total          = excluded.total,
                status         = excluded.status,
                created_at     = excluded.created_at;
            """,
            (
                order.order_id,
                order.customer_email,
                order.items_json,
                order.total,
                order.status,
                to_db_timestamp(order.created_at),
            ),
        )
        return order.order_id

    def find_in_range(self, start: datetime, end: datetime) -> list[Order]:
        """Orders created within ``[start, end]`` (both inclusive), oldest first.

        Args:
            start: Window start (UTC or naive-as-UTC).
            end: Window end.

        Returns:
            List of ``Order`` objects.
        """
        rows = self.fetchall(
            f"SELECT * FROM orders WHERE created_at >= ? AND created_at <= ? {_CHRONOLOGICAL};",
            (to_db_timestamp(start), to_db_timestamp(end)),
        )
        return [_row_to_order(r) for r in rows]

    def find_by_customer(
        self,
        customer_email: str,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[Order]:
        """Orders placed by ``customer_email``.

        Args:
            customer_email: Buyer identifier (exact match).
            limit: Maximum number of rows, or ``None`` for all.
            newest_first: If ``True``, most recent first (``limit`` then keeps
                the latest orders); otherwise chronological.

        Returns:
            List of ``Order`` objects.
        """
        sql = f"SELECT * FROM orders WHERE customer_email = ? {_NEWEST_FIRST if newest_first else _CHRONOLOGICAL}"
        params: tuple = (customer_email,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (customer_email, limit)
        rows = self.fetchall(sql + ";", params)
        return [_row_to_order(r) for r in rows]

    def find_mentioning(self, product_id: str) -> list[Order]:
        """Orders with a line item whose ``id`` equals ``product_id``, oldest first.

        Matching runs on the decoded JSON (``json_each``), so ids stored with
        JSON escapes (non-ASCII, quotes, backslashes) are found and ids that
        merely contain ``product_id`` as a substring are not. Blobs that are
        not valid JSON are never returned. Numeric ids compare as text.

        Args:
            product_id: Product identifier to look for.

        Returns:
            List of matching ``Order`` objects.
        """
        rows = self.fetchall(
            "SELECT * FROM orders WHERE json_valid(items) AND EXISTS ("
            " SELECT 1 FROM json_each(orders.items) AS item"
            " WHERE item.type = 'object'"
            " AND CAST(json_extract(item.value, '$.id') AS TEXT) = ?"
            f") {_CHRONOLOGICAL};",
            (product_id,),
        )
        return [_row_to_order(r) for r in rows]


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_order(row: sqlite3.Row) -> Order:
    return Order(
        order_id=row["order_id"],
        customer_email=row["customer_email"],
        items_json=row["items"],
        total=row["total"],
        status=row["status"],
        created_at=from_db_timestamp(row["created_at"]),
    )
