"""
Repository for the catalog's ``products`` table.

Read methods are the Product Repository interface the engine consumes.
``upsert`` exists only for the CLI loader and test fixtures.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Optional

from storefront_analytics.db.repositories.base import BaseRepository, placeholders
from storefront_analytics.models.product import Product
from storefront_analytics.utils.time_utils import from_db_timestamp, to_db_timestamp

logger = logging.getLogger(__name__)

_NEWEST_FIRST = "ORDER BY created_at DESC, product_id"


class ProductRepository(BaseRepository):
    """Read access to ``products`` (plus a loader-only ``upsert``)."""

    def upsert(self, product: Product) -> str:
        """Insert or replace a product row.

        Args:
            product: The ``Product`` to persist.

        Returns:
            The ``product_id``.
        """
        self.execute(
            """
            INSERT INTO products (product_id, name, price, category, material, stock, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(product_id) DO UPDATE SET
                name       = excluded.name,
                price      = excluded.price,
                category   = excluded.category,
                material   = excluded.material,
                stock      = excluded.stock,
                created_at = excluded.created_at;
            """,
            (
                product.product_id,
                product.name,
                product.price,
                product.category,
                product.material,
                product.stock,
                to_db_timestamp(product.created_at),
            ),
        )
        return product.product_id

    def get(self, product_id: str) -> Optional[Product]:
        """Fetch a product by primary key.

        Args:
            product_id: Product identifier.

        Returns:
            ``Product`` or ``None``.
        """
        row = self.fetchone("SELECT * FROM products WHERE product_id = ?;", (product_id,))
        return _row_to_product(row) if row else None

    def find_by_ids(
        self,
        product_ids: Iterable[str],
        in_stock_only: bool = False,
    ) -> list[Product]:
        """Fetch every product whose id is in ``product_ids``.

        Unknown ids are silently absent from the result. Row order is not
        meaningful; callers that need rank order re-sort.

        Args:
            product_ids: Identifiers to resolve (duplicates are fine).
            in_stock_only: If ``True``, only products with ``stock > 0``.

        Returns:
            List of ``Product`` objects.
        """
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return []
        stock_clause = " AND stock > 0" if in_stock_only else ""
        rows = self.fetchall(
            f"SELECT * FROM products WHERE product_id IN ({placeholders(len(ids))})"
            f"{stock_clause} {_NEWEST_FIRST};",
            tuple(ids),
        )
        return [_row_to_product(r) for r in rows]

    def find_by_attribute(
        self,
        category: Optional[str] = None,
        material: Optional[str] = None,
        in_stock_only: bool = True,
        exclude_ids: Iterable[str] = (),
        limit: Optional[int] = None,
    ) -> list[Product]:
        """Products sharing ``category`` OR ``material``, newest first.

        A ``None`` attribute is not matched against; if both are ``None``
        nothing matches.

        Args:
            category: Category label to match.
            material: Material label to match.
            in_stock_only: If ``True``, only products with ``stock > 0``.
            exclude_ids: Product ids to leave out of the result.
            limit: Maximum number of rows, or ``None`` for all.

        Returns:
            List of ``Product`` objects ordered by ``created_at`` descending.
        """
        match_clauses: list[str] = []
        params: list[object] = []
        if category is not None:
            match_clauses.append("category = ?")
            params.append(category)
        if material is not None:
            match_clauses.append("material = ?")
            params.append(material)
        if not match_clauses:
            return []

        where = [f"({' OR '.join(match_clauses)})"]
        excluded = list(dict.fromkeys(exclude_ids))
        if excluded:
            where.append(f"product_id NOT IN ({placeholders(len(excluded))})")
            params.extend(excluded)
        if in_stock_only:
            where.append("stock > 0")

        sql = f"SELECT * FROM products WHERE {' AND '.join(where)} {_NEWEST_FIRST}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows = self.fetchall(sql + ";", tuple(params))
        return [_row_to_product(r) for r in rows]

    def list_candidates(self, max_stock: int) -> list[Product]:
        """Products with ``stock <= max_stock`` (fleet scan candidates).

        Args:
            max_stock: Inclusive stock ceiling.

        Returns:
            List of ``Product`` objects ordered by ``product_id``.
        """
        rows = self.fetchall(
            "SELECT * FROM products WHERE stock <= ? ORDER BY product_id;",
            (max_stock,),
        )
        return [_row_to_product(r) for r in rows]

    def list_newest(self, limit: int, in_stock_only: bool = True) -> list[Product]:
        """The ``limit`` most recently created products.

        Args:
            limit: Maximum number of rows.
            in_stock_only: If ``True``, only products with ``stock > 0``.

        Returns:
            List of ``Product`` objects ordered by ``created_at`` descending.
        """
        stock_clause = "WHERE stock > 0 " if in_stock_only else ""
        rows = self.fetchall(
            f"SELECT * FROM products {stock_clause}{_NEWEST_FIRST} LIMIT ?;",
            (limit,),
        )
        return [_row_to_product(r) for r in rows]


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_product(row: sqlite3.Row) -> Product:
    return Product(
        product_id=row["product_id"],
        name=row["name"],
        price=row["price"],
        category=row["category"],
        material=row["material"],
        stock=row["stock"],
        created_at=from_db_timestamp(row["created_at"]),
    )
