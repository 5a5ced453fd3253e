"""
Seed loader: storefront JSON exports → local SQLite store.

Stands up a local copy of the catalog and order stores so the engine can be
run against exported data. The engine itself never writes; this module is
tooling used by the ``import-data`` CLI command and the test-suite.

Input format
------------
Both files are JSON arrays using the storefront's export keys.

products.json::

    [{"id": "p1", "name": "Oak Bowl", "price": 120.0, "category": "Bowls",
      "material": "Oak", "stock": 12, "createdAt": "2026-01-05T10:00:00Z"}]

orders.json::

    [{"id": "o1", "customerEmail": "ana@example.com", "total": 240.0,
      "status": "delivered", "createdAt": "2026-02-01T09:30:00Z",
      "items": [{"id": "p1", "name": "Oak Bowl", "price": 120.0, "quantity": 2}]}]

``items`` may be an array (serialized on import) or a string (stored
verbatim, malformed or not; historical payloads are kept as found).

Validation rules
----------------
- Duplicate ids within one file are rejected.
- Every record must pass ``Product`` / ``Order`` validation.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from storefront_analytics.db.repositories.order_repo import OrderRepository
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.models.order import Order
from storefront_analytics.models.product import Product

log = logging.getLogger(__name__)


def _read_array(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array, got {type(data).__name__}.")
    return data


def _check_unique(ids: list[str], kind: str) -> None:
    seen: set[str] = set()
    for i, record_id in enumerate(ids):
        if not record_id:
            raise ValueError(f"{kind.capitalize()} at index {i} is missing 'id'.")
        if record_id in seen:
            raise ValueError(f"Duplicate {kind} id '{record_id}' at index {i}.")
        seen.add(record_id)


def product_from_export(raw: dict[str, Any]) -> Product:
    """Build a ``Product`` from one storefront export record."""
    return Product(
        product_id=str(raw.get("id", "")),
        name=raw.get("name", ""),
        price=raw.get("price", 0.0),
        category=raw.get("category"),
        material=raw.get("material"),
        stock=raw.get("stock", 0),
        created_at=raw.get("createdAt"),
    )


def order_from_export(raw: dict[str, Any]) -> Order:
    """Build an ``Order`` from one storefront export record."""
    items = raw.get("items", "[]")
    items_json = items if isinstance(items, str) else json.dumps(items)
    return Order(
        order_id=str(raw.get("id", "")),
        customer_email=raw.get("customerEmail", ""),
        items_json=items_json,
        total=raw.get("total", 0.0),
        status=raw.get("status", "pending"),
        created_at=raw.get("createdAt"),
    )


def load_products(path: Path) -> list[Product]:
    """Parse and validate a products export.

    Raises:
        ValueError: On a non-array file, duplicate ids or invalid records.
    """
    products: list[Product] = []
    for i, raw in enumerate(_read_array(path)):
        try:
            products.append(product_from_export(raw))
        except ValidationError as exc:
            raise ValueError(f"Product at index {i} is invalid: {exc}") from exc
    _check_unique([p.product_id for p in products], "product")
    return products


def load_orders(path: Path) -> list[Order]:
    """Parse and validate an orders export.

    Raises:
        ValueError: On a non-array file, duplicate ids or invalid records.
    """
    orders: list[Order] = []
    for i, raw in enumerate(_read_array(path)):
        try:
            orders.append(order_from_export(raw))
        except ValidationError as exc:
            raise ValueError(f"Order at index {i} is invalid: {exc}") from exc
    _check_unique([o.order_id for o in orders], "order")
    return orders


def seed_store(
    conn: sqlite3.Connection,
    products_path: Optional[Path] = None,
    orders_path: Optional[Path] = None,
) -> tuple[int, int]:
    """Upsert exported products and orders into the local store.

    Both files are validated before anything is written.

    Returns:
        ``(products_upserted, orders_upserted)``.
    """
    products = load_products(products_path) if products_path else []
    orders = load_orders(orders_path) if orders_path else []

    product_repo = ProductRepository(conn)
    for product in products:
        product_repo.upsert(product)

    order_repo = OrderRepository(conn)
    for order in orders:
        order_repo.upsert(order)

    conn.commit()
    log.info("Seeded %d products and %d orders.", len(products), len(orders))
    return len(products), len(orders)
