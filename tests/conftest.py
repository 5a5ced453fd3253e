"""
Shared pytest fixtures for the Storefront Analytics test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``now`` / ``clock``: a frozen "now" (``FIXED_NOW``) so windowed queries are
    deterministic.
  - ``seed_product`` / ``seed_order``: factories that write through the
    repositories' ``upsert`` methods.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator, Optional

import pytest

from storefront_analytics.db.repositories.order_repo import OrderRepository
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.db.schema import apply_schema
from storefront_analytics.models.order import Order
from storefront_analytics.models.product import Product

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def days_ago(days: float) -> datetime:
    """``FIXED_NOW`` minus ``days`` (fractions allowed)."""
    return FIXED_NOW - timedelta(days=days)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return fixed_clock


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def product_repo(in_memory_db) -> ProductRepository:
    return ProductRepository(in_memory_db)


@pytest.fixture
def order_repo(in_memory_db) -> OrderRepository:
    return OrderRepository(in_memory_db)


# ── Domain object factories ───────────────────────────────────────────────────

@pytest.fixture
def seed_product(product_repo) -> Callable[..., Product]:
    """Factory: insert a product and return it.

    ``age_days`` controls ``created_at`` so "newest first" ordering can be
    arranged explicitly.
    """

    def _make(
        product_id: str,
        stock: int = 10,
        category: Optional[str] = None,
        material: Optional[str] = None,
        price: float = 10.0,
        age_days: float = 100,
        name: Optional[str] = None,
    ) -> Product:
        product = Product(
            product_id=product_id,
            name=name or f"Product {product_id}",
            price=price,
            category=category,
            material=material,
            stock=stock,
            created_at=days_ago(age_days),
        )
        product_repo.upsert(product)
        return product

    return _make


@pytest.fixture
def seed_order(order_repo) -> Callable[..., Order]:
    """Factory: insert an order and return it.

    ``items`` is a list of ``(product_id, quantity)`` tuples or dicts; pass
    ``raw_items`` to store an arbitrary (possibly malformed) payload instead.
    ``total`` defaults to the sum of ``price * quantity``.
    """
    counter = {"n": 0}

    def _make(
        items: Optional[list] = None,
        age_days: float = 1,
        email: str = "ana@example.com",
        total: Optional[float] = None,
        order_id: Optional[str] = None,
        raw_items: Optional[str] = None,
        price: float = 10.0,
    ) -> Order:
        counter["n"] += 1
        payload: list[dict] = []
        for entry in items or []:
            if isinstance(entry, dict):
                payload.append(entry)
            else:
                pid, qty = entry
                payload.append({"id": pid, "quantity": qty, "price": price})
        if total is None:
            total = sum(e.get("price", 0) * e.get("quantity", 0) for e in payload)
        order = Order(
            order_id=order_id or f"o{counter['n']:04d}",
            customer_email=email,
            items_json=raw_items if raw_items is not None else json.dumps(payload),
            total=total,
            created_at=days_ago(age_days),
        )
        order_repo.upsert(order)
        return order

    return _make
