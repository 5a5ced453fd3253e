"""
Recommendation Engine: four strategies with a defined fallback chain.

Strategy          Signal                                       Fallback
----------------  -------------------------------------------  --------------------
co-purchase       products bought in the same orders as seed   category-affinity
category-affinity seed's category OR material, newest first    (none)
trending          units sold in the last 30 days               newest in-stock
personalized      customer's favourite category / material     (none)

"Frequently bought together" is co-purchase with a smaller default limit.

Every strategy returns only in-stock products, never returns the seed
product (co-purchase, category-affinity) or anything the customer already
bought (personalized), and returns ``[]`` rather than raising for an unknown
seed product or customer. Malformed orders are skipped by the accessor.

Ranked strategies resolve the top-``limit`` ids and then drop out-of-stock
ones, so they can return fewer than ``limit`` products. Co-purchase falls
back only when no co-occurring product exists at all.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import timedelta
from typing import Optional

from storefront_analytics.config import RecommendationPolicy
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.history.accessor import OrderHistoryAccessor, iter_parsed
from storefront_analytics.models.analytics import RecommendationResult
from storefront_analytics.models.product import Product, ProductSummary
from storefront_analytics.recommendations.ranking import (
    count_occurrences,
    most_frequent,
    rank_by_frequency,
)
from storefront_analytics.taxonomy import RecommendationStrategy
from storefront_analytics.utils.time_utils import Clock, utcnow

logger = logging.getLogger(__name__)


def _in_rank_order(ranked_ids: list[str], products: list[Product]) -> list[ProductSummary]:
    by_id = {p.product_id: p for p in products}
    return [by_id[pid].summary() for pid in ranked_ids if pid in by_id]


def _summaries(products: list[Product]) -> list[ProductSummary]:
    return [p.summary() for p in products]


class RecommendationEngine:
    """Product recommendations computed from order history on every call.

    Args:
        products: Catalog store.
        history: Order history accessor.
        policy: Default limits and windows.
        clock: Returns "now" as an aware UTC datetime.
    """

    def __init__(
        self,
        products: ProductRepository,
        history: OrderHistoryAccessor,
        policy: RecommendationPolicy | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.products = products
        self.history = history
        self.policy = policy or RecommendationPolicy()
        self.clock = clock

    def _limit(self, limit: Optional[int], default: Optional[int] = None) -> int:
        value = limit if limit is not None else (default or self.policy.default_limit)
        if value < 1:
            raise ValueError(f"limit must be >= 1, got {value}.")
        return value

    # ── Strategies ────────────────────────────────────────────────────────────

    def co_purchase(self, product_id: str, limit: Optional[int] = None) -> list[ProductSummary]:
        """Products most often bought in the same order as ``product_id``.

        Falls back to ``category_affinity`` when no other product was ever
        bought alongside the seed.
        """
        n = self._limit(limit)
        co_counts = count_occurrences(
            item.product_id
            for parsed in self.history.containing(product_id)
            for item in parsed.items
            if item.product_id != product_id
        )
        ranked = rank_by_frequency(co_counts, limit=n)
        if not ranked:
            logger.debug("No co-purchases for %s; using category affinity.", product_id)
            return self.category_affinity(product_id, n)

        return _in_rank_order(ranked, self.products.find_by_ids(ranked, in_stock_only=True))

    def frequently_bought_together(
        self, product_id: str, limit: Optional[int] = None
    ) -> list[ProductSummary]:
        """Co-purchase with the smaller "bought together" default limit."""
        return self.co_purchase(
            product_id, self._limit(limit, default=self.policy.bought_together_limit)
        )

    def category_affinity(self, product_id: str, limit: Optional[int] = None) -> list[ProductSummary]:
        """Other in-stock products sharing the seed's category or material, newest first."""
        n = self._limit(limit)
        seed = self.products.get(product_id)
        if seed is None:
            return []
        return _summaries(
            self.products.find_by_attribute(
                category=seed.category,
                material=seed.material,
                in_stock_only=True,
                exclude_ids=[product_id],
                limit=n,
            )
        )

    def trending(self, limit: Optional[int] = None) -> list[ProductSummary]:
        """Best sellers by units over the trending window; newest products if nothing sold."""
        n = self._limit(limit)
        now = self.clock()
        start = now - timedelta(days=self.policy.trending_window_days)

        units: Counter[str] = Counter()
        for parsed in self.history.in_window(start, now):
            for item in parsed.items:
                units[item.product_id] += item.quantity

        ranked = rank_by_frequency(units, limit=n)
        if not ranked:
            return _summaries(self.products.list_newest(n, in_stock_only=True))

        return _in_rank_order(ranked, self.products.find_by_ids(ranked, in_stock_only=True))

    def personalized(self, customer_email: str, limit: Optional[int] = None) -> list[ProductSummary]:
        """Unpurchased products in the customer's favourite category or material.

        Preferences come from the customer's most recent orders (ten by
        default). Each purchased line item votes once for its product's
        category and once for its material; the first-encountered label wins
        a tie. Purchased products are resolved in one batch query.
        """
        n = self._limit(limit)
        recent = self.history.for_customer(
            customer_email, limit=self.policy.personalized_order_limit, newest_first=True
        )

        purchased_ids: list[str] = [
            item.product_id for parsed in iter_parsed(recent) for item in parsed.items
        ]
        if not purchased_ids:
            return []

        catalog = {p.product_id: p for p in self.products.find_by_ids(purchased_ids)}
        bought = [catalog[pid] for pid in purchased_ids if pid in catalog]

        category = most_frequent(count_occurrences(p.category for p in bought))
        material = most_frequent(count_occurrences(p.material for p in bought))
        if category is None and material is None:
            return []

        return _summaries(
            self.products.find_by_attribute(
                category=category,
                material=material,
                in_stock_only=True,
                exclude_ids=purchased_ids,
                limit=n,
            )
        )

    # ── Dispatch ──────────────────────────────────────────────────────────────

    def recommend(
        self,
        strategy: RecommendationStrategy | str,
        product_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """Run one strategy by name.

        Args:
            strategy: ``coPurchase``, ``categoryAffinity``, ``trending`` or
                ``personalized``.
            product_id: Seed product (co-purchase, category-affinity).
            customer_email: Customer (personalized).
            limit: Maximum number of products.

        Returns:
            ``RecommendationResult`` with the products in recommendation order.

        Raises:
            ValueError: On an unknown strategy or a missing required argument.
        """
        strategy = RecommendationStrategy(strategy)

        if strategy in (RecommendationStrategy.CO_PURCHASE, RecommendationStrategy.CATEGORY_AFFINITY):
            if not product_id:
                raise ValueError(f"product_id is required for {strategy} recommendations.")
            if strategy is RecommendationStrategy.CO_PURCHASE:
                products = self.co_purchase(product_id, limit)
            else:
                products = self.category_affinity(product_id, limit)
        elif strategy is RecommendationStrategy.PERSONALIZED:
            if not customer_email:
                raise ValueError("customer_email is required for personalized recommendations.")
            products = self.personalized(customer_email, limit)
        else:
            products = self.trending(limit)

        return RecommendationResult(strategy=strategy, products=products)
