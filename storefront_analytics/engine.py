"""
``AnalyticsEngine`` — the read-only query surface for dashboards and automation.

Wires the components over one pair of repositories:

    OrderHistoryAccessor ──┬── ForecastCalculator ── ForecastAggregator
                           ├── RecommendationEngine
                           └── CustomerSegmentationEngine

Operations
----------
forecast(product_id, window_days=30)         -> ForecastResult | None
scan_fleet(risk_filter=None, limit=None)     -> list[ForecastResult]
fleet_summary()                              -> FleetSummary
recommend(strategy, product_id=..., ...)     -> RecommendationResult
frequently_bought_together(product_id)       -> RecommendationResult
segment_customer(email)                      -> CustomerAnalytics | None

Every call recomputes from the stores; nothing is cached between calls and
the engine never writes. ``None`` means "not found". Store failures surface
as ``RepositoryError``.

Usage::

    with get_connection(config.database.db_path, read_only=True) as conn:
        engine = AnalyticsEngine.from_connection(conn, config)
        summary = engine.fleet_summary()
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from storefront_analytics.config import AppConfig
from storefront_analytics.db.repositories.order_repo import OrderRepository
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.forecasting.aggregator import ForecastAggregator
from storefront_analytics.forecasting.calculator import ForecastCalculator
from storefront_analytics.history.accessor import OrderHistoryAccessor
from storefront_analytics.models.analytics import (
    CustomerAnalytics,
    FleetSummary,
    ForecastResult,
    RecommendationResult,
)
from storefront_analytics.recommendations.engine import RecommendationEngine
from storefront_analytics.segmentation.engine import CustomerSegmentationEngine
from storefront_analytics.taxonomy import RecommendationStrategy, RiskLevel
from storefront_analytics.utils.time_utils import Clock, utcnow


class AnalyticsEngine:
    """Forecasting, recommendations and segmentation over shared order history.

    Args:
        orders: Order store (read-only use).
        products: Catalog store (read-only use).
        config: Policy sections; defaults apply when omitted.
        clock: Returns "now" as an aware UTC datetime.
    """

    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        config: AppConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        config = config or AppConfig()
        self.config = config
        history = OrderHistoryAccessor(orders)

        self.calculator = ForecastCalculator(products, history, config.forecast, clock)
        self.aggregator = ForecastAggregator(products, self.calculator, config.fleet)
        self.recommender = RecommendationEngine(products, history, config.recommendations, clock)
        self.segmenter = CustomerSegmentationEngine(history, config.segmentation, clock)

    @classmethod
    def from_connection(
        cls,
        conn: sqlite3.Connection,
        config: AppConfig | None = None,
        clock: Clock = utcnow,
    ) -> "AnalyticsEngine":
        """Build an engine over the sqlite-backed repositories."""
        return cls(OrderRepository(conn), ProductRepository(conn), config, clock)

    def forecast(self, product_id: str, window_days: Optional[int] = None) -> Optional[ForecastResult]:
        return self.calculator.forecast(product_id, window_days)

    def scan_fleet(
        self,
        risk_filter: Optional[Iterable[RiskLevel | str]] = None,
        limit: Optional[int] = None,
    ) -> list[ForecastResult]:
        return self.aggregator.scan_fleet(risk_filter, limit)

    def fleet_summary(self) -> FleetSummary:
        return self.aggregator.fleet_summary()

    def recommend(
        self,
        strategy: RecommendationStrategy | str,
        product_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        return self.recommender.recommend(
            strategy, product_id=product_id, customer_email=customer_email, limit=limit
        )

    def frequently_bought_together(
        self, product_id: str, limit: Optional[int] = None
    ) -> RecommendationResult:
        """Co-purchase recommendations with the "bought together" default limit."""
        return RecommendationResult(
            strategy=RecommendationStrategy.CO_PURCHASE,
            products=self.recommender.frequently_bought_together(product_id, limit),
        )

    def segment_customer(self, customer_email: str) -> Optional[CustomerAnalytics]:
        return self.segmenter.analyze(customer_email)
