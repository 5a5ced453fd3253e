"""
Forecast Aggregator: fleet-wide stockout scan and inventory health summary.

Only products with ``stock <= fleet.candidate_max_stock`` (50) are scanned.
Comfortably stocked products cannot reach a risky bucket at normal sales
velocities, and each forecast re-scans the order window.

Scan order (a contract dashboards rely on):
  1. risk rank: critical, high, medium, low
  2. days until stockout, ascending
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from storefront_analytics.config import FleetPolicy
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.forecasting.calculator import ForecastCalculator
from storefront_analytics.models.analytics import FleetSummary, ForecastResult
from storefront_analytics.taxonomy import RiskLevel

logger = logging.getLogger(__name__)


def sort_by_risk(forecasts: Iterable[ForecastResult]) -> list[ForecastResult]:
    """Order forecasts most-urgent first: risk rank, then days until stockout."""
    return sorted(forecasts, key=lambda f: (f.risk_level.rank, f.days_until_stockout))


def summarize_forecasts(
    forecasts: list[ForecastResult],
    long_tail_days: int = 365,
) -> FleetSummary:
    """Build a ``FleetSummary`` from already-computed forecasts.

    ``average_days_to_stockout`` ignores forecasts at or beyond
    ``long_tail_days`` (including the no-sales sentinel) and is rounded half
    up to a whole day; ``0`` when nothing qualifies.
    """
    counts = {level: 0 for level in RiskLevel}
    for fc in forecasts:
        counts[fc.risk_level] += 1

    near_term = [f.days_until_stockout for f in forecasts if f.days_until_stockout < long_tail_days]
    average = math.floor(sum(near_term) / len(near_term) + 0.5) if near_term else 0

    return FleetSummary(
        total=len(forecasts),
        critical=counts[RiskLevel.CRITICAL],
        high=counts[RiskLevel.HIGH],
        medium=counts[RiskLevel.MEDIUM],
        low=counts[RiskLevel.LOW],
        needs_reorder=sum(1 for f in forecasts if f.needs_reorder),
        average_days_to_stockout=average,
    )


class ForecastAggregator:
    """Runs the ``ForecastCalculator`` over every low-stock product.

    Args:
        products: Catalog store (candidate listing).
        calculator: Per-product forecaster.
        policy: Fleet scan settings.
    """

    def __init__(
        self,
        products: ProductRepository,
        calculator: ForecastCalculator,
        policy: FleetPolicy | None = None,
    ) -> None:
        self.products = products
        self.calculator = calculator
        self.policy = policy or FleetPolicy()

    def scan_fleet(
        self,
        risk_filter: Optional[Iterable[RiskLevel | str]] = None,
        limit: Optional[int] = None,
    ) -> list[ForecastResult]:
        """Forecast all candidates, filter by risk, sort most-urgent first.

        Args:
            risk_filter: Risk levels to keep; ``None`` keeps all.
            limit: Maximum number of results; ``None`` for all.

        Returns:
            Sorted list of ``ForecastResult``.

        Raises:
            ValueError: On an unknown risk level or a negative ``limit``.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}.")
        wanted = None if risk_filter is None else {RiskLevel(level) for level in risk_filter}

        candidates = self.products.list_candidates(self.policy.candidate_max_stock)
        forecasts: list[ForecastResult] = []
        for product in candidates:
            fc = self.calculator.forecast(product.product_id)
            if fc is None:
                # removed from the catalog between listing and forecasting
                continue
            if wanted is None or fc.risk_level in wanted:
                forecasts.append(fc)

        logger.info(
            "Fleet scan: %d candidates, %d forecasts kept.", len(candidates), len(forecasts)
        )
        ranked = sort_by_risk(forecasts)
        return ranked if limit is None else ranked[:limit]

    def fleet_summary(self) -> FleetSummary:
        """Inventory health across every scanned candidate."""
        return summarize_forecasts(self.scan_fleet(), self.policy.long_tail_days)
