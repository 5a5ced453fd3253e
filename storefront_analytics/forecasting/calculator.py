"""
Forecast Calculator: sales velocity, trend and stockout risk for one product.

Velocity
--------
    average_daily_sales = units_sold_in_window / window_days

The denominator is the window length, not the number of orders, so sparse
sales dilute the average.

Days until stockout
-------------------
    stock == 0          -> 0
    no sales in window  -> sentinel (999), never infinity, so results sort
    otherwise           -> floor(stock / average_daily_sales)

Trend
-----
Daily buckets (UTC order date) are split at the midpoint date, today's UTC
date minus ``window // 2`` whole days (time of day never moves it).
Buckets strictly before the midpoint form the first half. With
``pct = (second - first) / first * 100``::

    first == 0           -> stable
    pct > +threshold     -> increasing
    pct < -threshold     -> decreasing
    otherwise            -> stable

Reorder guidance
----------------
    reorder_point  = ceil(velocity * (lead_time + safety_stock))
    order_quantity = ceil(velocity * horizon)   # horizon 60 if increasing, else 30

Reorder maths runs on the integer unit totals (``units * days / window``)
rather than on the rounded velocity, so whole-number results are exact.

Risk
----
    days <= 3 -> critical, <= 7 -> high, <= 14 -> medium, else low
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Optional

from storefront_analytics.config import ForecastPolicy
from storefront_analytics.db.repositories.product_repo import ProductRepository
from storefront_analytics.history.accessor import OrderHistoryAccessor
from storefront_analytics.models.analytics import ForecastResult
from storefront_analytics.taxonomy import RiskLevel, Trend
from storefront_analytics.utils.time_utils import Clock, day_key, utcnow

logger = logging.getLogger(__name__)


# ── Pure policy functions ─────────────────────────────────────────────────────


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def days_until_stockout(
    current_stock: int,
    units_sold: int,
    window_days: int,
    sentinel: int = 999,
) -> int:
    """Whole days until ``current_stock`` runs out at the window's velocity.

    Args:
        current_stock: Units on hand.
        units_sold: Units sold during the window.
        window_days: Window length in days.
        sentinel: Value returned when nothing sold.

    Returns:
        Non-negative whole days, or ``sentinel``.
    """
    if current_stock <= 0:
        return 0
    if units_sold <= 0 or window_days <= 0:
        return sentinel
    # floor(stock / (sold / window)) without float error
    return (current_stock * window_days) // units_sold


def classify_trend(
    daily_sales: dict[date, int],
    midpoint: date,
    threshold_pct: float = 20.0,
) -> Trend:
    """Compare units sold before ``midpoint`` with units sold on/after it."""
    first_half = sum(qty for day, qty in daily_sales.items() if day < midpoint)
    second_half = sum(qty for day, qty in daily_sales.items() if day >= midpoint)

    if first_half <= 0:
        return Trend.STABLE

    change_pct = (second_half - first_half) / first_half * 100
    if change_pct > threshold_pct:
        return Trend.INCREASING
    if change_pct < -threshold_pct:
        return Trend.DECREASING
    return Trend.STABLE


def trend_midpoint(now: datetime, window_days: int) -> date:
    """First day of the second half: ``now``'s UTC date minus ``window_days // 2`` days."""
    return day_key(now) - timedelta(days=window_days // 2)


def classify_risk(days: int, policy: ForecastPolicy) -> RiskLevel:
    """Map days-until-stockout to a risk bucket (bounds inclusive)."""
    if days <= policy.risk_critical_days:
        return RiskLevel.CRITICAL
    if days <= policy.risk_high_days:
        return RiskLevel.HIGH
    if days <= policy.risk_medium_days:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def units_for_days(units_sold: int, window_days: int, days: int) -> int:
    """``ceil(velocity * days)`` where ``velocity = units_sold / window_days``."""
    if units_sold <= 0:
        return 0
    return _ceil_div(units_sold * days, window_days)


# ── Calculator ────────────────────────────────────────────────────────────────


class ForecastCalculator:
    """Computes a ``ForecastResult`` for one product from raw order history.

    Args:
        products: Catalog store (stock, name).
        history: Order history accessor.
        policy: Forecasting policy constants.
        clock: Returns "now" as an aware UTC datetime.
    """

    def __init__(
        self,
        products: ProductRepository,
        history: OrderHistoryAccessor,
        policy: ForecastPolicy | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.products = products
        self.history = history
        self.policy = policy or ForecastPolicy()
        self.clock = clock

    def forecast(
        self,
        product_id: str,
        window_days: Optional[int] = None,
    ) -> Optional[ForecastResult]:
        """Forecast stock exhaustion for ``product_id``.

        Args:
            product_id: Product to forecast.
            window_days: Analysis window length; defaults to
                ``policy.default_window_days``.

        Returns:
            ``ForecastResult``, or ``None`` when the product does not exist.

        Raises:
            ValueError: If ``window_days`` is not a positive integer.
            RepositoryError: If either store fails.
        """
        window = self.policy.default_window_days if window_days is None else window_days
        if window < 1:
            raise ValueError(f"window_days must be >= 1, got {window}.")

        product = self.products.get(product_id)
        if product is None:
            logger.debug("Forecast requested for unknown product %s.", product_id)
            return None

        now = self.clock()
        units_sold = 0
        daily_sales: dict[date, int] = defaultdict(int)
        for parsed in self.history.in_window(now - timedelta(days=window), now):
            for item in parsed.items:
                if item.product_id == product_id:
                    units_sold += item.quantity
                    daily_sales[day_key(parsed.order.created_at)] += item.quantity

        trend = classify_trend(
            daily_sales, trend_midpoint(now, window), self.policy.trend_threshold_pct
        )

        days_left = days_until_stockout(
            product.stock, units_sold, window, self.policy.stockout_sentinel_days
        )
        horizon = (
            self.policy.increasing_order_horizon_days
            if trend is Trend.INCREASING
            else self.policy.order_horizon_days
        )

        return ForecastResult(
            product_id=product.product_id,
            product_name=product.name,
            current_stock=product.stock,
            average_daily_sales=round(units_sold / window, 2),
            days_until_stockout=days_left,
            recommended_reorder_point=units_for_days(
                units_sold, window, self.policy.lead_time_days + self.policy.safety_stock_days
            ),
            suggested_order_quantity=units_for_days(units_sold, window, horizon),
            trend=trend,
            risk_level=classify_risk(days_left, self.policy),
        )
