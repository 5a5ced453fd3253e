"""Tests for storefront_analytics.reporting.formatters."""

from __future__ import annotations

from datetime import date

from storefront_analytics.models.analytics import (
    CategoryPreference,
    CustomerAnalytics,
    CustomerIdentity,
    CustomerMetrics,
    FleetSummary,
    ForecastResult,
    RecommendationResult,
    RfmScore,
    TimelineEntry,
)
from storefront_analytics.models.product import ProductSummary
from storefront_analytics.reporting.formatters import (
    format_customer_analytics,
    format_fleet_summary,
    format_forecast_detail,
    format_forecast_table,
    format_recommendations,
)
from storefront_analytics.taxonomy import RecommendationStrategy, RiskLevel, Segment, Trend


def _forecast(days: int = 2, risk: RiskLevel = RiskLevel.CRITICAL, stock: int = 2) -> ForecastResult:
    return ForecastResult(
        product_id="p1",
        product_name="Oak Bowl",
        current_stock=stock,
        average_daily_sales=1.0,
        days_until_stockout=days,
        recommended_reorder_point=14,
        suggested_order_quantity=60,
        trend=Trend.INCREASING,
        risk_level=risk,
    )


def test_forecast_detail() -> None:
    text = format_forecast_detail(_forecast())
    assert "Oak Bowl (p1)" in text
    assert "[CRIT] critical" in text
    assert "2d" in text
    assert "increasing" in text
    assert "reorder point" in text


def test_forecast_detail_no_sales() -> None:
    text = format_forecast_detail(_forecast(days=999, risk=RiskLevel.LOW, stock=40))
    assert "no sales" in text
    assert "reorder point." not in text


def test_forecast_table_rows_in_given_order() -> None:
    first = _forecast()
    second = _forecast(days=10, risk=RiskLevel.MEDIUM).model_copy(update={"product_id": "p2"})
    text = format_forecast_table([first, second])
    assert text.index("(p1)") < text.index("(p2)")
    assert "2 product(s)" in text


def test_forecast_table_empty() -> None:
    assert "(no products matched)" in format_forecast_table([])


def test_fleet_summary_warns_on_critical() -> None:
    summary = FleetSummary(
        total=3, critical=1, high=1, medium=0, low=1,
        needs_reorder=2, average_days_to_stockout=6,
    )
    text = format_fleet_summary(summary)
    assert "Products scanned:        3" in text
    assert "[WARN] 1 product(s)" in text


def test_recommendations() -> None:
    result = RecommendationResult(
        strategy=RecommendationStrategy.CO_PURCHASE,
        products=[ProductSummary(product_id="p2", name="Oak Spoon", price=12.5,
                                 category="Spoons", material=None, stock=4)],
    )
    text = format_recommendations(result)
    assert "coPurchase" in text
    assert "Oak Spoon (p2)" in text
    assert "12.50" in text


def test_recommendations_empty() -> None:
    result = RecommendationResult(strategy=RecommendationStrategy.TRENDING, products=[])
    assert "(no recommendations)" in format_recommendations(result)


def test_customer_analytics() -> None:
    analytics = CustomerAnalytics(
        customer=CustomerIdentity(email="ana@example.com", first_name="Ana", last_name="Lima"),
        metrics=CustomerMetrics(
            total_orders=2, total_spent=90.0, average_order_value=45.0, lifetime_value=90.0,
            first_order_date=date(2026, 1, 1), last_order_date=date(2026, 2, 1),
            days_since_last_order=28,
        ),
        rfm=RfmScore(recency=5, frequency=2, monetary=1, score=8, segment=Segment.REGULAR),
        category_preferences=[CategoryPreference(category="Bowls", count=2, total_spent=90.0)],
        order_history=[
            TimelineEntry(order_id="o1", order_date=date(2026, 1, 1), total=40.0, item_count=1),
            TimelineEntry(order_id="o2", order_date=date(2026, 2, 1), total=50.0, item_count=1),
        ],
    )
    text = format_customer_analytics(analytics, timeline_rows=1)
    assert "Ana Lima" in text
    assert "Regular" in text
    assert "RFM 8/15" in text
    assert "Bowls" in text
    assert "Recent orders (1 of 2)" in text
    assert "o2" in text and "o1" not in text.split("Recent orders")[1]
