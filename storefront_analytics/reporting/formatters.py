"""
ASCII terminal formatters for CLI commands.

All formatters accept engine result models and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from storefront_analytics.models.analytics import (
    CustomerAnalytics,
    FleetSummary,
    ForecastResult,
    RecommendationResult,
)

_RISK_TAGS: dict[str, str] = {
    "critical": "[CRIT]",
    "high":     "[HIGH]",
    "medium":   "[MED]",
    "low":      "[LOW]",
}


def _days_str(days: int, sentinel: int) -> str:
    return "no sales" if days >= sentinel else f"{days}d"


# ── Forecasts ─────────────────────────────────────────────────────────────────


def format_forecast_detail(forecast: ForecastResult, sentinel: int = 999) -> str:
    """Format one product forecast as a labelled block."""
    lines = [
        "",
        f"=== Forecast: {forecast.product_name} ({forecast.product_id}) ===",
        f"  Risk:               {_RISK_TAGS[forecast.risk_level]} {forecast.risk_level}",
        f"  Current stock:      {forecast.current_stock}",
        f"  Avg daily sales:    {forecast.average_daily_sales:.2f}",
        f"  Days to stockout:   {_days_str(forecast.days_until_stockout, sentinel)}",
        f"  Trend:              {forecast.trend}",
        f"  Reorder point:      {forecast.recommended_reorder_point}",
        f"  Suggested order:    {forecast.suggested_order_quantity}",
    ]
    if forecast.needs_reorder:
        lines.append("  >> Stock is at or below the reorder point.")
    return "\n".join(lines)


def format_forecast_table(
    forecasts: list[ForecastResult],
    sentinel: int = 999,
    title: str = "Inventory Forecasts",
) -> str:
    """Format fleet-scan results as a table, in the order given.

    Columns: risk, product, stock, velocity, days to stockout, trend,
    reorder point, suggested order.
    """
    lines: list[str] = ["", f"=== {title} ==="]

    if not forecasts:
        lines.append("")
        lines.append("  (no products matched)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'Risk':<6}  {'Product':<28}  {'Stock':>6}  {'Per day':>8}  "
        f"{'Stockout':>9}  {'Trend':<10}  {'Reorder':>7}  {'Order':>6}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for fc in forecasts:
        name = f"{fc.product_name} ({fc.product_id})"[:28]
        lines.append(
            f"  {_RISK_TAGS[fc.risk_level]:<6}  {name:<28}  {fc.current_stock:>6}  "
            f"{fc.average_daily_sales:>8.2f}  {_days_str(fc.days_until_stockout, sentinel):>9}  "
            f"{fc.trend:<10}  {fc.recommended_reorder_point:>7}  {fc.suggested_order_quantity:>6}"
        )

    lines.append("")
    lines.append(f"  {len(forecasts)} product(s)")
    return "\n".join(lines)


def format_fleet_summary(summary: FleetSummary) -> str:
    """Format inventory health counts."""
    lines = [
        "",
        "=== Inventory Health ===",
        f"  Products scanned:        {summary.total}",
        f"  Critical:                {summary.critical}",
        f"  High:                    {summary.high}",
        f"  Medium:                  {summary.medium}",
        f"  Low:                     {summary.low}",
        f"  Needs reorder:           {summary.needs_reorder}",
        f"  Avg days to stockout:    {summary.average_days_to_stockout}",
    ]
    if summary.critical:
        lines.append("")
        lines.append(f"  [WARN] {summary.critical} product(s) will run out within days.")
    return "\n".join(lines)


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations(result: RecommendationResult) -> str:
    """Format a recommendation list in rank order."""
    lines = ["", f"=== Recommendations ({result.strategy}) ==="]
    if not result.products:
        lines.append("")
        lines.append("  (no recommendations)")
        return "\n".join(lines)

    lines.append("")
    header = f"  {'#':>2}  {'Product':<32}  {'Category':<16}  {'Material':<14}  {'Price':>9}  {'Stock':>5}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for rank, p in enumerate(result.products, start=1):
        name = f"{p.name} ({p.product_id})"[:32]
        lines.append(
            f"  {rank:>2}  {name:<32}  {(p.category or '-')[:16]:<16}  "
            f"{(p.material or '-')[:14]:<14}  {p.price:>9.2f}  {p.stock:>5}"
        )
    return "\n".join(lines)


# ── Customers ─────────────────────────────────────────────────────────────────


def format_customer_analytics(analytics: CustomerAnalytics, timeline_rows: int = 10) -> str:
    """Format a customer profile: metrics, RFM, categories, recent timeline."""
    c, m, rfm = analytics.customer, analytics.metrics, analytics.rfm
    name = " ".join(part for part in (c.first_name, c.last_name) if part)

    lines = [
        "",
        f"=== Customer: {c.email} ===",
    ]
    if name:
        lines.append(f"  Name:                {name}")
    lines += [
        f"  Segment:             {rfm.segment}  (RFM {rfm.score}/15: "
        f"R{rfm.recency} F{rfm.frequency} M{rfm.monetary})",
        f"  Orders:              {m.total_orders}",
        f"  Total spent:         {m.total_spent:.2f}",
        f"  Avg order value:     {m.average_order_value:.2f}",
        f"  First / last order:  {m.first_order_date.isoformat()} / {m.last_order_date.isoformat()}",
        f"  Days since last:     {m.days_since_last_order}",
    ]

    lines.append("")
    lines.append("  Top categories:")
    if analytics.category_preferences:
        for pref in analytics.category_preferences:
            lines.append(f"    {pref.category:<24}  {pref.count:>4} item(s)  {pref.total_spent:>10.2f}")
    else:
        lines.append("    (none)")

    lines.append("")
    history = analytics.order_history
    shown = history[-timeline_rows:]
    lines.append(f"  Recent orders ({len(shown)} of {len(history)}):")
    for entry in shown:
        lines.append(
            f"    {entry.order_date.isoformat()}  {entry.order_id:<16}  "
            f"{entry.total:>10.2f}  {entry.item_count:>3} unit(s)"
        )
    return "\n".join(lines)
