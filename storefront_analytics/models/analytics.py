"""
Derived analytics outputs.

None of these are persisted: each is recomputed from raw order history on
every call. All are frozen and serialize to camelCase JSON
(``model_dump(mode="json", by_alias=True)``), the shape the admin dashboard
and storefront widgets consume.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storefront_analytics.models.product import ProductSummary
from storefront_analytics.taxonomy import RecommendationStrategy, RiskLevel, Segment, Trend

_OUTPUT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ── Forecasting ───────────────────────────────────────────────────────────────


class ForecastResult(BaseModel):
    """Inventory-exhaustion forecast for one product.

    Attributes:
        product_id: Forecast subject.
        product_name: Display name at forecast time.
        current_stock: Units on hand.
        average_daily_sales: Units sold per day over the analysis window,
            rounded to 2 decimals.
        days_until_stockout: Whole days of stock left; ``0`` when already out,
            the configured sentinel (999) when nothing sells.
        recommended_reorder_point: Stock level at which to reorder.
        suggested_order_quantity: Units to order.
        trend: Second-half vs first-half sales direction.
        risk_level: Bucket of ``days_until_stockout``.
    """

    model_config = _OUTPUT_CONFIG

    product_id: str
    product_name: str
    current_stock: int
    average_daily_sales: float
    days_until_stockout: int
    recommended_reorder_point: int
    suggested_order_quantity: int
    trend: Trend
    risk_level: RiskLevel

    @field_validator("average_daily_sales")
    @classmethod
    def validate_velocity(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"average_daily_sales must be non-negative, got {v}.")
        return v

    @field_validator("days_until_stockout")
    @classmethod
    def validate_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"days_until_stockout must be non-negative, got {v}.")
        return v

    @property
    def needs_reorder(self) -> bool:
        return self.current_stock <= self.recommended_reorder_point


class FleetSummary(BaseModel):
    """Inventory health across all scanned candidates."""

    model_config = _OUTPUT_CONFIG

    total: int
    critical: int
    high: int
    medium: int
    low: int
    needs_reorder: int
    average_days_to_stockout: int

    @model_validator(mode="after")
    def validate_counts(self) -> "FleetSummary":
        if self.critical + self.high + self.medium + self.low != self.total:
            raise ValueError("risk level counts must add up to total.")
        return self


# ── Recommendations ───────────────────────────────────────────────────────────


class RecommendationResult(BaseModel):
    """Ordered recommendations produced by one strategy."""

    model_config = _OUTPUT_CONFIG

    strategy: RecommendationStrategy
    products: list[ProductSummary]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.products)

    @property
    def product_ids(self) -> list[str]:
        return [p.product_id for p in self.products]


# ── Customer segmentation ─────────────────────────────────────────────────────


class CustomerIdentity(BaseModel):
    """Who the customer is, as far as order history tells."""

    model_config = _OUTPUT_CONFIG

    email: str
    first_name: str = ""
    last_name: str = ""


class CustomerMetrics(BaseModel):
    """Lifetime purchase metrics.

    ``lifetime_value`` equals ``total_spent``: no discounting or churn
    adjustment is applied.
    """

    model_config = _OUTPUT_CONFIG

    total_orders: int
    total_spent: float
    average_order_value: float
    lifetime_value: float
    first_order_date: date
    last_order_date: date
    days_since_last_order: int


class RfmScore(BaseModel):
    """Recency / Frequency / Monetary scores and the resulting segment."""

    model_config = _OUTPUT_CONFIG

    recency: int
    frequency: int
    monetary: int
    score: int
    segment: Segment

    @model_validator(mode="after")
    def validate_ranges(self) -> "RfmScore":
        for name in ("recency", "frequency", "monetary"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} score must be in [1, 5], got {value}.")
        if self.score != self.recency + self.frequency + self.monetary:
            raise ValueError("score must equal recency + frequency + monetary.")
        return self


class CategoryPreference(BaseModel):
    """How often, and for how much, a customer bought in one category."""

    model_config = _OUTPUT_CONFIG

    category: str
    count: int
    total_spent: float


class TimelineEntry(BaseModel):
    """One order on the customer's chronological timeline."""

    model_config = _OUTPUT_CONFIG

    order_id: str
    order_date: date = Field(alias="date")
    total: float
    item_count: int


class CustomerAnalytics(BaseModel):
    """Complete behavioral profile for one customer."""

    model_config = _OUTPUT_CONFIG

    customer: CustomerIdentity
    metrics: CustomerMetrics
    rfm: RfmScore
    category_preferences: list[CategoryPreference]
    order_history: list[TimelineEntry]

    @property
    def segment(self) -> Segment:
        return self.rfm.segment

