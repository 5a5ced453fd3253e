"""
Label vocabularies shared by the engine, its output models and the CLI.

This module has NO imports from any other ``storefront_analytics`` package.
"""

from enum import StrEnum


class Trend(StrEnum):
    """Direction of sales velocity across an analysis window."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class RiskLevel(StrEnum):
    """Stockout risk bucket, a step function of days until stockout."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank: critical first."""
        return _RISK_RANK[self]


_RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.CRITICAL: 0,
    RiskLevel.HIGH: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 3,
}


class Segment(StrEnum):
    """Customer segment derived from the RFM score."""

    VIP = "VIP"
    LOYAL = "Loyal"
    REGULAR = "Regular"
    AT_RISK = "At Risk"
    NEW = "New"


class RecommendationStrategy(StrEnum):
    """Recommendation strategies exposed by the engine."""

    CO_PURCHASE = "coPurchase"
    CATEGORY_AFFINITY = "categoryAffinity"
    TRENDING = "trending"
    PERSONALIZED = "personalized"
