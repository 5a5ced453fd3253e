"""
RFM scoring.

Each dimension scores 1–5 from the edges in ``SegmentationPolicy``:

  Recency   days since last order   >180 ->1, >90 ->2, >60 ->3, >30 ->4, else 5
  Frequency number of orders        >=20 ->5, >=10 ->4, >=5 ->3, >=2 ->2, else 1
  Monetary  total spent             >=1000->5, >=500->4, >=250->3, >=100->2, else 1

Segments are checked top-down, first match wins::

  score >= 13                                   VIP
  score >= 10                                   Loyal
  score >= 7                                    Regular
  inactive > 90 days and more than one order    At Risk
  otherwise                                     New

A low-scoring customer is "At Risk" only when none of the score bands
matched, and a one-order customer is never "At Risk".
"""

from __future__ import annotations

from storefront_analytics.config import SegmentationPolicy
from storefront_analytics.models.analytics import RfmScore
from storefront_analytics.taxonomy import Segment


def recency_score(days_since_last_order: int, edges: list[int]) -> int:
    for i, edge in enumerate(edges):
        if days_since_last_order > edge:
            return i + 1
    return len(edges) + 1


def frequency_score(total_orders: int, edges: list[int]) -> int:
    for i, edge in enumerate(edges):
        if total_orders >= edge:
            return len(edges) + 1 - i
    return 1


def monetary_score(total_spent: float, edges: list[float]) -> int:
    for i, edge in enumerate(edges):
        if total_spent >= edge:
            return len(edges) + 1 - i
    return 1


def classify_segment(
    score: int,
    days_since_last_order: int,
    total_orders: int,
    policy: SegmentationPolicy,
) -> Segment:
    """Segment label for an RFM total (see module docstring for the order)."""
    if score >= policy.vip_min_score:
        return Segment.VIP
    if score >= policy.loyal_min_score:
        return Segment.LOYAL
    if score >= policy.regular_min_score:
        return Segment.REGULAR
    if (
        days_since_last_order > policy.at_risk_inactive_days
        and total_orders >= policy.at_risk_min_orders
    ):
        return Segment.AT_RISK
    return Segment.NEW


def score_rfm(
    days_since_last_order: int,
    total_orders: int,
    total_spent: float,
    policy: SegmentationPolicy | None = None,
) -> RfmScore:
    """Score a customer and assign a segment.

    Args:
        days_since_last_order: Whole days since the most recent order.
        total_orders: Lifetime order count.
        total_spent: Lifetime spend.
        policy: Bucket edges and segment thresholds.

    Returns:
        ``RfmScore`` with a total in ``[3, 15]``.
    """
    policy = policy or SegmentationPolicy()
    recency = recency_score(days_since_last_order, policy.recency_days)
    frequency = frequency_score(total_orders, policy.frequency_orders)
    monetary = monetary_score(total_spent, policy.monetary_spent)
    score = recency + frequency + monetary
    return RfmScore(
        recency=recency,
        frequency=frequency,
        monetary=monetary,
        score=score,
        segment=classify_segment(score, days_since_last_order, total_orders, policy),
    )
