"""Tests for storefront_analytics.segmentation.rfm."""

from __future__ import annotations

import pytest

from storefront_analytics.config import SegmentationPolicy
from storefront_analytics.segmentation.rfm import (
    classify_segment,
    frequency_score,
    monetary_score,
    recency_score,
    score_rfm,
)
from storefront_analytics.taxonomy import Segment

_POLICY = SegmentationPolicy()


@pytest.mark.parametrize(
    "days, expected",
    [(0, 5), (30, 5), (31, 4), (60, 4), (61, 3), (90, 3), (91, 2), (180, 2), (181, 1), (900, 1)],
)
def test_recency_score(days, expected) -> None:
    assert recency_score(days, _POLICY.recency_days) == expected


@pytest.mark.parametrize(
    "orders, expected",
    [(1, 1), (2, 2), (4, 2), (5, 3), (9, 3), (10, 4), (19, 4), (20, 5), (250, 5)],
)
def test_frequency_score(orders, expected) -> None:
    assert frequency_score(orders, _POLICY.frequency_orders) == expected


@pytest.mark.parametrize(
    "spent, expected",
    [(0.0, 1), (99.99, 1), (100.0, 2), (249.99, 2), (250.0, 3), (500.0, 4), (999.99, 4), (1000.0, 5)],
)
def test_monetary_score(spent, expected) -> None:
    assert monetary_score(spent, _POLICY.monetary_spent) == expected


class TestScoreRfm:
    def test_vip(self):
        rfm = score_rfm(days_since_last_order=1, total_orders=25, total_spent=1200.0)
        assert (rfm.recency, rfm.frequency, rfm.monetary) == (5, 5, 5)
        assert rfm.score == 15
        assert rfm.segment == Segment.VIP

    def test_single_old_order_is_new_not_at_risk(self):
        rfm = score_rfm(days_since_last_order=200, total_orders=1, total_spent=50.0)
        assert (rfm.recency, rfm.frequency, rfm.monetary) == (1, 1, 1)
        assert rfm.score == 3
        assert rfm.segment == Segment.NEW

    def test_at_risk(self):
        rfm = score_rfm(days_since_last_order=120, total_orders=3, total_spent=150.0)
        assert rfm.score == 6
        assert rfm.segment == Segment.AT_RISK

    def test_loyal(self):
        rfm = score_rfm(days_since_last_order=45, total_orders=10, total_spent=500.0)
        assert rfm.score == 12
        assert rfm.segment == Segment.LOYAL

    def test_score_band_beats_inactivity(self):
        rfm = score_rfm(days_since_last_order=100, total_orders=5, total_spent=250.0)
        assert rfm.score == 8
        assert rfm.segment == Segment.REGULAR

    def test_exactly_ninety_days_is_not_at_risk(self):
        rfm = score_rfm(days_since_last_order=90, total_orders=2, total_spent=20.0)
        assert rfm.score == 6
        assert rfm.segment == Segment.NEW

    def test_custom_thresholds(self):
        policy = SegmentationPolicy(vip_min_score=9, loyal_min_score=6, regular_min_score=4)
        rfm = score_rfm(days_since_last_order=100, total_orders=5, total_spent=250.0, policy=policy)
        assert rfm.segment == Segment.LOYAL


@pytest.mark.parametrize(
    "score, expected",
    [(13, Segment.VIP), (12, Segment.LOYAL), (10, Segment.LOYAL), (9, Segment.REGULAR), (7, Segment.REGULAR)],
)
def test_classify_segment_bands(score, expected) -> None:
    assert classify_segment(score, 0, 1, _POLICY) == expected
