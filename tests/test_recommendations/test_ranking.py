"""Tests for storefront_analytics.recommendations.ranking."""

from __future__ import annotations

from storefront_analytics.recommendations.ranking import (
    count_occurrences,
    most_frequent,
    rank_by_frequency,
)


def test_count_occurrences_ignores_none() -> None:
    counts = count_occurrences(["a", None, "b", "a", None])
    assert dict(counts) == {"a": 2, "b": 1}


def test_rank_by_frequency_descending() -> None:
    assert rank_by_frequency({"a": 1, "b": 3, "c": 2}) == ["b", "c", "a"]


def test_ties_keep_first_encountered_order() -> None:
    counts = count_occurrences(["x", "y", "z", "y", "x"])
    assert rank_by_frequency(counts) == ["x", "y", "z"]


def test_limit() -> None:
    assert rank_by_frequency({"a": 5, "b": 4, "c": 3}, limit=2) == ["a", "b"]


def test_empty() -> None:
    assert rank_by_frequency({}) == []
    assert most_frequent({}) is None


def test_most_frequent_tie_goes_to_first() -> None:
    assert most_frequent(count_occurrences(["Oak", "Clay", "Clay", "Oak"])) == "Oak"
