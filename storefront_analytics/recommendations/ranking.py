"""
Frequency ranking: the primitive shared by all recommendation strategies.

Counts are kept in insertion-ordered ``Counter`` objects and sorted with a
stable sort, so equal counts keep first-encountered order. Because the order
repository always iterates ``(created_at, order_id)`` ascending, rankings
over unchanged data are identical across re-scans.
"""

from __future__ import annotations

from collections import Counter
from typing import Hashable, Iterable, Mapping, Optional, TypeVar

K = TypeVar("K", bound=Hashable)


def count_occurrences(values: Iterable[K]) -> Counter[K]:
    """One count per occurrence; ``None`` values are ignored."""
    counts: Counter[K] = Counter()
    for value in values:
        if value is not None:
            counts[value] += 1
    return counts


def rank_by_frequency(counts: Mapping[K, int], limit: Optional[int] = None) -> list[K]:
    """Keys sorted by count descending, ties in first-encountered order.

    Args:
        counts: Key -> count (or summed weight).
        limit: Keep only the top ``limit`` keys; ``None`` keeps all.

    Returns:
        Ranked keys.
    """
    ranked = [key for key, _ in sorted(counts.items(), key=lambda kv: -kv[1])]
    return ranked if limit is None else ranked[:limit]


def most_frequent(counts: Mapping[K, int]) -> Optional[K]:
    """The single top-ranked key, or ``None`` for empty counts."""
    top = rank_by_frequency(counts, limit=1)
    return top[0] if top else None
