"""
Customer Segmentation Engine.

``analyze(email)`` loads every order the customer placed (oldest first) and
derives:

  - metrics: order count, total spent, average order value, lifetime value
    (equal to total spent: no discounting or churn adjustment), first/last
    order dates, whole days since the last order;
  - RFM scores and segment (``segmentation.rfm``);
  - top category preferences by line-item count, with spend per category;
    items without a category are folded into "Uncategorized";
  - a chronological timeline of ``{date, total, itemCount}``.

Order totals come from the order row, so they count even when an order's
line items cannot be parsed; such an order contributes nothing to category
preferences and shows ``itemCount = 0`` on the timeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from storefront_analytics.config import SegmentationPolicy
from storefront_analytics.history.accessor import OrderHistoryAccessor, try_parse_line_items
from storefront_analytics.models.analytics import (
    CategoryPreference,
    CustomerAnalytics,
    CustomerIdentity,
    CustomerMetrics,
    TimelineEntry,
)
from storefront_analytics.models.order import LineItem, Order
from storefront_analytics.segmentation.rfm import score_rfm
from storefront_analytics.utils.time_utils import Clock, day_key, utcnow, whole_days_between

logger = logging.getLogger(__name__)


@dataclass
class _CategoryStats:
    count: int = 0
    total_spent: float = 0.0


def category_preferences(
    parsed_items: list[list[LineItem]],
    top_n: int = 5,
    uncategorized_label: str = "Uncategorized",
) -> list[CategoryPreference]:
    """Rank categories by number of line items bought.

    Args:
        parsed_items: Line items of each parsable order.
        top_n: How many categories to keep.
        uncategorized_label: Bucket for items without a category.

    Returns:
        Up to ``top_n`` preferences, count descending (ties in
        first-encountered order), spend rounded to 2 decimals.
    """
    stats: dict[str, _CategoryStats] = {}
    for items in parsed_items:
        for item in items:
            label = item.category or uncategorized_label
            bucket = stats.setdefault(label, _CategoryStats())
            bucket.count += 1
            bucket.total_spent += item.line_total

    ranked = sorted(stats.items(), key=lambda kv: -kv[1].count)[:top_n]
    return [
        CategoryPreference(category=label, count=s.count, total_spent=round(s.total_spent, 2))
        for label, s in ranked
    ]


def order_timeline(orders: list[Order], parsed: list[Optional[list[LineItem]]]) -> list[TimelineEntry]:
    """One entry per order, in the order given; unparsable orders count 0 items."""
    return [
        TimelineEntry(
            order_id=order.order_id,
            order_date=day_key(order.created_at),
            total=round(order.total, 2),
            item_count=sum(item.quantity for item in items) if items is not None else 0,
        )
        for order, items in zip(orders, parsed)
    ]


def customer_identity(email: str, first_order_items: Optional[list[LineItem]]) -> CustomerIdentity:
    """Derive first/last name from the first order's ``customerName``, if recorded."""
    if first_order_items and first_order_items[0].customer_name:
        first, _, rest = first_order_items[0].customer_name.strip().partition(" ")
        return CustomerIdentity(email=email, first_name=first, last_name=rest.strip())
    return CustomerIdentity(email=email)


class CustomerSegmentationEngine:
    """Computes ``CustomerAnalytics`` for one customer.

    Args:
        history: Order history accessor.
        policy: RFM edges, segment thresholds and preference settings.
        clock: Returns "now" as an aware UTC datetime.
    """

    def __init__(
        self,
        history: OrderHistoryAccessor,
        policy: SegmentationPolicy | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.history = history
        self.policy = policy or SegmentationPolicy()
        self.clock = clock

    def analyze(self, customer_email: str) -> Optional[CustomerAnalytics]:
        """Full behavioral profile for ``customer_email``.

        Returns:
            ``CustomerAnalytics``, or ``None`` when the customer has no orders.

        Raises:
            RepositoryError: If the order store fails.
        """
        orders = self.history.for_customer(customer_email)
        if not orders:
            logger.debug("No orders for customer %s.", customer_email)
            return None

        orders = sorted(orders, key=lambda o: (o.created_at, o.order_id))
        parsed = [try_parse_line_items(order) for order in orders]

        first, last = orders[0], orders[-1]
        total_orders = len(orders)
        total_spent = sum(order.total for order in orders)
        days_since = max(0, whole_days_between(last.created_at, self.clock()))

        metrics = CustomerMetrics(
            total_orders=total_orders,
            total_spent=round(total_spent, 2),
            average_order_value=round(total_spent / total_orders, 2),
            lifetime_value=round(total_spent, 2),
            first_order_date=day_key(first.created_at),
            last_order_date=day_key(last.created_at),
            days_since_last_order=days_since,
        )

        return CustomerAnalytics(
            customer=customer_identity(customer_email, parsed[0]),
            metrics=metrics,
            rfm=score_rfm(days_since, total_orders, total_spent, self.policy),
            category_preferences=category_preferences(
                [items for items in parsed if items is not None],
                top_n=self.policy.top_categories,
                uncategorized_label=self.policy.uncategorized_label,
            ),
            order_history=order_timeline(orders, parsed),
        )
