"""
Order History Accessor — the leaf every analytics component reads through.

Orders carry their line items as a serialized JSON array written by checkout.
Historical payloads are not uniform, so parsing is a fallible per-record step:

  ``parse_line_items(raw)``
      Strict. Raises ``MalformedRecordError`` when the blob is not a JSON
      array. Array elements that fail ``LineItem`` validation (missing id,
      non-positive quantity, ...) are dropped one by one with a warning;
      the rest of the order survives.

  ``try_parse_line_items(order)``
      Lenient wrapper returning ``None`` instead of raising. Aggregations fold
      over orders with "skip on ``None``", so one bad order never changes the
      totals computed from the others.

Nothing here is cached: each call re-reads the repository and re-parses.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError

from storefront_analytics.db.repositories.order_repo import OrderRepository
from storefront_analytics.errors import MalformedRecordError
from storefront_analytics.models.order import LineItem, Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedOrder:
    """An order together with its successfully parsed line items."""

    order: Order
    items: list[LineItem]

    def contains(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.items)

    @property
    def unit_count(self) -> int:
        """Sum of quantities across all line items."""
        return sum(item.quantity for item in self.items)


def parse_line_items(raw: Optional[str], order_id: Optional[str] = None) -> list[LineItem]:
    """Parse a serialized line-item array.

    Args:
        raw: The stored ``items`` text.
        order_id: Owning order, used only in messages.

    Returns:
        The valid line items, in stored order.

    Raises:
        MalformedRecordError: If ``raw`` is empty, not JSON, or not an array.
    """
    if not raw:
        raise MalformedRecordError("empty line-item payload", order_id=order_id)
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedRecordError(f"line items are not valid JSON: {exc}", order_id=order_id) from exc
    if not isinstance(decoded, list):
        raise MalformedRecordError(
            f"line items must be a JSON array, got {type(decoded).__name__}",
            order_id=order_id,
        )

    items: list[LineItem] = []
    for position, element in enumerate(decoded):
        try:
            items.append(LineItem.model_validate(element))
        except ValidationError as exc:
            logger.warning(
                "Skipping line item %d of order %s: %d validation error(s).",
                position, order_id, exc.error_count(),
            )
    return items


def try_parse_line_items(order: Order) -> Optional[list[LineItem]]:
    """Parse ``order``'s line items, returning ``None`` when the blob is malformed."""
    try:
        return parse_line_items(order.items_json, order_id=order.order_id)
    except MalformedRecordError as exc:
        logger.warning("Skipping order %s: %s", order.order_id, exc)
        return None


def iter_parsed(orders: Iterable[Order]) -> Iterator[ParsedOrder]:
    """Yield a ``ParsedOrder`` for every order whose payload parses."""
    for order in orders:
        items = try_parse_line_items(order)
        if items is not None:
            yield ParsedOrder(order=order, items=items)


class OrderHistoryAccessor:
    """Reads orders from the repository and exposes their parsed line items.

    Args:
        orders: The order store.
    """

    def __init__(self, orders: OrderRepository) -> None:
        self.orders = orders

    def in_window(self, start: datetime, end: datetime) -> list[ParsedOrder]:
        """Parsed orders created within ``[start, end]``, oldest first."""
        return list(iter_parsed(self.orders.find_in_range(start, end)))

    def for_customer(
        self,
        customer_email: str,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[Order]:
        """Raw orders for one customer.

        Returned unparsed: segmentation needs every order (totals, timeline)
        even when its line items are unreadable.
        """
        return self.orders.find_by_customer(
            customer_email, limit=limit, newest_first=newest_first
        )

    def containing(self, product_id: str) -> list[ParsedOrder]:
        """Parsed orders with at least one line item for ``product_id``.

        The repository matches decoded JSON ids in SQL; membership is checked
        again on the validated line items, so an item the parser drops (bad
        quantity, blank id) does not make its order a match.
        """
        candidates = iter_parsed(self.orders.find_mentioning(product_id))
        return [parsed for parsed in candidates if parsed.contains(product_id)]
