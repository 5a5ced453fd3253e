"""
Error taxonomy for the analytics engine.

  - Not found:        unknown product or customer. Not an exception; the
                      query operations return ``None``.
  - Malformed record: one order's serialized line items cannot be parsed.
                      ``MalformedRecordError`` is raised by the strict parser
                      and contained by the order history accessor; it never
                      aborts an aggregation.
  - Repository:       the backing store is unreachable or rejects a query.
                      ``RepositoryError`` propagates to the caller unchanged;
                      no retries, no partial results.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for all storefront analytics errors."""


class MalformedRecordError(AnalyticsError):
    """An order's line-item payload could not be parsed.

    Attributes:
        order_id: The offending order, when known.
    """

    def __init__(self, message: str, order_id: str | None = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class RepositoryError(AnalyticsError):
    """The order or product store failed to answer a query."""
