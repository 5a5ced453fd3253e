"""
Order and line-item models.

``Order`` mirrors one row of the checkout collaborator's ``orders`` table.
Its line items are kept exactly as stored (a serialized JSON array in
``items_json``) because historical payloads vary and some are malformed.
Turning that blob into ``LineItem`` objects is the job of
``storefront_analytics.history.accessor``, which treats parsing as a fallible
per-order step.

``LineItem`` validates one element of that array. The serialized keys are
the checkout payload's (``id``, ``price``, ``customerName``); the Python
attribute names are descriptive.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LineItem(BaseModel):
    """One purchased product inside an order.

    Attributes:
        product_id: Identifier of the purchased product (serialized as ``id``).
        quantity: Units purchased; always a positive integer.
        unit_price: Price per unit at checkout time (serialized as ``price``).
        category: Category label captured at checkout, if any.
        name: Product display name captured at checkout, if any.
        customer_name: Buyer's full name, present on some historical payloads.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    product_id: str = Field(alias="id")
    quantity: int
    unit_price: float = Field(default=0.0, alias="price")
    category: Optional[str] = None
    name: Optional[str] = None
    customer_name: Optional[str] = Field(default=None, alias="customerName")

    @field_validator("product_id", mode="before")
    @classmethod
    def coerce_product_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("product_id")
    @classmethod
    def validate_product_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("product id must not be empty.")
        return v

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"quantity must be a positive integer, got {v}.")
        return v

    @field_validator("category")
    @classmethod
    def blank_category_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def line_total(self) -> float:
        """``unit_price * quantity``."""
        return self.unit_price * self.quantity


class Order(BaseModel):
    """An immutable historical order record.

    Attributes:
        order_id: Order primary key.
        customer_email: Buyer identifier.
        items_json: Serialized line-item array, exactly as stored.
        total: Monetary order total.
        status: Fulfilment status (``pending``, ``shipped``, ...). Not
            interpreted by the engine.
        created_at: UTC creation timestamp.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str
    customer_email: str
    items_json: str
    total: float
    status: str = "pending"
    created_at: datetime
