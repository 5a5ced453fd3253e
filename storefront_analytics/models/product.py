"""
Product models.

``Product`` is the partial catalog view the engine needs: stock for
forecasting; category, material and creation time for recommendations.
``ProductSummary`` is what recommendation results hand back to callers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class Product(BaseModel):
    """A catalog product.

    Attributes:
        product_id: Product primary key.
        name: Display name.
        price: Current list price.
        category: Category label, if assigned.
        material: Material label, if assigned.
        stock: Units currently on hand; never negative.
        created_at: UTC creation timestamp ("newest first" ordering key).
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    price: float = 0.0
    category: Optional[str] = None
    material: Optional[str] = None
    stock: int = 0
    created_at: datetime

    @field_validator("stock")
    @classmethod
    def validate_stock(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"stock must be non-negative, got {v}.")
        return v

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def summary(self) -> "ProductSummary":
        return ProductSummary(
            product_id=self.product_id,
            name=self.name,
            price=self.price,
            category=self.category,
            material=self.material,
            stock=self.stock,
        )


class ProductSummary(BaseModel):
    """JSON-facing product view returned by recommendation strategies."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    product_id: str
    name: str
    price: float
    category: Optional[str] = None
    material: Optional[str] = None
    stock: int
