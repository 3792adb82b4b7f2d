"""
Catalog product model.

Products arrive from the catalog provider (JSON file or request body) in
the storefront's camelCase wire format; snake_case names are accepted too.
The sustainability score is never stored: it is derived on every read from
carbon intensity, organic status and category, so it cannot go stale after
a mutation and a caller-supplied value is ignored.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from ecoswap.services.sustainability import calculate_sustainability_score


class ProductCategory(str, Enum):
    """Closed set of catalog categories."""
    MEAT = "Meat"
    DAIRY = "Dairy"
    PRODUCE = "Produce"
    GRAINS = "Grains"
    CLOTHING = "Clothing"
    ELECTRONICS = "Electronics"
    HOME_GOODS = "Home Goods"
    AUTOMOTIVE = "Automotive"
    ENERGY = "Energy"
    TRANSPORTATION = "Transportation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(BaseModel):
    """A catalog entry."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str = Field(..., min_length=1)
    name: str
    description: str
    image: Optional[str] = None
    price: float = Field(..., ge=0)
    carbon_intensity: float = Field(..., ge=0, description="kg CO2e per unit")
    is_organic: bool
    category: ProductCategory
    brand: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    in_stock: bool = True
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @computed_field(alias="sustainabilityScore")
    @property
    def sustainability_score(self) -> int:
        return calculate_sustainability_score(
            self.carbon_intensity,
            self.is_organic,
            self.category,
        )

    def stored_fields(self) -> dict:
        """Declared field values only (no derived score), keyed by field name."""
        return {name: getattr(self, name) for name in Product.model_fields}
