"""
JSON-file product catalog.

The file holds either a list of products or {"products": [...]}, in the
storefront's camelCase format. Any stored sustainabilityScore is ignored;
the model derives it again on load.

Environment configuration:
- ECOSWAP_CATALOG_PATH: catalog file (default: backend/data/products.json)
"""
import json
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from ecoswap.core.logging import get_logger
from ecoswap.models import Product, ProductCategory

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent.parent.parent.parent / "data" / "products.json"
DEFAULT_TOP_LIMIT = 6
DEFAULT_UPGRADE_LIMIT = 3


class CatalogLoadError(Exception):
    """Catalog file missing or not a valid product list."""


class CatalogService:
    """In-memory catalog loaded lazily from a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._products: Optional[List[Product]] = None
        self._by_id: Dict[str, Product] = {}

    @property
    def is_loaded(self) -> bool:
        return self._products is not None

    @property
    def products(self) -> List[Product]:
        if self._products is None:
            self.load()
        return list(self._products)

    def load(self) -> List[Product]:
        """
        (Re)load the catalog from disk.

        Raises:
            CatalogLoadError: file missing, not JSON, or a product fails validation
        """
        if not self.path.exists():
            raise CatalogLoadError(f"Catalog file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CatalogLoadError(f"Unreadable catalog file {self.path}: {e}") from e

        if isinstance(raw, dict):
            raw = raw.get("products")
        if not isinstance(raw, list):
            raise CatalogLoadError(f"Catalog file {self.path} must contain a list of products")

        try:
            products = [Product.model_validate(item) for item in raw]
        except ValidationError as e:
            raise CatalogLoadError(f"Invalid product in catalog file {self.path}: {e}") from e

        ids = [p.id for p in products]
        if len(set(ids)) != len(ids):
            raise CatalogLoadError(f"Duplicate product ids in catalog file {self.path}")

        self._products = products
        self._by_id = {p.id: p for p in products}
        logger.info("catalog_loaded", path=str(self.path), product_count=len(products))
        return list(products)

    def get(self, product_id: str) -> Optional[Product]:
        if self._products is None:
            self.load()
        return self._by_id.get(product_id)

    def by_category(self, category: Union[str, ProductCategory]) -> List[Product]:
        category = ProductCategory(category)
        return [p for p in self.products if p.category == category]

    def search(self, query: str) -> List[Product]:
        """Case-insensitive substring match on name, description and tags."""
        needle = query.strip().lower()
        if not needle:
            return self.products
        return [
            p for p in self.products
            if needle in p.name.lower()
            or needle in p.description.lower()
            or any(needle in tag.lower() for tag in p.tags)
        ]

    def top_sustainable(self, limit: int = DEFAULT_TOP_LIMIT) -> List[Product]:
        ranked = sorted(self.products, key=lambda p: p.sustainability_score, reverse=True)
        return ranked[:max(limit, 0)]

    def same_category_upgrades(self, product_id: str, limit: int = DEFAULT_UPGRADE_LIMIT) -> List[Product]:
        """Products in the same category with a strictly higher score, best first."""
        product = self.get(product_id)
        if product is None:
            return []
        upgrades = [
            p for p in self.products
            if p.category == product.category
            and p.id != product.id
            and p.sustainability_score > product.sustainability_score
        ]
        upgrades.sort(key=lambda p: p.sustainability_score, reverse=True)
        return upgrades[:max(limit, 0)]


_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Global singleton accessor."""
    global _catalog_service
    if _catalog_service is None:
        configured_path = os.getenv("ECOSWAP_CATALOG_PATH")
        _catalog_service = CatalogService(Path(configured_path) if configured_path else DEFAULT_CATALOG_PATH)
    return _catalog_service
