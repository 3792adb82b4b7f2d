"""
Shared fixtures: a product factory and the seed catalog.
"""
from pathlib import Path
from typing import Dict, List

import pytest

from ecoswap.models import Product
from ecoswap.services.catalog import CatalogService

SEED_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "products.json"


def build_product(**overrides) -> Product:
    """Product with neutral defaults; pass snake_case field overrides."""
    fields = {
        "id": "prod-test",
        "name": "Widget",
        "description": "Plain widget.",
        "price": 1.0,
        "carbon_intensity": 2.0,
        "is_organic": False,
        "category": "Produce",
    }
    fields.update(overrides)
    return Product(**fields)


@pytest.fixture
def make_product():
    return build_product


@pytest.fixture
def seed_catalog() -> List[Product]:
    return CatalogService(SEED_CATALOG_PATH).products


@pytest.fixture
def seed_products(seed_catalog) -> Dict[str, Product]:
    return {p.id: p for p in seed_catalog}


@pytest.fixture
def seed_catalog_path() -> Path:
    return SEED_CATALOG_PATH
