"""
Catalog browsing endpoints.

GET /products?category={str}&q={str}&k={int}
GET /products/top?k={int}
GET /products/{product_id}
GET /products/{product_id}/upgrades?k={int}
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query

from ecoswap.core.logging import get_logger
from ecoswap.models import Product, ProductCategory
from ecoswap.services.catalog import CatalogLoadError, CatalogService, get_catalog_service

logger = get_logger(__name__)

router = APIRouter()


def load_catalog() -> CatalogService:
    """The catalog service, or 503 when the catalog file cannot be loaded."""
    catalog = get_catalog_service()
    try:
        catalog.products
    except CatalogLoadError as e:
        logger.error("catalog_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Product catalog unavailable")
    return catalog


@router.get("", response_model=List[Product])
async def list_products(
    category: Optional[ProductCategory] = Query(None, description="Restrict to one category"),
    q: Optional[str] = Query(None, description="Text to match in name, description or tags"),
    k: Optional[int] = Query(None, ge=1, le=100, description="Maximum number of products"),
):
    """
    List catalog products, optionally filtered by category and text.
    """
    catalog = load_catalog()
    products = catalog.by_category(category) if category is not None else catalog.products
    if q:
        matched_ids = {p.id for p in catalog.search(q)}
        products = [p for p in products if p.id in matched_ids]
    if k is not None:
        products = products[:k]

    logger.info(
        "products_listed",
        category=category.value if category else None,
        query=q,
        results_count=len(products),
    )
    return products


@router.get("/top", response_model=List[Product])
async def top_products(
    k: int = Query(6, ge=1, le=100, description="Number of products to return"),
):
    """Most sustainable products, highest score first."""
    return load_catalog().top_sustainable(limit=k)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str = Path(..., description="Product ID")):
    product = load_catalog().get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


@router.get("/{product_id}/upgrades", response_model=List[Product])
async def product_upgrades(
    product_id: str = Path(..., description="Product ID"),
    k: int = Query(3, ge=1, le=100, description="Number of products to return"),
):
    """Same-category products with a strictly higher sustainability score, best first."""
    catalog = load_catalog()
    if catalog.get(product_id) is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return catalog.same_category_upgrades(product_id, limit=k)
