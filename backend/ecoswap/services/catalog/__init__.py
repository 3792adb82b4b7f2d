"""
Product catalog provider.
"""
from .service import CatalogLoadError, CatalogService, get_catalog_service

__all__ = ["CatalogLoadError", "CatalogService", "get_catalog_service"]
