"""Product Catalog Service.

Provides the product model, request validation, mapping between
request/entity/response shapes, storage and the catalog service.
"""

from catalog_api.catalog.models import Product
from catalog_api.catalog.repository import (
    InMemoryProductRepository,
    ProductRepository,
    SqlAlchemyProductRepository,
)
from catalog_api.catalog.schemas import ProductRequest, ProductResponse
from catalog_api.catalog.service import CatalogService, ServiceResult
from catalog_api.catalog.validation import Violation, validate_product_request

__all__ = [
    # Models
    "Product",
    # Schemas
    "ProductRequest",
    "ProductResponse",
    # Validation
    "Violation",
    "validate_product_request",
    # Repository
    "InMemoryProductRepository",
    "ProductRepository",
    "SqlAlchemyProductRepository",
    # Service
    "CatalogService",
    "ServiceResult",
]
