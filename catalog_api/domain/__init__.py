"""Domain layer - value object base and domain errors.

Example usage:
    from catalog_api.domain import ProductNotFoundError

    error = ProductNotFoundError(42)
    print(error.error_code)  # PRODUCT_NOT_FOUND
"""

from catalog_api.domain.base import ValueObject
from catalog_api.domain.exceptions import (
    DomainError,
    ProductError,
    ProductNotFoundError,
    ProductValidationError,
)

__all__ = [
    "ValueObject",
    "DomainError",
    "ProductError",
    "ProductNotFoundError",
    "ProductValidationError",
]
