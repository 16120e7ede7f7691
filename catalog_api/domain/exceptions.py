"""Domain exceptions.

All domain-level errors that represent business rule violations.
The catalog service hands these back inside its result objects; callers
that prefer exceptions can raise them through ``ServiceResult.unwrap``.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from catalog_api.catalog.validation import Violation


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Product Errors
# ============================================================================


class ProductError(DomainError):
    """Base class for product-related errors."""

    pass


class ProductNotFoundError(ProductError):
    """Raised when no product exists with the given identifier."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int) -> None:
        """Initialize product not found error.

        Args:
            product_id: Identifier that has no current record.
        """
        super().__init__(
            f"Product not found with id: {product_id}",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class ProductValidationError(ProductError):
    """Raised when a product request violates one or more field rules."""

    error_code = "VALIDATION_FAILED"

    def __init__(self, violations: Iterable["Violation"]) -> None:
        """Initialize product validation error.

        Args:
            violations: Every field rule the request failed.
        """
        self.violations = list(violations)
        fields = ", ".join(v.field for v in self.violations)
        super().__init__(
            f"Product request is invalid: {fields}",
            details={
                "violations": [
                    {"field": v.field, "message": v.message} for v in self.violations
                ],
            },
        )
