"""Catalog service for product operations.

High-level service that combines validation, mapping and repository
operations. It is the only entry point the HTTP layer talks to.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, TypeVar

import structlog

from catalog_api.catalog import mapper
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.schemas import ProductRequest, ProductResponse
from catalog_api.catalog.validation import validate_product_request
from catalog_api.domain.exceptions import (
    DomainError,
    ProductNotFoundError,
    ProductValidationError,
)

logger = structlog.get_logger()

T = TypeVar("T")


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ServiceResult(Generic[T]):
    """Outcome of a catalog operation.

    Holds either the operation's value or the domain error that stopped
    it, never both.

    Attributes:
        value: Operation result on success.
        error: Domain error on failure.
    """

    value: T | None = None
    error: DomainError | None = None

    @property
    def success(self) -> bool:
        """Check whether the operation succeeded."""
        return self.error is None

    @classmethod
    def ok(cls, value: T | None = None) -> "ServiceResult[T]":
        """Create a successful result."""
        return cls(value=value)

    @classmethod
    def fail(cls, error: DomainError) -> "ServiceResult[T]":
        """Create a failed result."""
        return cls(error=error)

    def unwrap(self) -> T:
        """Get the value, raising the carried error on failure.

        Raises:
            DomainError: The error this result carries.
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# ============================================================================
# Catalog Service
# ============================================================================


class CatalogService:
    """Service for catalog operations.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(SqlAlchemyProductRepository(session))

            result = await service.create_product(
                ProductRequest(name="Laptop", price=Decimal("999.99"), quantity=10)
            )
            if result.success:
                print(result.value.id)
    """

    def __init__(self, repository: ProductRepository) -> None:
        """Initialize service with a product repository.

        Args:
            repository: Store holding the canonical products.
        """
        self.repository = repository

    async def get_all_products(self) -> ServiceResult[list[ProductResponse]]:
        """List every product in id order."""
        products = await self.repository.find_all()
        return ServiceResult.ok(mapper.to_response_list(products))

    async def get_product_by_id(self, product_id: int) -> ServiceResult[ProductResponse]:
        """Get a product by ID.

        Args:
            product_id: Product identifier.

        Returns:
            Result with the product, or ProductNotFoundError.
        """
        product = await self.repository.find_by_id(product_id)
        if product is None:
            return ServiceResult.fail(ProductNotFoundError(product_id))
        return ServiceResult.ok(mapper.to_response(product))

    async def create_product(self, request: ProductRequest) -> ServiceResult[ProductResponse]:
        """Validate and store a new product.

        Nothing is written when the request is invalid.

        Args:
            request: Product fields.

        Returns:
            Result with the stored product, or ProductValidationError.
        """
        violations = validate_product_request(request)
        if violations:
            logger.warning(
                "Product creation rejected",
                violation_count=len(violations),
                fields=[v.field for v in violations],
            )
            return ServiceResult.fail(ProductValidationError(violations))

        product = await self.repository.save(mapper.to_entity(request))

        logger.info("Product created", product_id=product.id, name=product.name)

        return ServiceResult.ok(mapper.to_response(product))

    async def update_product(
        self,
        product_id: int,
        request: ProductRequest,
    ) -> ServiceResult[ProductResponse]:
        """Replace a product's fields from a request.

        Existence is checked before the request is validated. All four
        fields are overwritten; the identifier stays the same.

        Args:
            product_id: Product identifier.
            request: Replacement fields.

        Returns:
            Result with the updated product, or ProductNotFoundError /
            ProductValidationError.
        """
        async with self.repository.locked(product_id):
            product = await self.repository.find_by_id(product_id)
            if product is None:
                logger.warning("Product update for unknown id", product_id=product_id)
                return ServiceResult.fail(ProductNotFoundError(product_id))

            violations = validate_product_request(request)
            if violations:
                logger.warning(
                    "Product update rejected",
                    product_id=product_id,
                    violation_count=len(violations),
                    fields=[v.field for v in violations],
                )
                return ServiceResult.fail(ProductValidationError(violations))

            mapper.update_entity_from_request(request, product)
            product = await self.repository.save(product)

        logger.info("Product updated", product_id=product.id, name=product.name)

        return ServiceResult.ok(mapper.to_response(product))

    async def delete_product(self, product_id: int) -> ServiceResult[None]:
        """Delete a product by ID.

        Args:
            product_id: Product identifier.

        Returns:
            Empty result, or ProductNotFoundError.
        """
        async with self.repository.locked(product_id):
            if not await self.repository.exists_by_id(product_id):
                logger.warning("Product delete for unknown id", product_id=product_id)
                return ServiceResult.fail(ProductNotFoundError(product_id))
            await self.repository.delete_by_id(product_id)

        logger.info("Product deleted", product_id=product_id)

        return ServiceResult.ok()

    async def search_products_by_name(
        self,
        name: str | None,
    ) -> ServiceResult[list[ProductResponse]]:
        """Search products by name, ignoring case.

        A missing or blank name lists every product.

        Args:
            name: Substring to look for in product names.

        Returns:
            Result with matching products in id order.
        """
        if name is None or not name.strip():
            return await self.get_all_products()

        products = await self.repository.find_by_name_containing_ignore_case(name)
        return ServiceResult.ok(mapper.to_response_list(products))

    async def find_products_priced_at_most(
        self,
        max_price: Decimal,
    ) -> ServiceResult[list[ProductResponse]]:
        """List products priced at or below ``max_price``."""
        products = await self.repository.find_by_price_less_than_equal(max_price)
        return ServiceResult.ok(mapper.to_response_list(products))

    async def find_products_in_stock(
        self,
        min_quantity: int = 0,
    ) -> ServiceResult[list[ProductResponse]]:
        """List products with more than ``min_quantity`` units on hand."""
        products = await self.repository.find_by_quantity_greater_than(min_quantity)
        return ServiceResult.ok(mapper.to_response_list(products))
