"""Product API endpoints.

Provides CRUD, name search and filter endpoints over the catalog service.
"""

from decimal import Decimal
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.api.schemas import ErrorResponse
from catalog_api.catalog.repository import SqlAlchemyProductRepository
from catalog_api.catalog.schemas import ProductRequest, ProductResponse
from catalog_api.catalog.service import CatalogService, ServiceResult
from catalog_api.domain.exceptions import (
    DomainError,
    ProductNotFoundError,
    ProductValidationError,
)
from catalog_api.infrastructure.database import get_session

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogService:
    """Get catalog service bound to the request's session."""
    return CatalogService(SqlAlchemyProductRepository(session))


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]


# ============================================================================
# Error Translation
# ============================================================================


def raise_for_error(error: DomainError) -> NoReturn:
    """Translate a domain error into an HTTP error.

    Args:
        error: Error carried by a failed service result.

    Raises:
        HTTPException: Always.
    """
    if isinstance(error, ProductNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
        details = []
    elif isinstance(error, ProductValidationError):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        details = [{"field": v.field, "message": v.message} for v in error.violations]
    else:
        status_code = status.HTTP_400_BAD_REQUEST
        details = []

    raise HTTPException(
        status_code=status_code,
        detail={
            "error_code": error.error_code,
            "message": error.message,
            "details": details,
        },
    )


def unwrap_or_raise(result: ServiceResult):
    """Get a result's value or raise the matching HTTP error."""
    if result.error is not None:
        raise_for_error(result.error)
    return result.value


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products",
    description="Get every product in the catalog.",
)
async def list_products(service: CatalogServiceDep) -> list[ProductResponse]:
    """List all products."""
    return unwrap_or_raise(await service.get_all_products())


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create product",
    description="Validate and store a new product.",
)
async def create_product(
    request: ProductRequest,
    service: CatalogServiceDep,
) -> ProductResponse:
    """Create a new product.

    Args:
        request: Product fields.
        service: Catalog service.

    Returns:
        Created product with its assigned id.

    Raises:
        HTTPException: On validation failure.
    """
    return unwrap_or_raise(await service.create_product(request))


@router.get(
    "/search",
    response_model=list[ProductResponse],
    summary="Search products by name",
    description="Case-insensitive substring search; a blank name lists everything.",
)
async def search_products(
    service: CatalogServiceDep,
    name: Annotated[str | None, Query(description="Name substring")] = None,
) -> list[ProductResponse]:
    """Search products by name."""
    return unwrap_or_raise(await service.search_products_by_name(name))


@router.get(
    "/filter/price",
    response_model=list[ProductResponse],
    summary="Filter products by price",
    description="List products priced at or below max_price.",
)
async def filter_by_price(
    service: CatalogServiceDep,
    max_price: Annotated[Decimal, Query(description="Inclusive price ceiling")],
) -> list[ProductResponse]:
    """List products priced at or below a ceiling."""
    return unwrap_or_raise(await service.find_products_priced_at_most(max_price))


@router.get(
    "/filter/in-stock",
    response_model=list[ProductResponse],
    summary="Filter products by stock",
    description="List products with more than min_quantity units on hand.",
)
async def filter_in_stock(
    service: CatalogServiceDep,
    min_quantity: Annotated[int, Query(description="Exclusive quantity floor")] = 0,
) -> list[ProductResponse]:
    """List products with stock above a floor."""
    return unwrap_or_raise(await service.find_products_in_stock(min_quantity))


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
    description="Get a product by ID.",
)
async def get_product(product_id: int, service: CatalogServiceDep) -> ProductResponse:
    """Get a product by ID.

    Raises:
        HTTPException: If product not found.
    """
    return unwrap_or_raise(await service.get_product_by_id(product_id))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Update product",
    description="Replace all fields of an existing product.",
)
async def update_product(
    product_id: int,
    request: ProductRequest,
    service: CatalogServiceDep,
) -> ProductResponse:
    """Replace a product's fields.

    Fields missing from the body are cleared or rejected, never kept.

    Raises:
        HTTPException: If product not found or the body is invalid.
    """
    return unwrap_or_raise(await service.update_product(product_id, request))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
    description="Delete a product by ID.",
)
async def delete_product(product_id: int, service: CatalogServiceDep) -> Response:
    """Delete a product.

    Raises:
        HTTPException: If product not found.
    """
    unwrap_or_raise(await service.delete_product(product_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
