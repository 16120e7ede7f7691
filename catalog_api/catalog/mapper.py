"""Conversions between product requests, entities and responses.

Plain functions over an explicit field list; none of them touch storage.
"""

from collections.abc import Iterable

from catalog_api.catalog.models import Product
from catalog_api.catalog.schemas import ProductRequest, ProductResponse


def to_response(product: Product) -> ProductResponse:
    """Project a stored product onto the response shape."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        quantity=product.quantity,
    )


def to_response_list(products: Iterable[Product]) -> list[ProductResponse]:
    """Project products onto responses, keeping their order."""
    return [to_response(product) for product in products]


def to_entity(request: ProductRequest) -> Product:
    """Build a new, not yet persisted product from a request.

    The identifier is left unassigned; the repository sets it on save.
    """
    return Product(
        name=request.name,
        description=request.description,
        price=request.price,
        quantity=request.quantity,
    )


def update_entity_from_request(request: ProductRequest, product: Product) -> None:
    """Overwrite a product's fields in place from a request.

    This is a full replacement: a description missing from the request
    clears the stored one. The identifier is never touched.
    """
    product.name = request.name
    product.description = request.description
    product.price = request.price
    product.quantity = request.quantity
