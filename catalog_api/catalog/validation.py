"""Field validation for product requests.

Every rule is evaluated on its own so that a request with several
problems reports all of them at once.
"""

from dataclasses import dataclass
from decimal import Decimal

from catalog_api.catalog.schemas import ProductRequest
from catalog_api.domain.base import ValueObject

NAME_REQUIRED = "name is required"
PRICE_REQUIRED = "price is required"
PRICE_POSITIVE = "price must be positive"
PRICE_PRECISION = "price must have at most 10 integer digits and 2 decimal places"
QUANTITY_REQUIRED = "quantity is required"
QUANTITY_NON_NEGATIVE = "quantity must be zero or positive"

# Matches the NUMERIC(12, 2) price column
PRICE_INTEGER_DIGITS = 10
PRICE_DECIMAL_PLACES = 2


@dataclass(frozen=True)
class Violation(ValueObject):
    """A single failed field rule.

    Attributes:
        field: Name of the offending request field.
        message: Human-readable description of the rule.
    """

    field: str
    message: str


def _fits_price_column(price: Decimal) -> bool:
    """Check that a price is stored without rounding."""
    if price.normalize().as_tuple().exponent < -PRICE_DECIMAL_PLACES:
        return False
    return price < Decimal(10) ** PRICE_INTEGER_DIGITS


def validate_product_request(request: ProductRequest) -> list[Violation]:
    """Check a product request against the field rules.

    Args:
        request: Candidate product request.

    Returns:
        Every violation found, empty when the request is valid.
    """
    violations: list[Violation] = []

    if request.name is None or not request.name.strip():
        violations.append(Violation("name", NAME_REQUIRED))

    if request.price is None:
        violations.append(Violation("price", PRICE_REQUIRED))
    elif request.price <= 0:
        violations.append(Violation("price", PRICE_POSITIVE))
    elif not _fits_price_column(request.price):
        violations.append(Violation("price", PRICE_PRECISION))

    if request.quantity is None:
        violations.append(Violation("quantity", QUANTITY_REQUIRED))
    elif request.quantity < 0:
        violations.append(Violation("quantity", QUANTITY_NON_NEGATIVE))

    return violations
