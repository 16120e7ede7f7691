"""Request and response shapes for products.

The request model keeps every field optional so that missing values
reach the validator and are reported alongside the other violations.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductRequest(BaseModel):
    """Input shape for creating or replacing a product."""

    name: str | None = Field(default=None, description="Product name")
    description: str | None = Field(default=None, description="Optional description")
    price: Decimal | None = Field(default=None, description="Unit price")
    quantity: int | None = Field(default=None, description="Units on hand")


class ProductResponse(BaseModel):
    """Read-only projection of a stored product."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Store-assigned product identifier")
    name: str = Field(..., description="Product name")
    description: str | None = Field(default=None, description="Product description")
    price: Decimal = Field(..., description="Unit price")
    quantity: int = Field(..., description="Units on hand")
