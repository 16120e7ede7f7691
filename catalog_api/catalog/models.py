"""SQLAlchemy models for product catalog.

Defines the Product table for persistent storage.
"""

from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_api.infrastructure.database import Base

# SQLite only assigns rowids to INTEGER PRIMARY KEY columns
BigIntId = BigInteger().with_variant(Integer(), "sqlite")


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Store-assigned identifier, None until first persisted.
        name: Product name.
        description: Optional product description.
        price: Unit price, strictly positive.
        quantity: Units on hand, zero or more.
    """

    __tablename__ = "products"

    id: Mapped[int | None] = mapped_column(
        BigIntId,
        primary_key=True,
        autoincrement=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # AUTOINCREMENT keeps SQLite from reusing ids of deleted rows
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]!r})>"
