"""Product repository for database operations.

Defines the storage contract the catalog service depends on, with a
SQLAlchemy implementation for production and an in-memory one for tests
and local experiments.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from decimal import Decimal

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.catalog.models import Product


class ProductRepository(ABC):
    """Storage contract for products keyed by their identifier."""

    @abstractmethod
    async def find_all(self) -> Sequence[Product]:
        """Get every product ordered by id."""

    @abstractmethod
    async def find_by_id(self, product_id: int) -> Product | None:
        """Get product by ID, or None when absent."""

    @abstractmethod
    async def save(self, product: Product) -> Product:
        """Insert a new product or overwrite an existing one.

        Products without an id are inserted and receive a fresh one;
        products with an id replace the stored record with that id.

        Args:
            product: Product to save.

        Returns:
            The persisted product with its id, holding the stored values.
        """

    @abstractmethod
    async def exists_by_id(self, product_id: int) -> bool:
        """Check whether a product with this id is stored."""

    @abstractmethod
    async def delete_by_id(self, product_id: int) -> None:
        """Remove the product with this id.

        Absence is not reported; callers check existence first.
        """

    @abstractmethod
    async def find_by_name_containing_ignore_case(self, name: str) -> Sequence[Product]:
        """Find products whose name contains ``name``, ignoring case."""

    @abstractmethod
    async def find_by_price_less_than_equal(self, price: Decimal) -> Sequence[Product]:
        """Find products priced at or below ``price``."""

    @abstractmethod
    async def find_by_quantity_greater_than(self, quantity: int) -> Sequence[Product]:
        """Find products with more than ``quantity`` units on hand."""

    @abstractmethod
    def locked(self, product_id: int) -> AbstractAsyncContextManager[None]:
        """Hold exclusive access to one product id.

        Read-then-write sequences on the same id run inside this context
        so that a concurrent delete or update cannot interleave.

        Example usage:
            async with repo.locked(product_id):
                product = await repo.find_by_id(product_id)
                ...
                await repo.save(product)
        """


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlAlchemyProductRepository(ProductRepository):
    """Repository for Product database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = SqlAlchemyProductRepository(session)
            products = await repo.find_by_name_containing_ignore_case("pro")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def find_all(self) -> Sequence[Product]:
        result = await self.session.execute(select(Product).order_by(Product.id))
        return result.scalars().all()

    async def find_by_id(self, product_id: int) -> Product | None:
        return await self.session.get(Product, product_id)

    async def save(self, product: Product) -> Product:
        if product.id is not None and product not in self.session:
            product = await self.session.merge(product)
        else:
            self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def exists_by_id(self, product_id: int) -> bool:
        result = await self.session.execute(
            select(exists().where(Product.id == product_id))
        )
        return bool(result.scalar())

    async def delete_by_id(self, product_id: int) -> None:
        await self.session.execute(delete(Product).where(Product.id == product_id))

    async def find_by_name_containing_ignore_case(self, name: str) -> Sequence[Product]:
        pattern = f"%{_escape_like(name)}%"
        query = (
            select(Product)
            .where(Product.name.ilike(pattern, escape="\\"))
            .order_by(Product.id)
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_by_price_less_than_equal(self, price: Decimal) -> Sequence[Product]:
        query = select(Product).where(Product.price <= price).order_by(Product.id)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_by_quantity_greater_than(self, quantity: int) -> Sequence[Product]:
        query = select(Product).where(Product.quantity > quantity).order_by(Product.id)
        result = await self.session.execute(query)
        return result.scalars().all()

    @asynccontextmanager
    async def locked(self, product_id: int) -> AsyncIterator[None]:
        """Take a row lock held until the session's transaction ends.

        SQLite ignores ``FOR UPDATE``; engines from ``build_engine`` open
        SQLite transactions with ``BEGIN IMMEDIATE``, which holds the
        database write lock from this select until commit.
        """
        await self.session.execute(
            select(Product.id).where(Product.id == product_id).with_for_update()
        )
        yield


class InMemoryProductRepository(ProductRepository):
    """In-memory repository for products.

    Stores private copies so that callers mutating a returned product do
    not change the stored record until they save it. Ids come from a
    counter and are never handed out twice.
    """

    def __init__(self) -> None:
        self._products: dict[int, Product] = {}
        self._last_id = 0
        self._locks: dict[int, asyncio.Lock] = {}

    @staticmethod
    def _copy(product: Product) -> Product:
        return Product(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            quantity=product.quantity,
        )

    def _select(self, predicate: Callable[[Product], bool]) -> list[Product]:
        return [
            self._copy(self._products[product_id])
            for product_id in sorted(self._products)
            if predicate(self._products[product_id])
        ]

    async def find_all(self) -> Sequence[Product]:
        return self._select(lambda p: True)

    async def find_by_id(self, product_id: int) -> Product | None:
        product = self._products.get(product_id)
        return self._copy(product) if product is not None else None

    async def save(self, product: Product) -> Product:
        if product.id is None:
            self._last_id += 1
            product.id = self._last_id
        else:
            self._last_id = max(self._last_id, product.id)
        self._products[product.id] = self._copy(product)
        return product

    async def exists_by_id(self, product_id: int) -> bool:
        return product_id in self._products

    async def delete_by_id(self, product_id: int) -> None:
        self._products.pop(product_id, None)

    async def find_by_name_containing_ignore_case(self, name: str) -> Sequence[Product]:
        needle = name.lower()
        return self._select(lambda p: needle in p.name.lower())

    async def find_by_price_less_than_equal(self, price: Decimal) -> Sequence[Product]:
        return self._select(lambda p: p.price <= price)

    async def find_by_quantity_greater_than(self, quantity: int) -> Sequence[Product]:
        return self._select(lambda p: p.quantity > quantity)

    @asynccontextmanager
    async def locked(self, product_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        async with lock:
            yield
