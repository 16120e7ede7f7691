"""Tests for the catalog service.

Most tests run against the in-memory repository. Concurrency and stored
precision are also checked against SQLite, one session per caller.
"""

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import TypeVar

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_api.catalog.models import Product
from catalog_api.catalog.repository import (
    InMemoryProductRepository,
    SqlAlchemyProductRepository,
)
from catalog_api.catalog.schemas import ProductRequest, ProductResponse
from catalog_api.catalog.service import CatalogService, ServiceResult
from catalog_api.domain.exceptions import ProductNotFoundError, ProductValidationError

T = TypeVar("T")


@pytest.fixture
def repository() -> InMemoryProductRepository:
    """Create an empty in-memory repository."""
    return InMemoryProductRepository()


@pytest.fixture
def service(repository: InMemoryProductRepository) -> CatalogService:
    """Create a catalog service over the repository."""
    return CatalogService(repository)


async def _create(
    service: CatalogService,
    name: str,
    price: str = "10.00",
    quantity: int = 1,
) -> ProductResponse:
    result = await service.create_product(
        ProductRequest(name=name, price=Decimal(price), quantity=quantity)
    )
    return result.unwrap()


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_ok(self) -> None:
        """Successful results carry a value."""
        result = ServiceResult.ok(5)
        assert result.success
        assert result.unwrap() == 5

    def test_fail_unwrap_raises(self) -> None:
        """Unwrapping a failed result raises its error."""
        result = ServiceResult.fail(ProductNotFoundError(3))
        assert not result.success
        with pytest.raises(ProductNotFoundError):
            result.unwrap()


class TestGetAllProducts:
    """Tests for get_all_products."""

    @pytest.mark.asyncio
    async def test_empty_catalog(self, service: CatalogService) -> None:
        """An empty catalog lists nothing."""
        result = await service.get_all_products()
        assert result.success
        assert result.value == []

    @pytest.mark.asyncio
    async def test_lists_every_product(self, service: CatalogService) -> None:
        """Every created product is listed in id order."""
        await _create(service, "Laptop")
        await _create(service, "Phone")

        result = await service.get_all_products()

        assert [p.name for p in result.value] == ["Laptop", "Phone"]


class TestGetProductById:
    """Tests for get_product_by_id."""

    @pytest.mark.asyncio
    async def test_existing_product(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """A created product can be read back with identical fields."""
        created = (await service.create_product(laptop_request)).unwrap()

        result = await service.get_product_by_id(created.id)

        assert result.success
        assert result.value == ProductResponse(id=created.id, **laptop_request.model_dump())

    @pytest.mark.asyncio
    async def test_missing_product(self, service: CatalogService) -> None:
        """Unknown ids give a not found error naming the id."""
        result = await service.get_product_by_id(99)

        assert not result.success
        assert isinstance(result.error, ProductNotFoundError)
        assert result.error.product_id == 99
        assert "99" in result.error.message


class TestCreateProduct:
    """Tests for create_product."""

    @pytest.mark.asyncio
    async def test_assigns_id(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """Creating assigns an id and echoes the fields."""
        result = await service.create_product(laptop_request)

        assert result.success
        assert result.value.id is not None
        assert result.value.name == "Laptop"
        assert result.value.price == Decimal("999.99")
        assert result.value.quantity == 10

    @pytest.mark.asyncio
    async def test_invalid_request_writes_nothing(
        self,
        service: CatalogService,
        repository: InMemoryProductRepository,
    ) -> None:
        """Invalid requests are rejected with every violation and no write."""
        request = ProductRequest(name="", price=Decimal("-1"), quantity=-1)

        result = await service.create_product(request)

        assert not result.success
        assert isinstance(result.error, ProductValidationError)
        assert len(result.error.violations) == 3
        assert list(await repository.find_all()) == []


class TestUpdateProduct:
    """Tests for update_product."""

    @pytest.mark.asyncio
    async def test_full_replacement(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """Every field is replaced and the id is kept."""
        created = (await service.create_product(laptop_request)).unwrap()
        update = ProductRequest(name="Laptop Pro", price=Decimal("1299.99"), quantity=5)

        result = await service.update_product(created.id, update)

        assert result.success
        assert result.value == ProductResponse(
            id=created.id,
            name="Laptop Pro",
            description=None,
            price=Decimal("1299.99"),
            quantity=5,
        )
        stored = (await service.get_product_by_id(created.id)).unwrap()
        assert stored == result.value

    @pytest.mark.asyncio
    async def test_missing_product(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """Updating an unknown id gives not found."""
        result = await service.update_product(42, laptop_request)

        assert isinstance(result.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_not_found_checked_before_validation(self, service: CatalogService) -> None:
        """An unknown id wins over an invalid request."""
        result = await service.update_product(42, ProductRequest())

        assert isinstance(result.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_invalid_request_leaves_product_unchanged(
        self,
        service: CatalogService,
        laptop_request: ProductRequest,
    ) -> None:
        """A rejected update does not touch the stored product."""
        created = (await service.create_product(laptop_request)).unwrap()

        result = await service.update_product(
            created.id,
            ProductRequest(name="New name", price=Decimal("0"), quantity=1),
        )

        assert isinstance(result.error, ProductValidationError)
        assert [v.field for v in result.error.violations] == ["price"]
        assert (await service.get_product_by_id(created.id)).unwrap() == created


class TestDeleteProduct:
    """Tests for delete_product."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """The first delete succeeds, the second gives not found."""
        created = (await service.create_product(laptop_request)).unwrap()

        first = await service.delete_product(created.id)
        second = await service.delete_product(created.id)

        assert first.success
        assert first.value is None
        assert isinstance(second.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_missing_product(self, service: CatalogService) -> None:
        """Deleting an unknown id gives not found."""
        result = await service.delete_product(7)

        assert isinstance(result.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_concurrent_deletes(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """Only one of two concurrent deletes of the same id succeeds."""
        created = (await service.create_product(laptop_request)).unwrap()

        results = await asyncio.gather(
            service.delete_product(created.id),
            service.delete_product(created.id),
        )

        assert sorted(r.success for r in results) == [False, True]

    @pytest.mark.asyncio
    async def test_id_not_reused(self, service: CatalogService, laptop_request: ProductRequest) -> None:
        """A new product never gets a deleted product's id."""
        created = (await service.create_product(laptop_request)).unwrap()
        (await service.delete_product(created.id)).unwrap()

        recreated = (await service.create_product(laptop_request)).unwrap()

        assert recreated.id != created.id


class TestSearchProductsByName:
    """Tests for search_products_by_name."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_blank_lists_everything(self, service: CatalogService, name: str | None) -> None:
        """Missing or blank names behave like get_all_products."""
        for product_name in ("Laptop Gaming", "Smartphone Pro", "Tablet Ultra"):
            await _create(service, product_name)

        result = await service.search_products_by_name(name)

        assert result.value == (await service.get_all_products()).value
        assert len(result.value) == 3

    @pytest.mark.asyncio
    async def test_partial_case_insensitive(self, service: CatalogService) -> None:
        """'pro' matches only 'Smartphone Pro'."""
        for product_name in ("Laptop Gaming", "Smartphone Pro", "Tablet Ultra"):
            await _create(service, product_name)

        result = await service.search_products_by_name("pro")

        assert [p.name for p in result.value] == ["Smartphone Pro"]

    @pytest.mark.asyncio
    async def test_upper_case_query(self, service: CatalogService) -> None:
        """Query case does not matter."""
        await _create(service, "Smartphone Pro")

        result = await service.search_products_by_name("SMART")

        assert [p.name for p in result.value] == ["Smartphone Pro"]


class TestFilters:
    """Tests for the price and stock filters."""

    @pytest.mark.asyncio
    async def test_priced_at_most(
        self,
        service: CatalogService,
        repository: InMemoryProductRepository,
        sample_products: list[Product],
    ) -> None:
        """Products at or below the price ceiling are listed."""
        for product in sample_products:
            await repository.save(product)

        result = await service.find_products_priced_at_most(Decimal("900"))

        assert [p.name for p in result.value] == ["Smartphone Pro", "Tablet Ultra"]

    @pytest.mark.asyncio
    async def test_in_stock(
        self,
        service: CatalogService,
        repository: InMemoryProductRepository,
        sample_products: list[Product],
    ) -> None:
        """Products with stock are listed."""
        for product in sample_products:
            await repository.save(product)

        result = await service.find_products_in_stock()

        assert [p.name for p in result.value] == ["Laptop Gaming", "Smartphone Pro"]


class TestScenario:
    """End-to-end product lifecycle."""

    @pytest.mark.asyncio
    async def test_create_update_delete(self, service: CatalogService) -> None:
        """Laptop is created, upgraded to Laptop Pro, then deleted."""
        created = (
            await service.create_product(
                ProductRequest(name="Laptop", price=Decimal("999.99"), quantity=10)
            )
        ).unwrap()
        assert created.id is not None
        assert created.name == "Laptop"
        assert created.price == Decimal("999.99")
        assert created.quantity == 10

        updated = (
            await service.update_product(
                created.id,
                ProductRequest(name="Laptop Pro", price=Decimal("1299.99"), quantity=5),
            )
        ).unwrap()
        assert updated.id == created.id
        assert updated.name == "Laptop Pro"
        assert updated.price == Decimal("1299.99")
        assert updated.quantity == 5

        assert (await service.delete_product(created.id)).success
        result = await service.get_product_by_id(created.id)
        assert isinstance(result.error, ProductNotFoundError)


async def _in_own_session(
    session_factory: async_sessionmaker[AsyncSession],
    operation: Callable[[CatalogService], Awaitable[ServiceResult[T]]],
) -> ServiceResult[T]:
    """Run one service call in its own committed transaction, like a request."""
    async with session_factory() as session:
        result = await operation(CatalogService(SqlAlchemyProductRepository(session)))
        await session.commit()
        return result


class TestSqlAlchemyService:
    """The service over SQLite, with concurrent callers on separate sessions."""

    @pytest.mark.asyncio
    async def test_concurrent_deletes(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        laptop_request: ProductRequest,
    ) -> None:
        """Only one of two concurrent deletes of the same id succeeds."""
        created = (
            await _in_own_session(session_factory, lambda s: s.create_product(laptop_request))
        ).unwrap()

        results = await asyncio.gather(
            _in_own_session(session_factory, lambda s: s.delete_product(created.id)),
            _in_own_session(session_factory, lambda s: s.delete_product(created.id)),
        )

        assert sorted(r.success for r in results) == [False, True]
        failed = next(r for r in results if not r.success)
        assert isinstance(failed.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_update_racing_delete(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        laptop_request: ProductRequest,
    ) -> None:
        """An update racing a delete either lands first or reports not found."""
        created = (
            await _in_own_session(session_factory, lambda s: s.create_product(laptop_request))
        ).unwrap()
        update = ProductRequest(name="Laptop Pro", price=Decimal("1299.99"), quantity=5)

        updated, deleted = await asyncio.gather(
            _in_own_session(session_factory, lambda s: s.update_product(created.id, update)),
            _in_own_session(session_factory, lambda s: s.delete_product(created.id)),
        )

        assert deleted.success
        assert updated.success or isinstance(updated.error, ProductNotFoundError)
        remaining = await _in_own_session(
            session_factory, lambda s: s.get_product_by_id(created.id)
        )
        assert isinstance(remaining.error, ProductNotFoundError)

    @pytest.mark.asyncio
    async def test_price_storage_would_round_is_rejected(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """A price with three decimals is rejected and nothing is stored."""
        request = ProductRequest(name="Cable", price=Decimal("0.001"), quantity=1)

        result = await _in_own_session(session_factory, lambda s: s.create_product(request))

        assert isinstance(result.error, ProductValidationError)
        assert [v.field for v in result.error.violations] == ["price"]
        listed = await _in_own_session(session_factory, lambda s: s.get_all_products())
        assert listed.value == []

    @pytest.mark.asyncio
    async def test_created_product_matches_stored(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        """Create returns exactly what a later read finds."""
        request = ProductRequest(name="Cable", price=Decimal("10.5"), quantity=1)

        created = (
            await _in_own_session(session_factory, lambda s: s.create_product(request))
        ).unwrap()
        fetched = (
            await _in_own_session(session_factory, lambda s: s.get_product_by_id(created.id))
        ).unwrap()

        assert fetched == created
        assert fetched.price == Decimal("10.5")
