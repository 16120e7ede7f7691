"""Shared fixtures for catalog tests."""

from collections.abc import AsyncGenerator, Iterator
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from catalog_api.catalog.models import Product
from catalog_api.catalog.schemas import ProductRequest
from catalog_api.infrastructure.database import Base, build_engine, get_session
from catalog_api.main import app


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """Create an empty SQLite database file with the catalog schema.

    Returns:
        Async SQLAlchemy URL for the database.
    """
    db_path = tmp_path / "catalog.db"
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture
def session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Create a session factory over the test database.

    Each session gets its own connection, like concurrent requests do.
    """
    engine = build_engine(database_url, poolclass=NullPool)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def client(session_factory: async_sessionmaker[AsyncSession]) -> Iterator[TestClient]:
    """Create test client backed by a fresh SQLite database."""

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def laptop_request() -> ProductRequest:
    """Create a valid laptop request."""
    return ProductRequest(
        name="Laptop",
        description="High quality laptop",
        price=Decimal("999.99"),
        quantity=10,
    )


@pytest.fixture
def sample_products() -> list[Product]:
    """Create unsaved products covering names, prices and stock levels."""
    return [
        Product(
            name="Laptop Gaming",
            description="High performance laptop",
            price=Decimal("1500.00"),
            quantity=5,
        ),
        Product(
            name="Smartphone Pro",
            description="Latest generation smartphone",
            price=Decimal("899.99"),
            quantity=20,
        ),
        Product(
            name="Tablet Ultra",
            description="Light and fast tablet",
            price=Decimal("599.99"),
            quantity=0,
        ),
    ]
