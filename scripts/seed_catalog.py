#!/usr/bin/env python3
"""Seed product catalog script.

Creates the products table if needed and inserts a small set of sample
products through the catalog service, so the usual validation applies.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --clear
"""

import argparse
import asyncio
from decimal import Decimal

import structlog

from catalog_api.catalog.repository import SqlAlchemyProductRepository
from catalog_api.catalog.schemas import ProductRequest
from catalog_api.catalog.service import CatalogService
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.database import async_session_factory, engine, init_models
from catalog_api.infrastructure.logging import configure_logging

logger = structlog.get_logger()

SAMPLE_PRODUCTS = [
    ProductRequest(
        name="Laptop Gaming",
        description="High performance laptop",
        price=Decimal("1500.00"),
        quantity=5,
    ),
    ProductRequest(
        name="Smartphone Pro",
        description="Latest generation smartphone",
        price=Decimal("899.99"),
        quantity=20,
    ),
    ProductRequest(
        name="Tablet Ultra",
        description="Light and fast tablet",
        price=Decimal("599.99"),
        quantity=0,
    ),
    ProductRequest(name="USB-C Cable", price=Decimal("9.99"), quantity=250),
]


async def seed(clear: bool = False) -> int:
    """Insert the sample products.

    Args:
        clear: Whether to delete existing products first.

    Returns:
        Number of products created.
    """
    await init_models()

    created = 0
    async with async_session_factory() as session:
        service = CatalogService(SqlAlchemyProductRepository(session))

        if clear:
            existing = (await service.get_all_products()).unwrap()
            for product in existing:
                (await service.delete_product(product.id)).unwrap()
            logger.info("Cleared catalog", deleted=len(existing))

        for request in SAMPLE_PRODUCTS:
            product = (await service.create_product(request)).unwrap()
            logger.info("Seeded product", product_id=product.id, name=product.name)
            created += 1

        await session.commit()

    await engine.dispose()
    return created


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the product catalog")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing products before seeding",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level, json_logs=False)
    created = asyncio.run(seed(clear=args.clear))
    print(f"Seeded {created} products into {settings.database_url}")


if __name__ == "__main__":
    main()
