"""Shared fixtures for API tests."""

import pytest


@pytest.fixture
def laptop_payload() -> dict:
    """Get a valid product payload."""
    return {
        "name": "Laptop",
        "description": "High quality laptop",
        "price": "999.99",
        "quantity": 10,
    }
