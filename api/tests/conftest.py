"""
Pytest configuration and fixtures for catalog search API tests.
"""
from datetime import datetime

import pytest

from fakes import FakeCatalogStore


SAMPLE_ROWS = [
    {
        "product_id": 101,
        "title": "Apple iPhone 15 Pro",
        "description": "Titanium design with A17 Pro chip",
        "price": 165000.0,
        "sale_price": 149999.0,
        "stock": 12,
        "specs": {"brand": "Apple", "storage": "256GB"},
        "rating": 4.8,
        "review_count": 320,
        "category_name": "Smartphones",
        "category_id": 3,
        "seller_name": "Gadget World",
        "created_at": datetime(2025, 9, 20, 10, 0, 0),
    },
    {
        "product_id": 102,
        "title": "iPhone 13 Silicone Case",
        "description": "Soft-touch case with MagSafe",
        "price": 4500.0,
        "sale_price": None,
        "stock": 80,
        "specs": {"brand": "Apple"},
        "rating": 4.2,
        "review_count": 95,
        "category_name": "Phone Accessories",
        "category_id": 7,
        "seller_name": "Case Hub",
        "created_at": datetime(2025, 6, 2, 8, 30, 0),
    },
    {
        "product_id": 103,
        "title": "Samsung Galaxy A55",
        "description": "6.6 inch Super AMOLED display",
        "price": 52000.0,
        "sale_price": 47500.0,
        "stock": 0,
        "specs": {"brand": "Samsung", "ram": "8GB"},
        "rating": 4.5,
        "review_count": 210,
        "category_name": "Phones",
        "category_id": 2,
        "seller_name": "Mobile Point",
        "created_at": datetime(2025, 8, 14, 16, 45, 0),
    },
]

SAMPLE_SUGGESTIONS = [
    {
        "product_id": 101,
        "title": "Apple iPhone 15 Pro",
        "review_count": 320,
        "category_name": "Smartphones",
        "brand": "Apple",
        "display_price": 149999.0,
    },
    {
        "product_id": 102,
        "title": "iPhone 13 Silicone Case",
        "review_count": 95,
        "category_name": "Phone Accessories",
        "brand": "Apple",
        "display_price": 4500.0,
    },
]

SAMPLE_CATEGORIES = [
    {"category_name": "Phone Accessories", "count": 41},
    {"category_name": "Phones", "count": 18},
    {"category_name": "Smartphones", "count": 56},
]


@pytest.fixture
def sample_rows():
    """Return sample product rows as the page read yields them."""
    return [dict(row) for row in SAMPLE_ROWS]


@pytest.fixture
def fake_store(sample_rows):
    """Store holding the sample catalog page and autocomplete data."""
    return FakeCatalogStore(
        rows=sample_rows,
        total=len(sample_rows),
        suggestions=[dict(row) for row in SAMPLE_SUGGESTIONS],
        categories=[dict(row) for row in SAMPLE_CATEGORIES],
    )


@pytest.fixture
def empty_store():
    """Store with no matching products."""
    return FakeCatalogStore()
