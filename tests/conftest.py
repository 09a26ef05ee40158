"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from assistant.domain import Customer, Product, Sale, SaleItem  # noqa: E402
from inference import InlineImage  # noqa: E402


@pytest.fixture
def products():
    return [
        Product(id="p1", name="Rice 1kg", brand="Daawat", category="Grains",
                price=120.0, stock=40, unit="kg", expiry_date="2027-01-01"),
        Product(id="p2", name="Milk 500ml", brand="Amul", category="Dairy",
                price=30.0, stock=3, unit="ml", expiry_date="2026-10-25"),
        Product(id="p3", name="Bread", brand="Harvest", category="Bakery",
                price=45.0, stock=12),
    ]


@pytest.fixture
def customers():
    return [
        Customer(id="c1", name="Asha", mobile="9000000001", face_attributes="female, 30s, round glasses"),
        Customer(id="c2", name="Ravi", mobile="9000000002", face_attributes="male, 50s, grey beard"),
        Customer(id="c3", name="Neel", mobile="9000000003"),
    ]


@pytest.fixture
def sales():
    return [
        Sale(
            id=f"s{i}",
            date=f"2026-10-{(i % 28) + 1:02d}T10:00:00",
            items=[SaleItem(product_id="p1", name="Rice 1kg", quantity=1, price=120.0)],
            total=120.0,
            cashier="Meena" if i % 2 else "Arjun",
            customer_mobile="9000000001",
        )
        for i in range(25)
    ]


@pytest.fixture
def image():
    return InlineImage(data="aGVsbG8=")
