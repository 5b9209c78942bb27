"""Shared pytest fixtures and configuration for all tests."""

import os
from datetime import UTC, datetime, timedelta

# Keep src/main.py and src/lambda_handler.py from building real apps at import
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from restaurant_ordering_service.auth.token_validator import TokenValidator  # noqa: E402
from restaurant_ordering_service.models.menu_models import MenuItem  # noqa: E402
from tests.fakes import (  # noqa: E402
    TEST_SECRET,
    InMemoryMenuRepository,
    InMemoryOrderRepository,
    InMemoryUserRepository,
    make_menu_item,
)


@pytest.fixture
def mock_user_id() -> str:
    """Fixture providing a standard test user ID."""
    return "usr_123456"


@pytest.fixture
def token_validator() -> TokenValidator:
    return TokenValidator(secret=TEST_SECRET)


@pytest.fixture
def auth_headers(token_validator: TokenValidator, mock_user_id: str) -> dict[str, str]:
    """Authorization header for the standard test user."""
    return {"Authorization": f"Bearer {token_validator.issue(mock_user_id)}"}


@pytest.fixture
def sample_menu_items() -> list[MenuItem]:
    """Fixture providing menu items with known prices, one unavailable."""
    base = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    return [
        make_menu_item("item_burger", "Burger", "10.00", "mains", created_at=base),
        make_menu_item(
            "item_juice", "Juice", "5.00", "beverages", created_at=base + timedelta(minutes=1)
        ),
        make_menu_item(
            "item_cake",
            "Cake",
            "7.99",
            "desserts",
            available=False,
            created_at=base + timedelta(minutes=2),
        ),
    ]


@pytest.fixture
def menu_repository(sample_menu_items: list[MenuItem]) -> InMemoryMenuRepository:
    """In-memory catalog preloaded with the sample items."""
    repository = InMemoryMenuRepository()
    for item in sample_menu_items:
        repository.save_item(item)
    return repository


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()
