"""
Shared fixtures for WIMS tests.

Every test runs in its own temporary working directory so configuration,
log files and storage never touch the real project tree.
"""

import pytest

from wims.config import reset_config_manager
from wims.models import InventoryItem, OrderItem
from wims.services import AuthService, InventoryService, OrderService, PermissionService
from wims.storage import LocalStorage, create_store
from wims.utils import reset_loggers


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point config and logs at a temp directory and reset global singletons."""
    monkeypatch.chdir(tmp_path)
    reset_config_manager()
    reset_loggers()
    yield
    reset_loggers()
    reset_config_manager()


@pytest.fixture
def storage():
    """In-memory local storage."""
    return LocalStorage()


@pytest.fixture
def store(storage):
    return create_store(storage)


@pytest.fixture
def inventory_service(store):
    return InventoryService(store)


@pytest.fixture
def order_service(store):
    return OrderService(store)


@pytest.fixture
def auth_service(store):
    return AuthService(store)


@pytest.fixture
def permission_service(store, auth_service):
    return PermissionService(store, auth_service)


@pytest.fixture
def mango(inventory_service):
    """A stocked item between its thresholds."""
    item = InventoryItem(
        id="2",
        name="Mango",
        category="Fruit Juice",
        volume="160 ml",
        bottles_per_case=40,
        current_stock=100,
        min_stock=20,
        max_stock=500,
        unit_cost=300.0,
        location="Main Warehouse",
    )
    inventory_service.add_item(item)
    return item


@pytest.fixture
def two_line_items():
    """Order lines a (qty 2) and b (qty 3)."""
    return [
        OrderItem(id="a", name="Item A", requested_quantity=2),
        OrderItem(id="b", name="Item B", requested_quantity=3),
    ]
