"""Pytest configuration and fixtures"""
import os
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_key")
os.environ.setdefault("UNIGO_LOGIN_PATH", "/auth/login")

from unigo.auth.context import AuthContext, CurrentUser  # noqa: E402
from unigo.services.domains.orders import OrderGateway  # noqa: E402
from unigo.services.models import MarketplaceProduct, MenuItem, OrderTotals  # noqa: E402


class FakeGateway(OrderGateway):
    """Order gateway that records requests instead of calling the database."""

    def __init__(self, order_id="order-123", error=None, single_origin=False, tax=Decimal("0")):
        self.order_id = order_id
        self.error = error
        self.single_origin = single_origin
        self.tax = tax
        self.requests = []
        self.quote_calls = 0
        # Called with "quote" / "create_order" while the gateway is awaited
        self.on_call = None

    async def quote(self, cart):
        self.quote_calls += 1
        if self.on_call is not None:
            self.on_call("quote")
        subtotal = cart.total()
        return OrderTotals(subtotal=subtotal, tax=self.tax, total=subtotal + self.tax)

    async def create_order(self, request):
        self.requests.append(request)
        if self.on_call is not None:
            self.on_call("create_order")
        if self.error is not None:
            raise self.error
        return self.order_id


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client (chainable query builder, awaitable execute)"""
    client = Mock()

    # Mock table operations
    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.delete.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.limit.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[]))

    rpc_mock = Mock()
    rpc_mock.execute = AsyncMock(return_value=Mock(data=None))

    client.table.return_value = table_mock
    client.rpc.return_value = rpc_mock

    return client


@pytest.fixture
def mock_redis():
    """Mock async Upstash Redis client backed by a dict"""
    store = {}
    redis = Mock()

    async def _get(key):
        return store.get(key)

    async def _set(key, value, ex=None):
        store[key] = value
        return True

    async def _delete(*keys):
        for key in keys:
            store.pop(key, None)
        return len(keys)

    redis.get = AsyncMock(side_effect=_get)
    redis.set = AsyncMock(side_effect=_set)
    redis.delete = AsyncMock(side_effect=_delete)
    redis.store = store
    return redis


@pytest.fixture
def sample_menu_item_row():
    """Sample menu_items row joined with counters"""
    return {
        "id": "menu-1",
        "name": "Veg Sandwich",
        "description": "Grilled sandwich with fresh vegetables",
        "price": 10.0,
        "discount_price": None,
        "category": "Snacks",
        "allergens": ["gluten"],
        "ingredients": None,
        "image_path": "menu/veg-sandwich.png",
        "available": True,
        "counter_id": "counter-1",
        "counters": {"vendor_id": "vendor-1"},
        "created_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def sample_product_row():
    """Sample marketplace_products row"""
    return {
        "id": "product-1",
        "storefront_id": "store-1",
        "name": "Campus Hoodie",
        "description": "Navy hoodie with the university crest",
        "price": "45.00",
        "discount_price": "39.99",
        "stock_quantity": 3,
        "category": "Apparel",
        "images": ["hoodie.png"],
        "attributes": {"size": ["S", "M", "L"]},
        "is_available": True,
        "created_at": "2025-01-01T00:00:00Z",
    }


@pytest.fixture
def make_menu_item():
    """Factory for MenuItem instances"""
    def _make(item_id="menu-1", price="10.00", discount_price=None, stock=None, vendor_id="vendor-1", **kwargs):
        return MenuItem(
            id=item_id,
            name=kwargs.pop("name", f"Item {item_id}"),
            price=price,
            discount_price=discount_price,
            stock=stock,
            vendor_id=vendor_id,
            counter_id=kwargs.pop("counter_id", "counter-1"),
            **kwargs,
        )
    return _make


@pytest.fixture
def make_product():
    """Factory for MarketplaceProduct instances"""
    def _make(item_id="product-1", price="45.00", discount_price=None, stock=None, storefront_id="store-1", **kwargs):
        return MarketplaceProduct(
            id=item_id,
            name=kwargs.pop("name", f"Product {item_id}"),
            price=price,
            discount_price=discount_price,
            stock=stock,
            storefront_id=storefront_id,
            **kwargs,
        )
    return _make


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def signed_in():
    """AuthContext for a signed-in student"""
    return AuthContext(CurrentUser(id="user-123", email="student@campus.edu", role="authenticated"))


@pytest.fixture
def anonymous():
    return AuthContext.anonymous()


@pytest.fixture
def gateway_factory():
    """Build FakeGateway instances with custom behaviour"""
    return FakeGateway
