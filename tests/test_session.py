"""
Tests for cart sessions and the session registry
"""

from datetime import datetime, timedelta, timezone

import pytest

from unigo.cart import Cart, CartSession, RedisCartStorage, SessionRegistry
from unigo.services.models import DeliveryInfo, PickupInfo


@pytest.fixture
def registry(gateway_factory):
    return SessionRegistry(gateway_factory(), gateway_factory(single_origin=True), ttl_hours=1)


class TestCartSession:

    def test_carts_are_independent(self, gateway_factory, make_menu_item, make_product):
        session = CartSession("sess-1", gateway_factory(), gateway_factory())
        session.cafeteria.add_item(make_menu_item(), 1)
        session.marketplace.add_item(make_product(), 2)

        assert session.cafeteria.item_count() == 1
        assert session.marketplace.item_count() == 2
        assert session.cafeteria.fulfilment_type is PickupInfo
        assert session.marketplace.fulfilment_type is DeliveryInfo

    def test_sessions_do_not_share_carts(self, gateway_factory, make_menu_item):
        first = CartSession("a", gateway_factory(), gateway_factory())
        second = CartSession("b", gateway_factory(), gateway_factory())
        first.cafeteria.add_item(make_menu_item(), 1)

        assert second.cafeteria.cart.is_empty

    @pytest.mark.asyncio
    async def test_persist_without_storage_is_noop(self, gateway_factory, make_menu_item):
        session = CartSession("sess-1", gateway_factory(), gateway_factory())
        session.cafeteria.add_item(make_menu_item(), 1)
        await session.persist()

    @pytest.mark.asyncio
    async def test_persist_writes_cafeteria_cart(self, gateway_factory, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        session = CartSession("sess-1", gateway_factory(), gateway_factory(), storage=storage)
        session.cafeteria.add_item(make_menu_item(), 3)

        await session.persist()

        assert (await storage.load("sess-1")).item_count() == 3

    def test_expiry(self, gateway_factory):
        session = CartSession("sess-1", gateway_factory(), gateway_factory())
        now = datetime.now(timezone.utc)
        session.touch(now - timedelta(hours=2))

        assert session.is_expired(timedelta(hours=1), now)
        assert not session.is_expired(timedelta(hours=3), now)


class TestSessionRegistry:

    @pytest.mark.asyncio
    async def test_creates_new_session_without_id(self, registry):
        session = await registry.get_or_create(None)

        assert session.session_id
        assert session.session_id in registry
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_returns_same_session_for_id(self, registry, make_menu_item):
        session = await registry.get_or_create(None)
        session.cafeteria.add_item(make_menu_item(), 1)

        again = await registry.get_or_create(session.session_id)

        assert again is session
        assert again.cafeteria.item_count() == 1

    @pytest.mark.asyncio
    async def test_overlong_id_is_replaced(self, registry):
        session = await registry.get_or_create("x" * 500)
        assert session.session_id != "x" * 500

    @pytest.mark.asyncio
    async def test_rehydrates_cafeteria_cart(self, gateway_factory, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        cart = Cart()
        cart.add(make_menu_item(), 2)
        await storage.save("returning", cart)

        registry = SessionRegistry(gateway_factory(), gateway_factory(), storage=storage)
        session = await registry.get_or_create("returning")

        assert session.cafeteria.item_count() == 2
        assert session.marketplace.cart.is_empty

    @pytest.mark.asyncio
    async def test_prune_drops_idle_sessions(self, registry):
        idle = await registry.get_or_create(None)
        active = await registry.get_or_create(None)
        now = datetime.now(timezone.utc)
        idle.touch(now - timedelta(hours=2))

        assert registry.prune(now) == 1
        assert idle.session_id not in registry
        assert active.session_id in registry

    @pytest.mark.asyncio
    async def test_expired_session_starts_fresh(self, registry, make_menu_item):
        session = await registry.get_or_create("sess-1")
        session.cafeteria.add_item(make_menu_item(), 1)
        session.touch(datetime.now(timezone.utc) - timedelta(hours=2))

        fresh = await registry.get_or_create("sess-1")

        assert fresh is not session
        assert fresh.cafeteria.cart.is_empty

    @pytest.mark.asyncio
    async def test_close(self, registry):
        await registry.get_or_create(None)
        await registry.close()
        assert len(registry) == 0
