"""
Tests for Redis cart persistence
"""

import json

import pytest

from unigo.cart import Cart, RedisCartStorage
from unigo.db import TTL, RedisKeys


class TestRedisCartStorage:

    @pytest.mark.asyncio
    async def test_save_and_load(self, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        cart = Cart()
        cart.add(make_menu_item(price="10", discount_price="8"), 2, notes="extra sauce")

        await storage.save("sess-1", cart)
        restored = await storage.load("sess-1")

        assert restored.get("menu-1").quantity == 2
        assert restored.get("menu-1").notes == "extra sauce"
        assert restored.total() == cart.total()
        assert restored.get("menu-1").item.vendor_id == "vendor-1"

    @pytest.mark.asyncio
    async def test_save_uses_session_key_and_ttl(self, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        cart = Cart()
        cart.add(make_menu_item(), 1)

        await storage.save("sess-1", cart)

        mock_redis.set.assert_awaited_once()
        args, kwargs = mock_redis.set.await_args
        assert args[0] == "cart:cafeteria:sess-1"
        assert kwargs["ex"] == TTL.CART == 86400

    @pytest.mark.asyncio
    async def test_saving_empty_cart_deletes_key(self, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        cart = Cart()
        cart.add(make_menu_item(), 1)
        await storage.save("sess-1", cart)

        cart.clear()
        await storage.save("sess-1", cart)

        assert RedisKeys.cafeteria_cart_key("sess-1") not in mock_redis.store

    @pytest.mark.asyncio
    async def test_load_missing(self, mock_redis):
        assert await RedisCartStorage(mock_redis).load("nobody") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        "not json",
        json.dumps({"lines": [{"quantity": 1}]}),
        json.dumps({"lines": [{"item": {"id": "x"}, "quantity": 1}]}),
    ])
    async def test_corrupted_payload_is_discarded(self, mock_redis, payload):
        key = RedisKeys.cafeteria_cart_key("sess-1")
        mock_redis.store[key] = payload

        assert await RedisCartStorage(mock_redis).load("sess-1") is None
        assert key not in mock_redis.store

    @pytest.mark.asyncio
    async def test_delete(self, mock_redis, make_menu_item):
        storage = RedisCartStorage(mock_redis)
        cart = Cart()
        cart.add(make_menu_item(), 1)
        await storage.save("sess-1", cart)

        await storage.delete("sess-1")

        assert await storage.load("sess-1") is None
