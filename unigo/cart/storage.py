"""Redis persistence for the cafeteria cart."""
import json
from typing import Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from unigo.db import TTL, RedisKeys
from unigo.logging import get_logger, sanitize_id_for_logging
from unigo.services.models import MenuItem

from .models import Cart

logger = get_logger(__name__)


class RedisCartStorage:
    """Saves and restores a session's cafeteria cart (24 hour TTL)."""

    def __init__(self, redis: AsyncRedis, ttl: int = TTL.CART):
        self.redis = redis
        self.ttl = ttl

    async def load(self, session_id: str) -> Optional[Cart[MenuItem]]:
        """Rehydrate the cart for a session; None if nothing (valid) is stored."""
        key = RedisKeys.cafeteria_cart_key(session_id)
        data = await self.redis.get(key)
        if not data:
            return None

        try:
            return Cart.from_dict(json.loads(data), MenuItem)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Corrupted data (pydantic errors are ValueErrors) - clear it and start fresh
            logger.warning(
                f"Corrupted cart data for session {sanitize_id_for_logging(session_id)}: {type(e).__name__}"
            )
            await self.redis.delete(key)
            return None

    async def save(self, session_id: str, cart: Cart[MenuItem]) -> None:
        key = RedisKeys.cafeteria_cart_key(session_id)
        if cart.is_empty:
            await self.redis.delete(key)
            return
        await self.redis.set(key, json.dumps(cart.to_dict()), ex=self.ttl)

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(RedisKeys.cafeteria_cart_key(session_id))
