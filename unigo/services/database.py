"""
Supabase Database Service

Provides the Database class: repositories plus the catalog and order
domain services built on them.

Usage:
    from unigo.services.database import get_database

    # In async context (after init_database() called at startup):
    db = get_database()
    item = await db.catalog.get_menu_item(item_id)

    # At FastAPI startup (lifespan):
    await init_database()
"""

import asyncio
from typing import List, Optional

from supabase._async.client import AsyncClient

from unigo.db import get_supabase
from unigo.logging import get_logger
from unigo.services.models import CafeteriaOrder, MarketplaceOrder
from unigo.services.domains import (
    CafeteriaOrderGateway,
    CatalogService,
    MarketplaceOrderGateway,
)
from unigo.services.repositories import (
    MenuRepository,
    OrderRepository,
    ProductRepository,
    TaxRepository,
)

logger = get_logger(__name__)


class Database:
    """
    Supabase database client with repositories and domain services.

    IMPORTANT: This class uses async Supabase client (AsyncClient).
    Must be initialized via async factory method `create()` or `init_database()`.
    """

    def __init__(self, client: AsyncClient):
        """Private constructor. Use Database.create() or init_database() instead."""
        self.client = client

        self.menu_repo = MenuRepository(client)
        self.product_repo = ProductRepository(client)
        self.tax_repo = TaxRepository(client)
        self.order_repo = OrderRepository(client)

        # Domains
        self.catalog = CatalogService(self.menu_repo, self.product_repo)
        self.cafeteria_orders = CafeteriaOrderGateway(self.order_repo, self.tax_repo)
        self.marketplace_orders = MarketplaceOrderGateway(self.order_repo)

    @classmethod
    async def create(cls) -> "Database":
        """Async factory method to create Database instance."""
        client = await get_supabase()
        return cls(client)

    # ==================== ORDER HISTORY (delegated) ====================

    async def get_cafeteria_orders(self, user_id: str, limit: int = 50) -> List[CafeteriaOrder]:
        return await self.order_repo.get_cafeteria_orders(user_id, limit)

    async def get_marketplace_orders(self, user_id: str, limit: int = 50) -> List[MarketplaceOrder]:
        return await self.order_repo.get_marketplace_orders(user_id, limit)


# Singleton
_db: Optional[Database] = None
_db_lock: Optional[asyncio.Lock] = None  # Created lazily inside the running loop


def _get_lock() -> asyncio.Lock:
    global _db_lock
    if _db_lock is None:
        _db_lock = asyncio.Lock()
    return _db_lock


async def init_database() -> Database:
    """Initialize async database singleton.

    Can be called at FastAPI startup (lifespan) or lazily on first use.
    """
    global _db
    if _db is not None:
        return _db

    async with _get_lock():
        # Double-check after acquiring lock
        if _db is None:
            logger.info("Initializing async Supabase client...")
            _db = await Database.create()
            logger.info("Async Supabase client initialized successfully")
    return _db


async def close_database() -> None:
    """Close database connections.

    Should be called at FastAPI shutdown (lifespan).
    """
    global _db
    if _db is not None:
        try:
            await _db.client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Error closing Supabase client: {e}")
        _db = None
        logger.info("Supabase client closed")


async def get_database_async() -> Database:
    """Get database instance, initializing it on first use."""
    if _db is None:
        return await init_database()
    return _db


def get_database() -> Database:
    """Get database instance (sync accessor).

    Raises:
        RuntimeError: If database not initialized
    """
    if _db is None:
        raise RuntimeError(
            "Database not initialized. Use 'await get_database_async()' for lazy init, "
            "or call 'await init_database()' at startup."
        )
    return _db
