"""Order Repository - order-creation RPCs and order history."""
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from unigo.services.models import CafeteriaOrder, MarketplaceOrder

CAFETERIA_ORDER_COLUMNS = """
    *,
    order_items (
        *,
        menu_items ( name, image_path ),
        counters ( name )
    )
"""

MARKETPLACE_ORDER_COLUMNS = """
    id, created_at, total_price, status, storefront_id,
    marketplace_order_items (
        id, marketplace_product_id, quantity, price_at_purchase, product_snapshot
    )
"""


class OrderRepository(BaseRepository):
    """Order database operations."""

    async def create_student_order(self, params: Dict[str, Any]) -> Optional[Any]:
        """Call ``create_student_order``; returns the raw RPC result (the order id)."""
        result = await self.client.rpc("create_student_order", params).execute()
        return result.data

    async def create_marketplace_order(self, params: Dict[str, Any]) -> Optional[Any]:
        """Call ``create_marketplace_order``; returns the raw RPC result (the order id)."""
        result = await self.client.rpc("create_marketplace_order", params).execute()
        return result.data

    async def get_cafeteria_orders(self, user_id: str, limit: int = 50) -> List[CafeteriaOrder]:
        """Get a student's cafeteria orders, newest first."""
        result = await self.client.table("orders").select(CAFETERIA_ORDER_COLUMNS).eq(
            "user_id", user_id
        ).order("created_at", desc=True).limit(limit).execute()
        return [CafeteriaOrder.from_row(row) for row in result.data]

    async def get_marketplace_orders(self, user_id: str, limit: int = 50) -> List[MarketplaceOrder]:
        """Get a student's marketplace orders, newest first."""
        result = await self.client.table("marketplace_orders").select(MARKETPLACE_ORDER_COLUMNS).eq(
            "student_user_id", user_id
        ).order("created_at", desc=True).limit(limit).execute()
        return [MarketplaceOrder.from_row(row) for row in result.data]
