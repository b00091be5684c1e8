"""Menu Repository - Cafeteria menu operations."""
from typing import List, Optional

from .base import BaseRepository
from unigo.services.models import MenuItem

MENU_ITEM_COLUMNS = "*, counters ( vendor_id )"


class MenuRepository(BaseRepository):
    """Menu item database operations."""

    async def get_by_id(self, item_id: str) -> Optional[MenuItem]:
        """Get menu item by ID, with the owning vendor from its counter."""
        result = await self.client.table("menu_items").select(
            MENU_ITEM_COLUMNS
        ).eq("id", item_id).limit(1).execute()
        return MenuItem.from_row(result.data[0]) if result.data else None

    async def get_available(self, category: Optional[str] = None) -> List[MenuItem]:
        """Get all available menu items, optionally for one category."""
        query = self.client.table("menu_items").select(MENU_ITEM_COLUMNS).eq("available", True)
        if category:
            query = query.eq("category", category)
        result = await query.order("name").execute()
        return [MenuItem.from_row(row) for row in result.data]
