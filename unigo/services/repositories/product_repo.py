"""Product Repository - Marketplace catalog operations."""
from typing import List, Optional

from .base import BaseRepository
from unigo.services.models import MarketplaceProduct


class ProductRepository(BaseRepository):
    """Marketplace product database operations."""

    async def get_by_id(self, product_id: str) -> Optional[MarketplaceProduct]:
        """Get product by ID."""
        result = await self.client.table("marketplace_products").select("*").eq(
            "id", product_id
        ).limit(1).execute()
        return MarketplaceProduct.from_row(result.data[0]) if result.data else None

    async def get_available(self, storefront_id: Optional[str] = None) -> List[MarketplaceProduct]:
        """Get available products, optionally for a single storefront."""
        query = self.client.table("marketplace_products").select("*").eq("is_available", True)
        if storefront_id:
            query = query.eq("storefront_id", storefront_id)
        result = await query.order("created_at", desc=True).execute()
        return [MarketplaceProduct.from_row(row) for row in result.data]
