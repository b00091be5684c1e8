"""
Catalog Domain Service

Item lookup for the cart controllers and catalog listing for the menu and
marketplace pages. Database failures surface as CatalogItemNotFoundError
(ids the database cannot parse) or CatalogUnavailableError.
"""
from typing import List, Optional

import httpx
from postgrest.exceptions import APIError

from unigo.errors import CatalogItemNotFoundError, CatalogUnavailableError
from unigo.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from unigo.services.models import MarketplaceProduct, MenuItem
from unigo.services.repositories import MenuRepository, ProductRepository

logger = get_logger(__name__)

# Postgres invalid_text_representation: the id is not a valid uuid
INVALID_ID_CODE = "22P02"


class CatalogService:
    """Resolves item ids to catalog snapshots (price, discount, stock)."""

    def __init__(self, menu_repo: MenuRepository, product_repo: ProductRepository):
        self.menu_repo = menu_repo
        self.product_repo = product_repo

    async def _fetch(self, query, *args, item_id: Optional[str] = None):
        try:
            return await query(*args)
        except APIError as e:
            if item_id is not None and e.code == INVALID_ID_CODE:
                logger.info(f"Malformed catalog id: {sanitize_id_for_logging(item_id)}")
                raise CatalogItemNotFoundError(item_id) from e
            logger.error(f"Catalog query failed: {sanitize_string_for_logging(e.message)}")
            raise CatalogUnavailableError() from e
        except httpx.HTTPError as e:
            logger.error(f"Catalog transport error: {type(e).__name__}")
            raise CatalogUnavailableError() from e

    async def get_menu_item(self, item_id: str) -> MenuItem:
        item = await self._fetch(self.menu_repo.get_by_id, item_id, item_id=item_id)
        if item is None:
            logger.info(f"Menu item not found: {sanitize_id_for_logging(item_id)}")
            raise CatalogItemNotFoundError(item_id)
        return item

    async def get_product(self, product_id: str) -> MarketplaceProduct:
        product = await self._fetch(self.product_repo.get_by_id, product_id, item_id=product_id)
        if product is None:
            logger.info(f"Product not found: {sanitize_id_for_logging(product_id)}")
            raise CatalogItemNotFoundError(product_id)
        return product

    async def list_menu(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[MenuItem]:
        """
        Available menu items.

        Args:
            category: Exact category to keep (e.g. "Snacks")
            search: Case-insensitive text matched against name and description
        """
        items = await self._fetch(self.menu_repo.get_available, category)
        if search:
            needle = search.strip().lower()
            items = [
                item for item in items
                if needle in item.name.lower() or needle in (item.description or "").lower()
            ]
        return items

    async def list_products(self, storefront_id: Optional[str] = None) -> List[MarketplaceProduct]:
        return await self._fetch(self.product_repo.get_available, storefront_id)
