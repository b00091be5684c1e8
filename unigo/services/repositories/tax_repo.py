"""Tax Repository - counters and vendor tax rates."""
from decimal import Decimal
from typing import Optional

from .base import BaseRepository
from unigo.services.money import to_decimal


class TaxRepository(BaseRepository):
    """Counter / tax rate lookups used to quote cafeteria orders."""

    async def get_vendor_for_counter(self, counter_id: str) -> Optional[str]:
        result = await self.client.table("counters").select("vendor_id").eq(
            "id", counter_id
        ).limit(1).execute()
        if not result.data:
            return None
        return result.data[0].get("vendor_id")

    async def get_active_rate(self, vendor_id: str) -> Optional[Decimal]:
        """Active tax rate for a vendor, as a percentage (5 means 5%)."""
        result = await self.client.table("tax_rates").select("rate").eq(
            "vendor_id", vendor_id
        ).eq("is_active", True).limit(1).execute()
        if not result.data or result.data[0].get("rate") is None:
            return None
        return to_decimal(result.data[0]["rate"])
