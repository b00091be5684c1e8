"""
Request Models

Bodies accepted by the cafeteria and marketplace endpoints.
"""
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from unigo.services.models import ShippingAddress


# ==================== CART MODELS ====================

class AddCafeteriaItemRequest(BaseModel):
    item_id: str
    quantity: int = 1
    notes: Optional[str] = None  # special instructions for the kitchen


class AddMarketplaceItemRequest(BaseModel):
    product_id: str
    quantity: int = 1
    attributes: Optional[Dict[str, Any]] = None  # selected size, colour, ...


class UpdateCartItemRequest(BaseModel):
    quantity: int  # 0 or less removes the line


# ==================== CHECKOUT MODELS ====================

class CafeteriaCheckoutRequest(BaseModel):
    order_type: Optional[Literal["instant", "later"]] = None
    pickup_time: Optional[datetime] = None  # explicit slot, wins over order_type


class MarketplaceCheckoutRequest(BaseModel):
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = None
