"""Database Models - Pydantic models for catalog items, fulfilment, and orders."""
import copy
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from unigo import config
from unigo.services.money import to_decimal as _to_decimal


# ==================== CATALOG ====================

class CatalogItem(BaseModel):
    """Fields every cart-able catalog row shares."""
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    discount_price: Optional[Decimal] = None
    stock: Optional[int] = None  # None means stock is not tracked

    class Config:
        extra = "ignore"  # Ignore unknown fields from DB

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("discount_price", mode="before")
    @classmethod
    def convert_discount_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None

    @property
    def effective_price(self) -> Decimal:
        """Discount price when one is set, list price otherwise."""
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price

    @property
    def origin_id(self) -> Optional[str]:
        """Vendor or storefront the item is sold by."""
        return None


class MenuItem(CatalogItem):
    """Cafeteria menu item (``menu_items`` joined with ``counters``)."""
    category: Optional[str] = None
    allergens: List[str] = []
    ingredients: List[str] = []
    image_path: Optional[str] = None
    available: bool = True
    counter_id: Optional[str] = None
    vendor_id: Optional[str] = None
    is_diet_food: bool = False
    calories: Optional[int] = None
    nutritional_info: Optional[Dict[str, Any]] = None

    @property
    def origin_id(self) -> Optional[str]:
        return self.vendor_id or self.counter_id

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MenuItem":
        data = dict(row)
        counters = data.pop("counters", None) or {}
        if counters.get("vendor_id") and not data.get("vendor_id"):
            data["vendor_id"] = counters["vendor_id"]
        data["allergens"] = data.get("allergens") or []
        data["ingredients"] = data.get("ingredients") or []
        return cls(**data)


class MarketplaceProduct(CatalogItem):
    """Marketplace product (``marketplace_products``)."""
    storefront_id: str
    category: Optional[str] = None
    images: List[str] = []
    attributes: Optional[Dict[str, Any]] = None
    is_available: bool = True

    @property
    def origin_id(self) -> Optional[str]:
        return self.storefront_id

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MarketplaceProduct":
        data = dict(row)
        if "stock_quantity" in data:
            data["stock"] = data.pop("stock_quantity")
        data["images"] = data.get("images") or []
        return cls(**data)


# ==================== FULFILMENT ====================

class Fulfilment(BaseModel):
    """Pickup or delivery details supplied at checkout."""
    model_config = ConfigDict(frozen=True)

    def missing_fields(self) -> List[str]:
        return []


class PickupInfo(Fulfilment):
    """Cafeteria pickup slot."""
    pickup_time: Optional[datetime] = None

    def missing_fields(self) -> List[str]:
        return [] if self.pickup_time else ["pickup_time"]

    @classmethod
    def for_order_type(cls, order_type: str, now: Optional[datetime] = None) -> "PickupInfo":
        """Schedule pickup for an 'instant' (1 min) or 'later' (30 min) order."""
        now = now or datetime.now(timezone.utc)
        if order_type == "later":
            minutes = config.LATER_PICKUP_MINUTES
        elif order_type == "instant":
            minutes = config.INSTANT_PICKUP_MINUTES
        else:
            raise ValueError(f"Unknown order type: {order_type}")
        return cls(pickup_time=now + timedelta(minutes=minutes))


class ShippingAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("address_line1", "city", "state", "zip_code", "country")

    def missing_fields(self) -> List[str]:
        return [
            name for name in self.REQUIRED_FIELDS
            if not (getattr(self, name) or "").strip()
        ]


class DeliveryInfo(Fulfilment):
    """Marketplace delivery: recipient address plus optional notes for the vendor."""
    shipping_address: Optional[ShippingAddress] = None
    notes: Optional[str] = None

    def missing_fields(self) -> List[str]:
        if self.shipping_address is None:
            return list(ShippingAddress.REQUIRED_FIELDS)
        return self.shipping_address.missing_fields()


# ==================== ORDER REQUEST ====================

class OrderLine(BaseModel):
    """One line of an order snapshot."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    quantity: int
    unit_price: Decimal
    notes: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None


class OrderTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    tax: Decimal = Decimal("0")
    total: Decimal


class OrderRequest(BaseModel):
    """Write-once snapshot of a cart at checkout time."""
    model_config = ConfigDict(frozen=True)

    buyer_id: str
    origin_id: Optional[str] = None
    lines: Tuple[OrderLine, ...]
    subtotal: Decimal
    tax: Decimal = Decimal("0")
    total: Decimal
    fulfilment: Union[PickupInfo, DeliveryInfo]
    created_at: datetime

    @field_validator("lines", mode="before")
    @classmethod
    def snapshot_lines(cls, v):
        # Detach attribute dicts from the live cart
        return tuple(copy.deepcopy(line) for line in v)


# ==================== ORDERS (history) ====================

class CafeteriaOrderItem(BaseModel):
    id: str
    menu_item_id: Optional[str] = None
    quantity: int
    price_at_order: Decimal = Decimal("0")
    counter_id: Optional[str] = None
    counter_name: Optional[str] = None
    name: Optional[str] = None
    special_instructions: Optional[str] = None
    status: str = "pending"

    class Config:
        extra = "ignore"

    @field_validator("price_at_order", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CafeteriaOrderItem":
        data = dict(row)
        menu_item = data.pop("menu_items", None) or {}
        counter = data.pop("counters", None) or {}
        data["name"] = menu_item.get("name")
        data["counter_name"] = counter.get("name")
        return cls(**data)


class CafeteriaOrder(BaseModel):
    """Cafeteria order (``orders`` with ``order_items``)."""
    id: str
    user_id: Optional[str] = None
    status: str = "pending"
    total_price: Decimal = Decimal("0")
    subtotal: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    pickup_time: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    items: List[CafeteriaOrderItem] = []

    class Config:
        extra = "ignore"

    @field_validator("total_price", mode="before")
    @classmethod
    def convert_total_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("subtotal", "tax", mode="before")
    @classmethod
    def convert_optional_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CafeteriaOrder":
        data = dict(row)
        data["items"] = [CafeteriaOrderItem.from_row(i) for i in data.pop("order_items", None) or []]
        return cls(**data)


class MarketplaceOrderItem(BaseModel):
    id: str
    marketplace_product_id: Optional[str] = None
    quantity: int
    price_at_purchase: Decimal = Decimal("0")
    product_snapshot: Optional[Dict[str, Any]] = None

    class Config:
        extra = "ignore"

    @field_validator("price_at_purchase", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)


class MarketplaceOrder(BaseModel):
    """Marketplace order (``marketplace_orders`` with its items)."""
    id: str
    storefront_id: Optional[str] = None
    status: str = "pending"
    total_price: Decimal = Decimal("0")
    created_at: Optional[datetime] = None
    items: List[MarketplaceOrderItem] = []

    class Config:
        extra = "ignore"

    @field_validator("total_price", mode="before")
    @classmethod
    def convert_total_to_decimal(cls, v):
        return _to_decimal(v)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MarketplaceOrder":
        data = dict(row)
        data["items"] = [
            MarketplaceOrderItem(**i) for i in data.pop("marketplace_order_items", None) or []
        ]
        return cls(**data)
