"""Domain services wrapping repositories."""
from .catalog import CatalogService
from .orders import (
    CafeteriaOrderGateway,
    MarketplaceOrderGateway,
    OrderGateway,
    classify_order_error,
)
from .pickup import format_time_left, pickup_time_left

__all__ = [
    "CatalogService",
    "OrderGateway",
    "CafeteriaOrderGateway",
    "MarketplaceOrderGateway",
    "classify_order_error",
    "pickup_time_left",
    "format_time_left",
]
