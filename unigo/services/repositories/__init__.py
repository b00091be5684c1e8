"""
Repository Pattern for Database Operations

- MenuRepository: cafeteria menu items
- ProductRepository: marketplace products
- TaxRepository: counters and vendor tax rates
- OrderRepository: order-creation RPCs and order history
"""
from .menu_repo import MenuRepository
from .product_repo import ProductRepository
from .tax_repo import TaxRepository
from .order_repo import OrderRepository

__all__ = [
    "MenuRepository",
    "ProductRepository",
    "TaxRepository",
    "OrderRepository",
]
