"""Cart package: generic store, controller, checkout submission, sessions."""
from .models import Cart, CartLineItem, StockWarning
from .service import CartController
from .checkout import CheckoutResult, CheckoutState, CheckoutStatus, CheckoutSubmission
from .storage import RedisCartStorage
from .session import CartSession, SessionRegistry

__all__ = [
    "Cart",
    "CartLineItem",
    "StockWarning",
    "CartController",
    "CheckoutSubmission",
    "CheckoutState",
    "CheckoutStatus",
    "CheckoutResult",
    "RedisCartStorage",
    "CartSession",
    "SessionRegistry",
]
