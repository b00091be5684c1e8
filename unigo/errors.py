"""
Common Errors

Centralized error messages (to avoid string duplication) and the
exception taxonomy shared by the cart, checkout, and HTTP layers.
"""
from enum import Enum
from typing import List, Optional

from unigo import config

# Cart errors
ERROR_QUANTITY_NOT_POSITIVE = "quantity must be positive"
ERROR_QUANTITY_NOT_INTEGER = "quantity must be an integer"
ERROR_ITEM_REQUIRED = "item is required"
ERROR_ITEM_ID_REQUIRED = "item id is required"
ERROR_CART_EMPTY = "Cart is empty"
ERROR_MIXED_STOREFRONTS = "All items in an order must come from the same storefront"

# Checkout errors
ERROR_ADDRESS_INCOMPLETE = "Complete shipping address is required"
ERROR_PICKUP_TIME_REQUIRED = "Pickup time is required"
ERROR_CHECKOUT_IN_PROGRESS = "Checkout already in progress"
ERROR_NO_ORDER_ID = "Database function did not return an order ID"

# Remote order errors
ERROR_INSUFFICIENT_BALANCE = "Insufficient student balance."
ERROR_INSUFFICIENT_STOCK = "Insufficient stock for one or more items."
ERROR_ITEM_UNAVAILABLE = "One or more items are currently unavailable."
ERROR_INVALID_ADDRESS = "Shipping address was rejected."
ERROR_ORDER_NOT_FOUND = "Order creation failed: Required item or profile not found."
ERROR_ORDER_FAILED = "Failed to place order."

# Auth / catalog errors
ERROR_UNAUTHORIZED = "You must be logged in to place an order."
ERROR_INVALID_TOKEN = "Invalid or expired session"
ERROR_AUTH_UNAVAILABLE = "Sign-in service is temporarily unavailable"
ERROR_ITEM_NOT_FOUND = "Item not found"
ERROR_CATALOG_UNAVAILABLE = "Catalog is temporarily unavailable"


class OrderFailureReason(str, Enum):
    """Structured reasons reported by the order-creation functions."""
    INSUFFICIENT_STOCK = "insufficient_stock"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    ITEM_UNAVAILABLE = "item_unavailable"
    INVALID_ADDRESS = "invalid_address"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"


class UniGoError(Exception):
    """Base class for errors surfaced to the user."""

    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class ValidationError(UniGoError):
    """Bad input caught before any store mutation or network call."""

    code = "validation_error"
    status_code = 422

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


class CartStoreError(UniGoError, ValueError):
    """A cart store precondition was violated."""

    code = "cart_error"
    status_code = 400


class EmptyCartError(UniGoError):
    """Checkout attempted with nothing in the cart."""

    code = "empty_cart"
    status_code = 409

    def __init__(self, message: str = ERROR_CART_EMPTY):
        super().__init__(message)


class RemoteOrderError(UniGoError):
    """The order-creation function rejected or failed the order."""

    code = "order_failed"
    status_code = 502

    _STATUS_BY_REASON = {
        OrderFailureReason.INSUFFICIENT_STOCK: 409,
        OrderFailureReason.INSUFFICIENT_BALANCE: 402,
        OrderFailureReason.ITEM_UNAVAILABLE: 409,
        OrderFailureReason.INVALID_ADDRESS: 422,
        OrderFailureReason.NOT_FOUND: 404,
        OrderFailureReason.SERVER_ERROR: 502,
    }

    def __init__(self, reason: OrderFailureReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.status_code = self._STATUS_BY_REASON.get(reason, 502)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data


class AuthRequiredError(UniGoError):
    """No authenticated user; the client must go to the sign-in page."""

    code = "auth_required"
    status_code = 401

    def __init__(self, message: str = ERROR_UNAUTHORIZED, redirect_to: Optional[str] = None):
        super().__init__(message)
        self.redirect_to = redirect_to or config.LOGIN_PATH

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["redirect_to"] = self.redirect_to
        return data


class CatalogItemNotFoundError(UniGoError):
    """Catalog lookup found no row for the requested id."""

    code = "not_found"
    status_code = 404

    def __init__(self, item_id: str, message: str = ERROR_ITEM_NOT_FOUND):
        super().__init__(message)
        self.item_id = item_id


class CheckoutInProgressError(UniGoError):
    """A checkout for this cart is already being submitted."""

    code = "checkout_in_progress"
    status_code = 409

    def __init__(self, message: str = ERROR_CHECKOUT_IN_PROGRESS):
        super().__init__(message)


class CatalogUnavailableError(UniGoError):
    """The catalog could not be read from the database."""

    code = "catalog_unavailable"
    status_code = 502

    def __init__(self, message: str = ERROR_CATALOG_UNAVAILABLE):
        super().__init__(message)


class AuthUnavailableError(UniGoError):
    """The token could not be checked because the auth service is unreachable."""

    code = "auth_unavailable"
    status_code = 503

    def __init__(self, message: str = ERROR_AUTH_UNAVAILABLE):
        super().__init__(message)
