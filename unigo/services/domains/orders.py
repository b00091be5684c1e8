"""
Order Gateways

Order-creation collaborators used by the cart controllers. Each gateway
quotes the totals for a cart and submits an OrderRequest to its database
function, translating database failures into RemoteOrderError.
"""
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import httpx
from postgrest.exceptions import APIError

from unigo.errors import (
    ERROR_INSUFFICIENT_BALANCE,
    ERROR_INSUFFICIENT_STOCK,
    ERROR_INVALID_ADDRESS,
    ERROR_INVALID_TOKEN,
    ERROR_ITEM_UNAVAILABLE,
    ERROR_NO_ORDER_ID,
    ERROR_ORDER_FAILED,
    ERROR_ORDER_NOT_FOUND,
    AuthRequiredError,
    OrderFailureReason,
    RemoteOrderError,
)
from unigo.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from unigo.services.models import DeliveryInfo, OrderRequest, OrderTotals, PickupInfo
from unigo.services.money import percent, round_money, to_float
from unigo.services.repositories import OrderRepository, TaxRepository

if TYPE_CHECKING:
    from unigo.cart.models import Cart

logger = get_logger(__name__)

# Substring of the database error -> (reason, user-facing message); first match wins
_ERROR_PATTERNS = (
    ("insufficient student balance", OrderFailureReason.INSUFFICIENT_BALANCE, ERROR_INSUFFICIENT_BALANCE),
    ("insufficient stock", OrderFailureReason.INSUFFICIENT_STOCK, ERROR_INSUFFICIENT_STOCK),
    ("not available", OrderFailureReason.ITEM_UNAVAILABLE, ERROR_ITEM_UNAVAILABLE),
    ("address", OrderFailureReason.INVALID_ADDRESS, ERROR_INVALID_ADDRESS),
    ("not found", OrderFailureReason.NOT_FOUND, ERROR_ORDER_NOT_FOUND),
)

_AUTH_MARKERS = ("jwt", "permission denied", "not authenticated")


def classify_order_error(message: Optional[str]) -> Union[RemoteOrderError, AuthRequiredError]:
    """Map a database function error message to the error raised to the caller."""
    text = (message or "").lower()

    if any(marker in text for marker in _AUTH_MARKERS):
        return AuthRequiredError(ERROR_INVALID_TOKEN)

    for pattern, reason, user_message in _ERROR_PATTERNS:
        if pattern in text:
            return RemoteOrderError(reason, user_message)

    return RemoteOrderError(
        OrderFailureReason.SERVER_ERROR,
        f"{ERROR_ORDER_FAILED} {message}" if message else ERROR_ORDER_FAILED,
    )


def _extract_order_id(data: Any) -> Optional[str]:
    """RPC results come back as a bare id, a row dict, or a list of either."""
    if isinstance(data, list):
        return _extract_order_id(data[0]) if data else None
    if isinstance(data, dict):
        value = data.get("order_id") or data.get("id")
        return str(value) if value else None
    if data:
        return str(data)
    return None


class OrderGateway:
    """Base order-creation collaborator."""

    # Reject carts whose items come from more than one origin
    single_origin = False

    async def quote(self, cart: "Cart") -> OrderTotals:
        """Totals for ``cart``; the default charges no tax."""
        subtotal = cart.total()
        return OrderTotals(subtotal=subtotal, tax=Decimal("0"), total=subtotal)

    async def create_order(self, request: OrderRequest) -> str:
        """Submit ``request`` and return the new order id."""
        raise NotImplementedError

    async def _call(self, rpc, params: Dict[str, Any], request: OrderRequest) -> str:
        buyer = sanitize_id_for_logging(request.buyer_id)
        try:
            data = await rpc(params)
        except APIError as e:
            logger.error(f"Order RPC failed for buyer {buyer}: {sanitize_string_for_logging(e.message)}")
            raise classify_order_error(e.message) from e
        except httpx.HTTPError as e:
            logger.error(f"Order RPC transport error for buyer {buyer}: {type(e).__name__}")
            raise RemoteOrderError(OrderFailureReason.SERVER_ERROR, ERROR_ORDER_FAILED) from e

        order_id = _extract_order_id(data)
        if not order_id:
            logger.error(f"Order RPC returned no order id for buyer {buyer}")
            raise RemoteOrderError(OrderFailureReason.SERVER_ERROR, ERROR_NO_ORDER_ID)

        logger.info(f"Order {sanitize_id_for_logging(order_id)} created for buyer {buyer}")
        return order_id


class CafeteriaOrderGateway(OrderGateway):
    """Creates cafeteria orders via ``create_student_order``."""

    def __init__(self, order_repo: OrderRepository, tax_repo: TaxRepository):
        self.order_repo = order_repo
        self.tax_repo = tax_repo

    async def _tax_rate(self, cart: "Cart") -> Decimal:
        """Active tax rate (percent) of the vendor owning the first item's counter."""
        first = next(iter(cart), None)
        if first is None:
            return Decimal("0")

        item = first.item
        try:
            vendor_id = getattr(item, "vendor_id", None)
            counter_id = getattr(item, "counter_id", None)
            if not vendor_id and counter_id:
                vendor_id = await self.tax_repo.get_vendor_for_counter(counter_id)
            if not vendor_id:
                logger.warning(f"No vendor for menu item {sanitize_id_for_logging(item.id)}, tax set to 0")
                return Decimal("0")
            rate = await self.tax_repo.get_active_rate(vendor_id)
        except (APIError, httpx.HTTPError) as e:
            logger.warning(f"Tax rate lookup failed, tax set to 0: {type(e).__name__}")
            return Decimal("0")

        return rate if rate is not None else Decimal("0")

    async def quote(self, cart: "Cart") -> OrderTotals:
        subtotal = cart.total()
        rate = await self._tax_rate(cart)
        tax = round_money(percent(subtotal, rate))
        return OrderTotals(subtotal=subtotal, tax=tax, total=round_money(subtotal + tax))

    async def create_order(self, request: OrderRequest) -> str:
        fulfilment = request.fulfilment
        if not isinstance(fulfilment, PickupInfo):
            raise TypeError("Cafeteria orders need PickupInfo")

        params = {
            "p_student_user_id": request.buyer_id,
            "p_items": [
                {
                    "menu_item_id": line.item_id,
                    "quantity": line.quantity,
                    "special_instructions": line.notes,
                }
                for line in request.lines
            ],
            "p_pickup_time": fulfilment.pickup_time.isoformat(),
            "p_subtotal": to_float(request.subtotal),
            "p_tax": to_float(request.tax),
            "p_total_price": to_float(request.total),
        }
        return await self._call(self.order_repo.create_student_order, params, request)


class MarketplaceOrderGateway(OrderGateway):
    """Creates marketplace orders via ``create_marketplace_order``."""

    single_origin = True

    def __init__(self, order_repo: OrderRepository):
        self.order_repo = order_repo

    async def create_order(self, request: OrderRequest) -> str:
        fulfilment = request.fulfilment
        if not isinstance(fulfilment, DeliveryInfo):
            raise TypeError("Marketplace orders need DeliveryInfo")

        address = fulfilment.shipping_address
        params = {
            "p_student_user_id": request.buyer_id,
            "p_storefront_id": request.origin_id,
            "p_items": [
                {
                    "product_id": line.item_id,
                    "quantity": line.quantity,
                    "selected_attributes": line.attributes or {},
                }
                for line in request.lines
            ],
            "p_total_order_price": to_float(request.total),
            "p_shipping_address": {
                "addressLine1": address.address_line1,
                "addressLine2": address.address_line2,
                "city": address.city,
                "state": address.state,
                "zipCode": address.zip_code,
                "country": address.country,
            },
            "p_student_notes": fulfilment.notes,
        }
        return await self._call(self.order_repo.create_marketplace_order, params, request)
