"""Cart controller: input validation, totals, and order placement."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, Type

from unigo.auth.context import AuthContext
from unigo.errors import (
    ERROR_ADDRESS_INCOMPLETE,
    ERROR_ITEM_ID_REQUIRED,
    ERROR_ITEM_REQUIRED,
    ERROR_MIXED_STOREFRONTS,
    ERROR_PICKUP_TIME_REQUIRED,
    ERROR_QUANTITY_NOT_INTEGER,
    ERROR_QUANTITY_NOT_POSITIVE,
    CheckoutInProgressError,
    EmptyCartError,
    ValidationError,
)
from unigo.logging import get_logger, sanitize_id_for_logging
from unigo.services.domains.orders import OrderGateway
from unigo.services.models import (
    DeliveryInfo,
    Fulfilment,
    OrderLine,
    OrderRequest,
    OrderTotals,
    PickupInfo,
)

from .models import Cart, CartLineItem, ItemT, StockWarning

logger = get_logger(__name__)

_MISSING_FIELDS_MESSAGES = {
    PickupInfo: ERROR_PICKUP_TIME_REQUIRED,
    DeliveryInfo: ERROR_ADDRESS_INCOMPLETE,
}


def _require_int(value: Any) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(ERROR_QUANTITY_NOT_INTEGER, fields=["quantity"])
    return value


class CartController(Generic[ItemT]):
    """
    Front door to one session's cart.

    Validates UI input before it reaches the store (raising ValidationError,
    never CartStoreError) and forwards checkout to the order gateway.
    """

    def __init__(
        self,
        cart: Cart[ItemT],
        gateway: OrderGateway,
        fulfilment_type: Type[Fulfilment],
    ):
        self.cart = cart
        self.gateway = gateway
        self.fulfilment_type = fulfilment_type
        # True while place_order awaits the gateway
        self.placing = False

    def _ensure_editable(self) -> None:
        if self.placing:
            raise CheckoutInProgressError()

    # ==================== CART EDITS ====================

    def add_item(
        self,
        item: Optional[ItemT],
        quantity: Any = 1,
        notes: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> CartLineItem[ItemT]:
        """
        Add ``quantity`` of ``item``.

        Never clamps; use ``line.stock_warning()`` on the returned line to
        tell the user the quantity exceeds known stock.
        """
        self._ensure_editable()
        if item is None:
            raise ValidationError(ERROR_ITEM_REQUIRED, fields=["item"])
        quantity = _require_int(quantity)
        if quantity < 1:
            raise ValidationError(ERROR_QUANTITY_NOT_POSITIVE, fields=["quantity"])

        return self.cart.add(item, quantity, notes=notes, attributes=attributes)

    def remove_item(self, item_id: Optional[str]) -> None:
        self._ensure_editable()
        if not item_id:
            raise ValidationError(ERROR_ITEM_ID_REQUIRED, fields=["item_id"])
        self.cart.remove(item_id)

    def update_item_quantity(
        self,
        item_id: Optional[str],
        quantity: Any,
        latest_item: Optional[ItemT] = None,
    ) -> Optional[StockWarning]:
        """
        Set a line's quantity; zero or less removes the line.

        ``latest_item`` is a fresh catalog snapshot used for the stock check.
        """
        self._ensure_editable()
        if not item_id:
            raise ValidationError(ERROR_ITEM_ID_REQUIRED, fields=["item_id"])
        quantity = _require_int(quantity)

        if latest_item is not None:
            self.cart.refresh_item(latest_item)
        return self.cart.update_quantity(item_id, quantity)

    def clear(self) -> None:
        self._ensure_editable()
        self.cart.clear()

    # ==================== TOTALS ====================

    def total(self) -> Decimal:
        return self.cart.total()

    def item_count(self) -> int:
        return self.cart.item_count()

    @property
    def lines(self) -> List[CartLineItem[ItemT]]:
        return list(self.cart)

    # ==================== CHECKOUT ====================

    def resolve_origin(self, cart: Optional[Cart[ItemT]] = None) -> Optional[str]:
        """
        Vendor/storefront the order goes to: the first line's origin.

        Gateways with ``single_origin`` reject carts spanning several origins.
        """
        cart = self.cart if cart is None else cart
        origins = [line.item.origin_id for line in cart]
        if not origins:
            return None
        if self.gateway.single_origin and len(set(origins)) > 1:
            raise ValidationError(ERROR_MIXED_STOREFRONTS, fields=["items"])
        return origins[0]

    def build_order_request(
        self,
        buyer_id: str,
        totals: OrderTotals,
        fulfilment: Fulfilment,
        origin_id: Optional[str] = None,
        now: Optional[datetime] = None,
        cart: Optional[Cart[ItemT]] = None,
    ) -> OrderRequest:
        """Snapshot ``cart`` (default: this controller's cart) into an immutable OrderRequest."""
        cart = self.cart if cart is None else cart
        lines = [
            OrderLine(
                item_id=line.item_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                notes=line.notes,
                attributes=line.attributes,
            )
            for line in cart
        ]
        return OrderRequest(
            buyer_id=buyer_id,
            origin_id=origin_id,
            lines=lines,
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            fulfilment=fulfilment,
            created_at=now or datetime.now(timezone.utc),
        )

    async def place_order(self, auth: AuthContext, fulfilment: Fulfilment) -> str:
        """
        Submit the cart as an order and return the new order id.

        Preconditions are checked in order (signed-in user, non-empty cart,
        complete fulfilment details, single origin) before any network call.
        The quote and the request are built from one snapshot taken before
        the first await, and cart edits raise CheckoutInProgressError until
        the gateway settles. Only the ordered quantities leave the cart, and
        only after the gateway returns an order id; any gateway error
        propagates with the cart untouched.
        """
        self._ensure_editable()
        user = auth.require_user()

        if self.cart.is_empty:
            raise EmptyCartError()

        if not isinstance(fulfilment, self.fulfilment_type):
            raise TypeError(
                f"Expected {self.fulfilment_type.__name__}, got {type(fulfilment).__name__}"
            )
        missing = fulfilment.missing_fields()
        if missing:
            raise ValidationError(
                _MISSING_FIELDS_MESSAGES.get(self.fulfilment_type, ERROR_ADDRESS_INCOMPLETE),
                fields=missing,
            )

        ordered = self.cart.snapshot()
        origin_id = self.resolve_origin(ordered)

        self.placing = True
        try:
            totals = await self.gateway.quote(ordered)
            request = self.build_order_request(
                user.id, totals, fulfilment, origin_id=origin_id, cart=ordered
            )
            order_id = await self.gateway.create_order(request)
        finally:
            self.placing = False

        logger.info(
            f"Order {sanitize_id_for_logging(order_id)} placed with "
            f"{len(request.lines)} line(s), removing them from cart"
        )
        self.cart.discard(ordered)
        return order_id
