"""
Cafeteria Router

Menu browsing, the persisted cafeteria cart, pickup checkout, and order
history with the pickup countdown.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from unigo.auth import AuthContext, get_auth_context, require_auth_context
from unigo.cart.checkout import CheckoutStatus
from unigo.cart.session import CartSession
from unigo.errors import ERROR_ITEM_UNAVAILABLE, ValidationError
from unigo.logging import get_logger, sanitize_id_for_logging
from unigo.services.database import Database
from unigo.services.domains.catalog import CatalogService
from unigo.services.domains.pickup import format_time_left, pickup_time_left
from unigo.services.models import PickupInfo
from unigo.services.money import to_float

from .deps import get_cart_session, get_catalog, get_db
from .models import AddCafeteriaItemRequest, CafeteriaCheckoutRequest, UpdateCartItemRequest
from .responses import format_cart_response, format_checkout_response

logger = get_logger(__name__)

router = APIRouter(prefix="/cafeteria", tags=["cafeteria"])


@router.get("/menu")
async def list_menu(
    category: Optional[str] = None,
    search: Optional[str] = None,
    catalog: CatalogService = Depends(get_catalog),
):
    """Available menu items, optionally filtered by category and text."""
    items = await catalog.list_menu(category=category, search=search)
    return {
        "items": [
            {**item.model_dump(mode="json"), "effective_price": to_float(item.effective_price)}
            for item in items
        ],
        "count": len(items),
    }


# ==================== CART ====================

@router.get("/cart")
async def get_cart(session: CartSession = Depends(get_cart_session)):
    return format_cart_response(session.cafeteria)


@router.delete("/cart")
async def clear_cart(session: CartSession = Depends(get_cart_session)):
    session.cafeteria.clear()
    await session.persist()
    return format_cart_response(session.cafeteria)


@router.post("/cart/items")
async def add_cart_item(
    body: AddCafeteriaItemRequest,
    session: CartSession = Depends(get_cart_session),
    catalog: CatalogService = Depends(get_catalog),
):
    item = await catalog.get_menu_item(body.item_id)
    if not item.available:
        raise ValidationError(ERROR_ITEM_UNAVAILABLE, fields=["item_id"])

    line = session.cafeteria.add_item(item, body.quantity, notes=body.notes)
    await session.persist()
    return format_cart_response(session.cafeteria, [line.stock_warning()])


@router.patch("/cart/items/{item_id}")
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    session: CartSession = Depends(get_cart_session),
    catalog: CatalogService = Depends(get_catalog),
):
    """Set a line's quantity against fresh stock; 0 or less removes it."""
    latest = None
    if body.quantity > 0 and session.cafeteria.cart.get(item_id) is not None:
        latest = await catalog.get_menu_item(item_id)

    warning = session.cafeteria.update_item_quantity(item_id, body.quantity, latest_item=latest)
    await session.persist()
    return format_cart_response(session.cafeteria, [warning])


@router.delete("/cart/items/{item_id}")
async def remove_cart_item(item_id: str, session: CartSession = Depends(get_cart_session)):
    session.cafeteria.remove_item(item_id)
    await session.persist()
    return format_cart_response(session.cafeteria)


# ==================== CHECKOUT ====================

@router.post("/checkout")
async def checkout(
    body: CafeteriaCheckoutRequest,
    session: CartSession = Depends(get_cart_session),
    auth: AuthContext = Depends(get_auth_context),
):
    """
    Place the cafeteria order.

    Pickup is ``pickup_time`` when given, else scheduled from ``order_type``
    ("instant" or "later").
    """
    if body.pickup_time is not None:
        fulfilment = PickupInfo(pickup_time=body.pickup_time)
    elif body.order_type is not None:
        fulfilment = PickupInfo.for_order_type(body.order_type)
    else:
        fulfilment = PickupInfo()

    submission = session.cafeteria_checkout
    result = await submission.submit(auth, fulfilment)

    if result.status == CheckoutStatus.IGNORED:
        return JSONResponse(status_code=409, content=format_checkout_response(result, submission))
    result.raise_for_error()

    await session.persist()
    logger.info(
        f"Cafeteria order {sanitize_id_for_logging(result.order_id)} placed "
        f"for session {sanitize_id_for_logging(session.session_id)}"
    )
    return format_checkout_response(result, submission)


# ==================== ORDER HISTORY ====================

@router.get("/orders")
async def list_orders(
    auth: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
):
    """Signed-in student's cafeteria orders, newest first."""
    orders = await db.get_cafeteria_orders(auth.user.id)

    result = []
    for order in orders:
        data = order.model_dump(mode="json")
        seconds = pickup_time_left(order.ready_at, order.status)
        data["pickup_seconds_left"] = seconds
        data["pickup_time_left"] = format_time_left(seconds) if seconds is not None else None
        result.append(data)
    return {"orders": result, "count": len(result)}
