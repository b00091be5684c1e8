"""
Marketplace Router

Product browsing, the session-only marketplace cart, delivery checkout, and
order history.
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
from unigo.services.models import DeliveryInfo
from unigo.services.money import to_float

from .deps import get_cart_session, get_catalog, get_db
from .models import AddMarketplaceItemRequest, MarketplaceCheckoutRequest, UpdateCartItemRequest
from .responses import format_cart_response, format_checkout_response

logger = get_logger(__name__)

router = APIRouter(prefix="/marketplace", tags=["marketplace"])


@router.get("/products")
async def list_products(
    storefront_id: Optional[str] = None,
    catalog: CatalogService = Depends(get_catalog),
):
    products = await catalog.list_products(storefront_id)
    return {
        "products": [
            {**product.model_dump(mode="json"), "effective_price": to_float(product.effective_price)}
            for product in products
        ],
        "count": len(products),
    }


# ==================== CART ====================

@router.get("/cart")
async def get_cart(session: CartSession = Depends(get_cart_session)):
    return format_cart_response(session.marketplace)


@router.delete("/cart")
async def clear_cart(session: CartSession = Depends(get_cart_session)):
    session.marketplace.clear()
    return format_cart_response(session.marketplace)


@router.post("/cart/items")
async def add_cart_item(
    body: AddMarketplaceItemRequest,
    session: CartSession = Depends(get_cart_session),
    catalog: CatalogService = Depends(get_catalog),
):
    product = await catalog.get_product(body.product_id)
    if not product.is_available:
        raise ValidationError(ERROR_ITEM_UNAVAILABLE, fields=["product_id"])

    line = session.marketplace.add_item(product, body.quantity, attributes=body.attributes)
    return format_cart_response(session.marketplace, [line.stock_warning()])


@router.patch("/cart/items/{item_id}")
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    session: CartSession = Depends(get_cart_session),
    catalog: CatalogService = Depends(get_catalog),
):
    latest = None
    if body.quantity > 0 and session.marketplace.cart.get(item_id) is not None:
        latest = await catalog.get_product(item_id)

    warning = session.marketplace.update_item_quantity(item_id, body.quantity, latest_item=latest)
    return format_cart_response(session.marketplace, [warning])


@router.delete("/cart/items/{item_id}")
async def remove_cart_item(item_id: str, session: CartSession = Depends(get_cart_session)):
    session.marketplace.remove_item(item_id)
    return format_cart_response(session.marketplace)


# ==================== CHECKOUT ====================

@router.post("/checkout")
async def checkout(
    body: MarketplaceCheckoutRequest,
    session: CartSession = Depends(get_cart_session),
    auth: AuthContext = Depends(get_auth_context),
):
    """Place the marketplace order for the cart's storefront."""
    fulfilment = DeliveryInfo(shipping_address=body.shipping_address, notes=body.notes)

    submission = session.marketplace_checkout
    result = await submission.submit(auth, fulfilment)

    if result.status == CheckoutStatus.IGNORED:
        return JSONResponse(status_code=409, content=format_checkout_response(result, submission))
    result.raise_for_error()

    logger.info(
        f"Marketplace order {sanitize_id_for_logging(result.order_id)} placed "
        f"for session {sanitize_id_for_logging(session.session_id)}"
    )
    return format_checkout_response(result, submission)


# ==================== ORDER HISTORY ====================

@router.get("/orders")
async def list_orders(
    auth: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
):
    orders = await db.get_marketplace_orders(auth.user.id)
    return {"orders": [order.model_dump(mode="json") for order in orders], "count": len(orders)}
