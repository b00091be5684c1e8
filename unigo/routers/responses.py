"""Response builders shared by the cart routers."""
from typing import List, Optional

from unigo.cart.checkout import CheckoutResult, CheckoutSubmission
from unigo.cart.models import StockWarning
from unigo.cart.service import CartController
from unigo.services.money import format_money, to_float


def format_cart_response(
    controller: CartController,
    warnings: Optional[List[StockWarning]] = None,
) -> dict:
    """
    Cart snapshot for the client.

    Amounts are floats for calculations plus ``*_display`` strings for the UI.
    """
    items = []
    for line in controller.lines:
        items.append({
            "item_id": line.item_id,
            "name": line.item.name,
            "quantity": line.quantity,
            "unit_price": to_float(line.unit_price),
            "list_price": to_float(line.item.price),
            "line_total": to_float(line.line_total),
            "line_total_display": format_money(line.line_total),
            "stock": line.item.stock,
            "notes": line.notes,
            "attributes": line.attributes,
            "added_at": line.added_at,
        })

    total = controller.total()
    return {
        "items": items,
        "total": to_float(total),
        "total_display": format_money(total),
        "item_count": controller.item_count(),
        "warnings": [w.to_dict() for w in warnings or [] if w is not None],
        "created_at": controller.cart.created_at,
        "updated_at": controller.cart.updated_at,
    }


def format_checkout_response(result: CheckoutResult, submission: CheckoutSubmission) -> dict:
    data = result.to_dict()
    data["state"] = submission.state.value
    return data
