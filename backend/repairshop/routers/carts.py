"""
repairshop/routers/carts.py
Cart endpoints (signed-in, non-guest users): read, total, add, update quantity, remove one line, clear.
Admin: read any user's cart.

Behavior
- Lines are keyed by product_id + variant; adding an existing line adds to its quantity.
- Name/price/image are copied from the catalog when a line is first added and are not refreshed.
- Responses: {"success": true, "message"?, "cart": {...}}; errors: {"success": false, "message"}.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from repairshop.core.security import require_admin, require_shopper
from repairshop.deps import get_cart_engine
from repairshop.schemas.cart import AddItemBody, CartDocument, UpdateItemBody
from repairshop.schemas.principal import Principal
from repairshop.services.cart_engine import CartEngine

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_out(cart: CartDocument, message: Optional[str] = None) -> dict:
    body = {"success": True, "cart": cart.model_dump(mode="json")}
    if message:
        body["message"] = message
    return body


@router.get("")
@router.get("/", include_in_schema=False)
def get_cart(principal: Principal = Depends(require_shopper), engine: CartEngine = Depends(get_cart_engine)):
    """Return the current user's cart (empty if nothing was added yet)."""
    return _cart_out(engine.get_cart(principal.uid))


@router.get("/total")
def cart_total(principal: Principal = Depends(require_shopper), engine: CartEngine = Depends(get_cart_engine)):
    """Total quantity and price, computed from the prices captured when each line was added."""
    totals = engine.cart_totals(principal.uid)
    return {"success": True, **totals.model_dump(mode="json")}


@router.post("")
def add_to_cart(
    payload: AddItemBody,
    principal: Principal = Depends(require_shopper),
    engine: CartEngine = Depends(get_cart_engine),
):
    cart = engine.add_item(principal.uid, payload.product_id, payload.quantity, payload.variant)
    return _cart_out(cart, "Product added to cart")


@router.put("/{product_id}")
def update_cart_item(
    product_id: str,
    payload: UpdateItemBody,
    principal: Principal = Depends(require_shopper),
    engine: CartEngine = Depends(get_cart_engine),
):
    cart = engine.update_item_quantity(principal.uid, product_id, payload.quantity, payload.variant)
    return _cart_out(cart, "Cart updated")


@router.delete("/{product_id}")
def remove_cart_item(
    product_id: str,
    variant: Optional[str] = Query(None, description="Variant of the line to remove"),
    principal: Principal = Depends(require_shopper),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Remove one line; 404 if the cart has no such line."""
    cart = engine.remove_item(principal.uid, product_id, variant)
    return _cart_out(cart, "Item removed from cart")


@router.delete("")
def clear_cart(principal: Principal = Depends(require_shopper), engine: CartEngine = Depends(get_cart_engine)):
    """Clear the entire cart."""
    return _cart_out(engine.clear_cart(principal.uid), "Cart cleared")


# === Admin Router =============================================================
admin_router = APIRouter(prefix="/carts", tags=["Admin: Carts"], dependencies=[Depends(require_admin)])


@admin_router.get("/{owner_id}")
def get_user_cart(owner_id: str, engine: CartEngine = Depends(get_cart_engine)):
    """Admin endpoint – any user's cart (support requests)."""
    return _cart_out(engine.get_cart(owner_id))
