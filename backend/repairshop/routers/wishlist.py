"""
repairshop/routers/wishlist.py
Wishlist endpoints (signed-in, non-guest users). A product can be saved once.
"""
from fastapi import APIRouter, Depends, status

from repairshop.core.security import require_shopper
from repairshop.deps import get_wishlist_service
from repairshop.schemas.principal import Principal
from repairshop.schemas.wishlist import AddWishlistBody, WishlistDocument
from repairshop.services.wishlist import WishlistService

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])


def _wishlist_out(doc: WishlistDocument) -> dict:
    data = doc.model_dump(mode="json")
    return {"success": True, "count": len(doc.items), "wishlist": data}


@router.get("")
@router.get("/", include_in_schema=False)
def get_wishlist(principal: Principal = Depends(require_shopper),
                 service: WishlistService = Depends(get_wishlist_service)):
    return _wishlist_out(service.get_wishlist(principal.uid))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_to_wishlist(payload: AddWishlistBody,
                    principal: Principal = Depends(require_shopper),
                    service: WishlistService = Depends(get_wishlist_service)):
    doc = service.add_item(principal.uid, payload.product_id)
    return {**_wishlist_out(doc), "message": "Product added to wishlist"}


@router.delete("/{product_id}")
def remove_from_wishlist(product_id: str,
                         principal: Principal = Depends(require_shopper),
                         service: WishlistService = Depends(get_wishlist_service)):
    doc = service.remove_item(principal.uid, product_id)
    return {**_wishlist_out(doc), "message": "Product removed from wishlist"}


@router.delete("")
def clear_wishlist(principal: Principal = Depends(require_shopper),
                   service: WishlistService = Depends(get_wishlist_service)):
    doc = service.clear(principal.uid)
    return {**_wishlist_out(doc), "message": "Wishlist cleared"}
