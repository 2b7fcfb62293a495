"""
repairshop/services/cart_engine.py
Sepet motoru: kullanıcı başına tek sepet dokümanı.

Behavior
- Lines are identified by (product_id, variant); variant None is not the same as "".
- add merges quantity into an existing line and keeps its snapshots; a new line copies
  name/price/image from the catalog at that moment and is appended at the end.
- update rejects quantity < 1 (removal is a separate call); update/remove of a missing
  line raise NotFoundError and leave the cart as it was.
- clear always succeeds and stores an empty cart.

Concurrency
- Every mutation runs load → modify → save while holding the owner's lock, so two
  concurrent adds in this process both land.
- save is a compare-and-swap on `version`; losing it (another process wrote first)
  raises ConflictError to the caller, no internal retry.
- Changes are made on a copy; the stored cart only changes when save succeeds.
"""
import logging
from decimal import Decimal
from typing import Callable, Optional

from repairshop.core.errors import NotFoundError, ValidationError
from repairshop.repositories.catalog import Catalog
from repairshop.repositories.documents import DocumentStore
from repairshop.schemas.cart import CartDocument, CartTotals, LineItem
from repairshop.services.locks import OwnerLocks

logger = logging.getLogger("repair.cart")


def _check_quantity(quantity, field: str = "quantity") -> int:
    # bool is an int subclass; True must not count as 1
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"{field} must be an integer")
    if quantity < 1:
        raise ValidationError(f"{field} must be at least 1")
    return quantity


def _check_product_id(product_id) -> str:
    if not isinstance(product_id, str) or not product_id.strip():
        raise ValidationError("product_id is required")
    return product_id


class CartEngine:
    def __init__(self, store: DocumentStore[CartDocument], catalog: Catalog, locks: Optional[OwnerLocks] = None):
        self.store = store
        self.catalog = catalog
        self.locks = locks or OwnerLocks()

    # ---------- reads ----------
    def get_cart(self, owner_id: str) -> CartDocument:
        """Stored cart, or a fresh empty one (not persisted)."""
        cart = self.store.load(owner_id)
        return cart if cart is not None else CartDocument(owner_id=owner_id)

    def cart_totals(self, owner_id: str) -> CartTotals:
        cart = self.get_cart(owner_id)
        total_price = sum((it.unit_price_snapshot * it.quantity for it in cart.items), Decimal("0"))
        return CartTotals(
            owner_id=owner_id,
            total_quantity=sum(it.quantity for it in cart.items),
            total_price=total_price,
        )

    # ---------- mutations ----------
    def _mutate(self, owner_id: str, change: Callable[[CartDocument], None]) -> CartDocument:
        with self.locks.hold(owner_id):
            current = self.get_cart(owner_id)
            working = current.model_copy(deep=True)
            change(working)
            # re-run item validators on the result before it is stored
            working = CartDocument.model_validate(working.model_dump())
            return self.store.save(working, expected_version=current.version)

    def add_item(self, owner_id: str, product_id: str, quantity: int, variant: Optional[str] = None) -> CartDocument:
        _check_product_id(product_id)
        _check_quantity(quantity)
        product = self.catalog.find_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        def change(cart: CartDocument) -> None:
            line = cart.find(product_id, variant)
            if line is not None:
                line.quantity += quantity
                return
            cart.items.append(LineItem(
                product_id=product_id,
                variant=variant,
                quantity=quantity,
                unit_price_snapshot=product.price,
                name_snapshot=product.name,
                image_snapshot=product.image,
            ))

        cart = self._mutate(owner_id, change)
        logger.info("Cart %s: +%d x %s (variant=%r)", owner_id, quantity, product_id, variant)
        return cart

    def update_item_quantity(self, owner_id: str, product_id: str, new_quantity: int,
                             variant: Optional[str] = None) -> CartDocument:
        _check_quantity(new_quantity)

        def change(cart: CartDocument) -> None:
            line = cart.find(product_id, variant)
            if line is None:
                raise NotFoundError("Item not found in cart")
            line.quantity = new_quantity

        cart = self._mutate(owner_id, change)
        logger.info("Cart %s: %s (variant=%r) qty=%d", owner_id, product_id, variant, new_quantity)
        return cart

    def remove_item(self, owner_id: str, product_id: str, variant: Optional[str] = None) -> CartDocument:
        def change(cart: CartDocument) -> None:
            before = len(cart.items)
            cart.items = [it for it in cart.items if not it.matches(product_id, variant)]
            if len(cart.items) == before:
                raise NotFoundError("Item not found in cart")

        cart = self._mutate(owner_id, change)
        logger.info("Cart %s: removed %s (variant=%r)", owner_id, product_id, variant)
        return cart

    def clear_cart(self, owner_id: str) -> CartDocument:
        def change(cart: CartDocument) -> None:
            cart.items = []

        cart = self._mutate(owner_id, change)
        logger.info("Cart %s cleared", owner_id)
        return cart
