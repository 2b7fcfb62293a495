"""
repairshop/services/wishlist.py
İstek listesi: kullanıcı başına tek doküman, her ürün en fazla bir kez.
Locking and compare-and-swap work the same way as the cart engine.
"""
import logging
from typing import Callable, Optional

from repairshop.core.errors import NotFoundError, ValidationError
from repairshop.repositories.catalog import Catalog
from repairshop.repositories.documents import DocumentStore
from repairshop.schemas.wishlist import WishlistDocument, WishlistItem
from repairshop.services.locks import OwnerLocks

logger = logging.getLogger("repair.wishlist")


class WishlistService:
    def __init__(self, store: DocumentStore[WishlistDocument], catalog: Catalog, locks: Optional[OwnerLocks] = None):
        self.store = store
        self.catalog = catalog
        self.locks = locks or OwnerLocks()

    def get_wishlist(self, owner_id: str) -> WishlistDocument:
        doc = self.store.load(owner_id)
        return doc if doc is not None else WishlistDocument(owner_id=owner_id)

    def _mutate(self, owner_id: str, change: Callable[[WishlistDocument], None]) -> WishlistDocument:
        with self.locks.hold(owner_id):
            current = self.get_wishlist(owner_id)
            working = current.model_copy(deep=True)
            change(working)
            return self.store.save(working, expected_version=current.version)

    def add_item(self, owner_id: str, product_id: str) -> WishlistDocument:
        product = self.catalog.find_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        def change(doc: WishlistDocument) -> None:
            if doc.find(product_id) is not None:
                raise ValidationError("Product already in wishlist")
            doc.items.append(WishlistItem(
                product_id=product_id,
                name_snapshot=product.name,
                price_snapshot=product.price,
                image_snapshot=product.image,
            ))

        doc = self._mutate(owner_id, change)
        logger.info("Wishlist %s: added %s", owner_id, product_id)
        return doc

    def remove_item(self, owner_id: str, product_id: str) -> WishlistDocument:
        def change(doc: WishlistDocument) -> None:
            before = len(doc.items)
            doc.items = [it for it in doc.items if it.product_id != product_id]
            if len(doc.items) == before:
                raise NotFoundError("Product not found in wishlist")

        doc = self._mutate(owner_id, change)
        logger.info("Wishlist %s: removed %s", owner_id, product_id)
        return doc

    def clear(self, owner_id: str) -> WishlistDocument:
        def change(doc: WishlistDocument) -> None:
            doc.items = []

        doc = self._mutate(owner_id, change)
        logger.info("Wishlist %s cleared", owner_id)
        return doc
