"""
repairshop/deps.py
Engine providers for FastAPI `Depends(...)`. Built once per process; tests replace
them through `app.dependency_overrides`.
"""
import logging
from functools import lru_cache

from repairshop.config import get_db, settings
from repairshop.repositories.catalog import Catalog, FirestoreCatalog, InMemoryCatalog
from repairshop.repositories.documents import FirestoreDocumentStore, InMemoryDocumentStore
from repairshop.schemas.cart import CartDocument
from repairshop.schemas.wishlist import WishlistDocument
from repairshop.services.cart_engine import CartEngine
from repairshop.services.wishlist import WishlistService

logger = logging.getLogger("repair.deps")


def _use_memory() -> bool:
    return settings.storage_backend.strip().lower() == "memory"


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    if _use_memory():
        logger.warning("Using in-memory catalog; products must be registered in-process")
        return InMemoryCatalog()
    return FirestoreCatalog(get_db(), settings.collection("products"))


@lru_cache(maxsize=1)
def get_cart_engine() -> CartEngine:
    if _use_memory():
        store = InMemoryDocumentStore(CartDocument)
    else:
        store = FirestoreDocumentStore(get_db(), settings.collection("carts"), CartDocument)
    return CartEngine(store, get_catalog())


@lru_cache(maxsize=1)
def get_wishlist_service() -> WishlistService:
    if _use_memory():
        store = InMemoryDocumentStore(WishlistDocument)
    else:
        store = FirestoreDocumentStore(get_db(), settings.collection("wishlists"), WishlistDocument)
    return WishlistService(store, get_catalog())
