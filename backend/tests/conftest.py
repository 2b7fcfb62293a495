"""
Shared fixtures: in-memory catalog/stores wired into the FastAPI app through
dependency overrides, and mock bearer tokens for principals.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from repairshop.config import settings
from repairshop.deps import get_cart_engine, get_wishlist_service
from repairshop.main import app
from repairshop.repositories.catalog import InMemoryCatalog
from repairshop.repositories.documents import InMemoryDocumentStore
from repairshop.schemas.cart import CartDocument
from repairshop.schemas.product import ProductSnapshot
from repairshop.schemas.wishlist import WishlistDocument
from repairshop.services.cart_engine import CartEngine
from repairshop.services.wishlist import WishlistService

PRODUCTS = [
    ProductSnapshot(id="7", name="iPhone 13 Ekran", price=Decimal("1899.90"), image="https://cdn.example.com/p7.jpg"),
    ProductSnapshot(id="12", name="Samsung A52 Batarya", price=Decimal("450.00"), image=None),
    ProductSnapshot(id="31", name="USB-C Şarj Soketi", price=Decimal("120.50"), image="https://cdn.example.com/p31.jpg"),
]


def _bearer(uid: str) -> dict:
    """Authorization header for a mock token; 'admin_' prefix → admin, 'anonymous' → guest."""
    return {"Authorization": f"Bearer mock_jwt_token_{uid}"}


@pytest.fixture
def bearer():
    return _bearer


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog(PRODUCTS)


@pytest.fixture
def cart_engine(catalog) -> CartEngine:
    return CartEngine(InMemoryDocumentStore(CartDocument), catalog)


@pytest.fixture
def wishlist_service(catalog) -> WishlistService:
    return WishlistService(InMemoryDocumentStore(WishlistDocument), catalog)


@pytest.fixture
def mock_tokens(monkeypatch):
    monkeypatch.setattr(settings, "allow_mock_tokens", True)


@pytest.fixture
def test_client(cart_engine, wishlist_service, mock_tokens):
    app.dependency_overrides[get_cart_engine] = lambda: cart_engine
    app.dependency_overrides[get_wishlist_service] = lambda: wishlist_service
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
