"""
repairshop/schemas/wishlist.py - Pydantic models for Wishlist.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from repairshop.schemas.cart import _clean_product_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WishlistItem(BaseModel):
    product_id: str
    name_snapshot: str = ""
    price_snapshot: Decimal = Field(..., ge=0)
    image_snapshot: Optional[str] = None
    added_at: datetime = Field(default_factory=_utcnow)


class WishlistDocument(BaseModel):
    owner_id: str
    items: List[WishlistItem] = Field(default_factory=list)
    version: int = Field(0, ge=0)

    @field_validator("items")
    @classmethod
    def _unique_products(cls, items: List[WishlistItem]) -> List[WishlistItem]:
        ids = [it.product_id for it in items]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate wishlist product")
        return items

    def find(self, product_id: str) -> Optional[WishlistItem]:
        return next((it for it in self.items if it.product_id == product_id), None)


class AddWishlistBody(BaseModel):
    product_id: str = Field(..., description="Product ID to save for later.")

    @field_validator("product_id")
    @classmethod
    def _clean_pid(cls, v: str) -> str:
        return _clean_product_id(v)
