"""
repairshop/schemas/cart.py - Pydantic models for Cart.
"""
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

LineKey = Tuple[str, Optional[str]]


def _clean_product_id(v: str) -> str:
    v = (v or "").strip()
    for ch in ("\u200b", "\u200c", "\u200d", "\ufeff", "\xa0"):
        v = v.replace(ch, "")
    if not v:
        raise ValueError("product_id cannot be empty")
    return v


class LineItem(BaseModel):
    product_id: str = Field(..., description="ID of the product")
    variant: Optional[str] = Field(None, description="Variant discriminator (size/color); None is its own identity")
    quantity: int = Field(..., ge=1, description="Quantity of the product in the cart")
    unit_price_snapshot: Decimal = Field(..., ge=0, description="Price per unit at the time of adding to cart")
    name_snapshot: str = Field("", description="Product name at the time of adding to cart")
    image_snapshot: Optional[str] = Field(None, description="Product image at the time of adding to cart")

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant)

    def matches(self, product_id: str, variant: Optional[str]) -> bool:
        # None and "" are different variants
        return self.product_id == product_id and self.variant == variant


class CartDocument(BaseModel):
    owner_id: str = Field(..., description="ID of the user who owns this cart")
    items: List[LineItem] = Field(default_factory=list, description="List of cart items")
    version: int = Field(0, ge=0, description="Optimistic concurrency counter; 0 means never stored")

    @field_validator("items")
    @classmethod
    def _unique_keys(cls, items: List[LineItem]) -> List[LineItem]:
        seen = set()
        for it in items:
            if it.key in seen:
                raise ValueError(f"duplicate cart line {it.key!r}")
            seen.add(it.key)
        return items

    def find(self, product_id: str, variant: Optional[str]) -> Optional[LineItem]:
        for it in self.items:
            if it.matches(product_id, variant):
                return it
        return None


class CartTotals(BaseModel):
    owner_id: str
    total_quantity: int = 0
    total_price: Decimal = Decimal("0")


# ---------- request bodies ----------
class AddItemBody(BaseModel):
    """Add to cart by product ID."""
    product_id: str = Field(..., description="Product ID (the same 'id' you see in /products).")
    quantity: int = Field(1, strict=True, description="Quantity (>=1).")
    variant: Optional[str] = Field(None, description="Variant (size/color), optional.")

    @field_validator("product_id")
    @classmethod
    def _clean_pid(cls, v: str) -> str:
        return _clean_product_id(v)


class UpdateItemBody(BaseModel):
    quantity: int = Field(..., strict=True, description="New quantity (>=1). Use DELETE to remove a line.")
    variant: Optional[str] = Field(None, description="Variant of the line to update.")
