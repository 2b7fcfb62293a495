"""
repairshop/schemas/product.py - Catalog lookup result.

A ProductSnapshot is an immutable copy of the fields a cart or wishlist line needs
at the moment the product was added. It is never kept in sync with the product record.
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _first_image(images: Any) -> Optional[str]:
    if isinstance(images, list) and images:
        val = images[0]
        return str(val) if val is not None else None
    return None


def _money_from_product(p: Dict[str, Any]) -> Decimal:
    # Prefer final_price if present; else price
    if p.get("final_price") is not None:
        return Decimal(str(p["final_price"]))
    return Decimal(str(p.get("price", 0) or 0))


class ProductSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    price: Decimal = Field(..., ge=0)
    image: Optional[str] = None

    @classmethod
    def from_record(cls, product_id: str, data: Dict[str, Any]) -> "ProductSnapshot":
        """Build a snapshot from a raw product document (title/name, final_price/price, images/image)."""
        return cls(
            id=product_id,
            name=str(data.get("title") or data.get("name") or ""),
            price=_money_from_product(data),
            image=_first_image(data.get("images")) or data.get("image"),
        )
