"""
repairshop/schemas/principal.py
Roller ve Principal modeli.
"""
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field

GUEST = "guest"
USER = "user"
CUSTOMER = "customer"
TECHNICIAN = "technician"
ADMIN = "admin"

KNOWN_ROLES = frozenset({GUEST, USER, CUSTOMER, TECHNICIAN, ADMIN})

# Roles allowed to own a cart or wishlist
SHOPPER_ROLES = frozenset({USER, CUSTOMER, TECHNICIAN, ADMIN})


class Principal(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., description="Firebase UID")
    roles: FrozenSet[str] = Field(default_factory=frozenset, description="guest | user | customer | technician | admin")
    email: Optional[str] = Field(None, description="E-posta (varsa)")
    display_name: Optional[str] = Field(None, description="Görünen ad (varsa)")
