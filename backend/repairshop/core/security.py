"""
# `repairshop/core/security.py` — Rol Bazlı Yetkilendirme

Bu modül, kimliği doğrulanmış bir `Principal` için **rol bazlı yetkilendirme** kararını verir.

## Kurallar
- `required_roles` boşsa her zaman izin verilir.
- Aksi halde principal'ın rollerinden **herhangi biri** `required_roles` içinde ise izin verilir (OR, AND değil).
- Red durumunda `ForbiddenError` (403) fırlatılır; sessizce geçilmez.
- Kimlik doğrulama (401) bu kapıdan önce `get_principal` tarafından yapılır.

## Kullanım
```python
admin_router = APIRouter(prefix="/carts", dependencies=[Depends(require_admin)])

@router.get("/cart")
def read_cart(principal: Principal = Depends(require_shopper)): ...
```
"""
import enum
import logging
from typing import Callable, Iterable

from fastapi import Depends

from repairshop.core.auth import get_principal
from repairshop.core.errors import ForbiddenError
from repairshop.schemas.principal import ADMIN, SHOPPER_ROLES, Principal

logger = logging.getLogger("repair.security")


class Decision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


def decide(principal: Principal, required_roles: Iterable[str]) -> Decision:
    """Pure allow/deny decision, no side effects."""
    required = frozenset(required_roles)
    if not required:
        return Decision.ALLOW
    return Decision.ALLOW if principal.roles & required else Decision.DENY


def authorize(principal: Principal, required_roles: Iterable[str]) -> Decision:
    """Return ALLOW or raise ForbiddenError."""
    required = frozenset(required_roles)
    if decide(principal, required) is Decision.DENY:
        logger.info("Denied uid=%s roles=%s required=%s", principal.uid, sorted(principal.roles), sorted(required))
        raise ForbiddenError()
    return Decision.ALLOW


def require_roles(*roles: str) -> Callable[..., Principal]:
    """
    FastAPI dependency factory: principal'ı çözer, sonra rol kapısını çalıştırır.
    """
    required = frozenset(roles)

    async def _dependency(principal: Principal = Depends(get_principal)) -> Principal:
        authorize(principal, required)
        return principal

    return _dependency


require_admin = require_roles(ADMIN)
require_shopper = require_roles(*SHOPPER_ROLES)
