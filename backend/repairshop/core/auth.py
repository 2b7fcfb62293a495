# repairshop/core/auth.py
import logging
from typing import Optional

from fastapi import Request
from firebase_admin import auth as fb_auth

from repairshop.config import get_firebase_app, settings
from repairshop.core.errors import UnauthenticatedError
from repairshop.schemas.principal import ADMIN, GUEST, KNOWN_ROLES, USER, Principal

logger = logging.getLogger("repair.auth")

MOCK_TOKEN_PREFIX = "mock_jwt_token_"


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Authorization: Bearer <id_token> başlığından token'ı alır.
    Yoksa None döner.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_id_token(id_token: str) -> dict:
    """
    Firebase ID token doğrulaması.
    Mock token'ları da geçerli kabul eder (sadece ALLOW_MOCK_TOKENS açıkken).
    Geçersiz/iptal/expired durumda UnauthenticatedError fırlatır.
    """
    if id_token.startswith(MOCK_TOKEN_PREFIX):
        if not settings.allow_mock_tokens:
            raise UnauthenticatedError("Mock tokens are disabled")
        return _decode_mock_token(id_token)

    firebase_app = get_firebase_app()
    try:
        return fb_auth.verify_id_token(id_token, app=firebase_app, check_revoked=True)
    except fb_auth.ExpiredIdTokenError:
        raise UnauthenticatedError("Token expired")
    except fb_auth.RevokedIdTokenError:
        raise UnauthenticatedError("Session revoked")
    except fb_auth.UserDisabledError:
        raise UnauthenticatedError("User disabled")
    except (ValueError, fb_auth.InvalidIdTokenError, fb_auth.CertificateFetchError) as exc:
        logger.debug("ID token rejected: %s", exc)
        raise UnauthenticatedError("Invalid authentication token")


def _decode_mock_token(mock_token: str) -> dict:
    """
    Mock token'ı decode eder.
    Format: mock_jwt_token_<uid>
      - uid içinde 'anonymous' geçerse → misafir (anonymous provider)
      - uid 'admin_' ile başlarsa → admin claim
    """
    uid = mock_token[len(MOCK_TOKEN_PREFIX):]
    if not uid:
        raise UnauthenticatedError("Invalid mock token format")

    return {
        "uid": uid,
        "email": None,
        "name": None,
        "firebase": {
            "sign_in_provider": "anonymous" if "anonymous" in uid else "password"
        },
        "admin": uid.startswith("admin_"),
    }


def _token_to_principal(decoded: dict) -> Principal:
    """
    Token'dan Principal üretir.
    - anonymous provider → {'guest'}
    - diğerleri → {'user'} + custom claim 'roles' içindeki bilinen roller
    - custom claim admin=True → ayrıca 'admin'
    """
    uid = decoded.get("uid") or decoded.get("user_id")
    if not uid:
        raise UnauthenticatedError("Token missing uid.")

    provider = (decoded.get("firebase") or {}).get("sign_in_provider")
    if provider == "anonymous":
        roles = {GUEST}
    else:
        claimed = decoded.get("roles") or []
        if isinstance(claimed, str):
            claimed = [claimed]
        roles = {USER} | {r for r in claimed if r in KNOWN_ROLES and r != GUEST}
        if decoded.get("admin") is True:
            roles.add(ADMIN)

    return Principal(
        uid=uid,
        roles=frozenset(roles),
        email=decoded.get("email"),
        display_name=decoded.get("name"),
    )


# --------- FastAPI Dependencies --------- #

async def get_principal(request: Request) -> Principal:
    """
    Token zorunlu: doğrular ve Principal döner.
    (guest/user/admin hepsi olabilir)
    """
    token = _extract_bearer_token(request)
    if not token:
        raise UnauthenticatedError("Missing Authorization header.")
    return _token_to_principal(_decode_id_token(token))
