#!/usr/bin/env python3
"""
Firebase Admin SDK ile kullanıcıya rol custom claim'leri ekler.

Usage: python set_role_claims.py <user_email> <role> [<role> ...]
Example: python set_role_claims.py tech@example.com technician admin
"""
import sys
from typing import Iterable

from firebase_admin import auth

from repairshop.config import get_firebase_app
from repairshop.schemas.principal import ADMIN, GUEST, KNOWN_ROLES


def build_claims(roles: Iterable[str]) -> dict:
    """Custom claims read back by `_token_to_principal`: 'roles' list plus the legacy 'admin' flag."""
    wanted = sorted(set(roles))
    unknown = [r for r in wanted if r not in KNOWN_ROLES or r == GUEST]
    if unknown:
        raise ValueError(f"Unknown role(s): {', '.join(unknown)}")
    return {"roles": wanted, "admin": ADMIN in wanted}


def set_role_claims(user_email: str, roles: Iterable[str], app=None) -> dict:
    """Kullanıcıya rol claim'lerini yazar ve kaydedilen claim'leri döndürür."""
    claims = build_claims(roles)
    user = auth.get_user_by_email(user_email, app=app)
    auth.set_custom_user_claims(user.uid, claims, app=app)
    return auth.get_user(user.uid, app=app).custom_claims or {}


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python set_role_claims.py <user_email> <role> [<role> ...]")
        sys.exit(1)

    user_email, roles = sys.argv[1], sys.argv[2:]
    try:
        claims = set_role_claims(user_email, roles, app=get_firebase_app())
    except auth.UserNotFoundError:
        print(f"User not found: {user_email}")
        sys.exit(1)
    except ValueError as e:
        print(e)
        sys.exit(1)

    print(f"Custom claims for {user_email}: {claims}")
    print("The user will need to sign out and sign in again for the changes to take effect.")
