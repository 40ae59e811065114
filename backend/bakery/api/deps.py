from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException

from bakery.utils.security import decode_access_token


@dataclass
class CurrentUser:
    user_id: int
    role: str = "USER"

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[CurrentUser]:
    """Caller identity when a bearer token is present; None for guests."""
    token = _bearer(authorization)
    if token is None:
        return None
    try:
        claims = decode_access_token(token)
        return CurrentUser(user_id=int(claims["userId"]), role=claims.get("role", "USER"))
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token.")


def get_current_user(user: Optional[CurrentUser] = Depends(get_optional_user)) -> CurrentUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied.")
    return user
