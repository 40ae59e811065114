from datetime import datetime, timedelta, timezone
from typing import Dict

import jwt

from bakery.config import settings

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24


def create_access_token(user_id: int, role: str = "USER", email: str = "") -> str:
    """Mint a token in the shape the auth service issues. Used by tests and local tooling."""
    payload = {
        "userId": user_id,
        "email": email,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict:
    """Raises jwt.InvalidTokenError for a bad or expired token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
