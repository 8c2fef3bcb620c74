"""
Access tokens.

Short-lived HS256 JWTs carrying the user's id (``sub``), email, name and
role. Issuer and audience are pinned from settings and checked on decode.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from core.models import User

from ..config import get_settings


def create_access_token(user: User, expires_minutes: int | None = None) -> str:
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.access_token_expire_minutes)
    claims = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry, issuer and audience and return the claims.

    Raises:
        ValueError: the token is malformed, expired or signed for someone else.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if not claims.get("sub"):
        raise ValueError("Invalid token")
    return claims
