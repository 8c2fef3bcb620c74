"""
Authentication dependencies for FastAPI routes.

Access tokens travel only in the Authorization header; the refresh token
cookie is handled by the auth router and never authenticates a request.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.constants import STAFF_ROLES, UserRole

from ..database import get_db
from ..models import User
from .jwt import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _credentials_error(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(db: Session, token: str) -> User | None:
    try:
        payload = decode_access_token(token)
    except ValueError:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    return db.get(User, str(user_id))


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from the bearer token.

    Raises 401 when the header is missing, the token does not verify, or the
    subject no longer exists.
    """
    if not token:
        raise _credentials_error("Not authenticated")
    user = _user_from_token(db, token)
    if user is None:
        raise _credentials_error()
    return user


def require_roles(*roles: UserRole):
    """
    Build a dependency that admits only users holding one of ``roles``.

    Usage:
        @router.post("", dependencies=[Depends(require_roles(UserRole.MANAGER))])
    """
    allowed = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action.",
            )
        return current_user

    return dependency


require_manager = require_roles(UserRole.MANAGER)
require_staff = require_roles(*STAFF_ROLES)
