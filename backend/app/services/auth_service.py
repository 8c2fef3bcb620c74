"""
Account and session service functions.

Access tokens are stateless JWTs; refresh tokens are opaque random strings
persisted as SHA-256 hashes and rotated on every use.
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from core.logging import get_logger
from core.models.base import utcnow
from core.repositories import RefreshTokenRepository, UserRepository
from core.security import generate_refresh_token, hash_password, hash_token, verify_password

from ..config import get_settings
from ..exceptions import DomainError, NotFoundError
from ..models import User
from ..schemas import RegisterRequest, UpdateProfileRequest

logger = get_logger("service.auth")

PROFILE_FIELDS = (
    "name",
    "profile_picture_url",
    "address_city",
    "address_street",
    "address_number",
    "address_details",
)


class AuthenticationError(DomainError):
    status_code = 401


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Create a user account. Emails are unique regardless of case."""
    users = UserRepository(db)
    if users.email_exists(payload.email):
        raise DomainError("Email already registered.")

    user = users.create(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = UserRepository(db).get_by_email(email)
    if user is None or not verify_password(user.password_hash, password):
        logger.info("login_failed")
        raise DomainError("Invalid email or password.")
    return user


def issue_refresh_token(db: Session, user: User) -> str:
    """Persist a new refresh token for the user and return the raw value."""
    settings = get_settings()
    raw_token = generate_refresh_token()
    RefreshTokenRepository(db).add(
        user_id=user.id,
        token_hash=hash_token(raw_token),
        expires_at=utcnow() + timedelta(days=settings.refresh_token_expire_days),
    )
    return raw_token


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """
    Verify credentials and start a fresh session.

    Every previously active refresh token of the user is revoked, so only
    the newest login can refresh.
    """
    user = authenticate(db, email, password)
    revoked = RefreshTokenRepository(db).revoke_all_for_user(user.id)
    raw_token = issue_refresh_token(db, user)
    logger.info("user_logged_in", user_id=user.id, revoked_tokens=revoked)
    return user, raw_token


def rotate_refresh_token(db: Session, raw_token: str | None) -> tuple[User, str]:
    """
    Exchange a refresh token for a new one.

    Raises:
        AuthenticationError: token missing, unknown, revoked or expired.
    """
    if not raw_token:
        raise AuthenticationError("Refresh token is missing.")

    tokens = RefreshTokenRepository(db)
    stored = tokens.get_by_hash(hash_token(raw_token))
    if stored is None or not stored.is_active:
        raise AuthenticationError("Refresh token is invalid or expired.")

    tokens.revoke(stored)
    user = stored.user
    new_token = issue_refresh_token(db, user)
    logger.info("refresh_token_rotated", user_id=user.id)
    return user, new_token


def revoke_refresh_token(db: Session, raw_token: str | None) -> None:
    if not raw_token:
        return
    tokens = RefreshTokenRepository(db)
    stored = tokens.get_by_hash(hash_token(raw_token))
    if stored is not None:
        tokens.revoke(stored)
        logger.info("user_logged_out", user_id=stored.user_id)


def list_users(db: Session) -> list[User]:
    return UserRepository(db).list_by_creation()


def delete_user(db: Session, user_id: str) -> None:
    users = UserRepository(db)
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found.")

    RefreshTokenRepository(db).delete_for_user(user_id)
    users.delete(user_id)
    logger.info("user_deleted", user_id=user_id)


def update_profile(db: Session, user: User, payload: UpdateProfileRequest) -> User:
    """Apply the provided fields; absent or null fields keep their value."""
    changed = []
    for field in PROFILE_FIELDS:
        value = getattr(payload, field)
        if value is not None:
            setattr(user, field, value)
            changed.append(field)

    if changed:
        user.updated_at = utcnow()
        db.flush()
        logger.info("profile_updated", user_id=user.id, fields=changed)
    return user


def set_profile_picture(db: Session, user: User, url: str) -> User:
    user.profile_picture_url = url
    user.updated_at = utcnow()
    db.flush()
    return user
