"""User repository for authentication and user management."""

from datetime import datetime

from sqlalchemy import func

from core.models import RefreshToken, User
from core.models.base import utcnow

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Get user by email, ignoring case."""
        return (
            self.session.query(User)
            .filter(func.lower(User.email) == email.strip().lower())
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_by_creation(self) -> list[User]:
        return self.session.query(User).order_by(User.created_at.asc()).all()


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Repository for persisted refresh tokens (stored as SHA-256 hashes)."""

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.token_hash == token_hash)
            .first()
        )

    def add(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
        return self.create(user_id=user_id, token_hash=token_hash, expires_at=expires_at)

    def revoke(self, token: RefreshToken) -> None:
        if token.revoked_at is None:
            token.revoked_at = utcnow()
            self.session.flush()

    def revoke_all_for_user(self, user_id: str) -> int:
        """Revoke every active token of a user. Returns the number revoked."""
        now = utcnow()
        active = (
            self.session.query(RefreshToken)
            .filter(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > now,
            )
            .all()
        )
        for token in active:
            token.revoked_at = now
        self.session.flush()
        return len(active)

    def delete_for_user(self, user_id: str) -> int:
        result = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return result
