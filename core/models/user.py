"""
User-related SQLAlchemy models.
"""

from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import UserRole

from .base import Base, UTCDateTime, enum_column, new_uuid, utcnow, uuid_pk


class User(Base):
    """
    Registered CampusEats user.

    Attributes:
        email: Login identifier, stored lower-cased
        password_hash: werkzeug password hash
        role: STUDENT, WORKER or MANAGER
        profile_picture_url: Public URL of the uploaded avatar
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(enum_column(UserRole), default=UserRole.STUDENT)
    profile_picture_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    address_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_street: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address_details: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.WORKER, UserRole.MANAGER)


class RefreshToken(Base):
    """
    Server-side record of an issued refresh token.

    Only the SHA-256 hash of the raw cookie value is stored. A token is
    usable until it expires or is revoked (logout, login, rotation).
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime)
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="refresh_tokens")

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None and self.expires_at > utcnow()
