"""
Menu and review models.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, CheckConstraint, Float, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import MenuCategory

from .base import Base, UTCDateTime, enum_column, new_uuid, utcnow, uuid_pk

if TYPE_CHECKING:
    from .user import User


class MenuItem(Base):
    """A dish or drink offered by the canteen."""

    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(30), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    description: Mapped[str | None] = mapped_column(String(400), nullable=True)
    category: Mapped[MenuCategory] = mapped_column(enum_column(MenuCategory), index=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    allergens: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    reviews: Mapped[list["MenuItemReview"]] = relationship(
        "MenuItemReview",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MenuItemReview(Base):
    """One user's rating of one menu item."""

    __tablename__ = "menu_item_reviews"
    __table_args__ = (
        UniqueConstraint("menu_item_id", "user_id", name="uq_review_menu_item_user"),
        CheckConstraint("rating >= 1.0 AND rating <= 5.0", name="ck_review_rating_range"),
    )

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    menu_item_id: Mapped[str] = mapped_column(
        ForeignKey("menu_items.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    rating: Mapped[float] = mapped_column(Float)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True, onupdate=utcnow)

    menu_item: Mapped["MenuItem"] = relationship("MenuItem", back_populates="reviews")
    user: Mapped["User"] = relationship("User")
