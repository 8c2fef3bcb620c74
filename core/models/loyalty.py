"""
Loyalty ledger and coupon models.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import CouponType, LoyaltyTransactionType

from .base import Base, UTCDateTime, enum_column, new_uuid, utcnow, uuid_pk

if TYPE_CHECKING:
    from .menu import MenuItem


class LoyaltyAccount(Base):
    """Per-user point balance. Every balance change has a LoyaltyTransaction."""

    __tablename__ = "loyalty_accounts"
    __table_args__ = (CheckConstraint("points >= 0", name="ck_loyalty_points_non_negative"),)

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )
    points: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    transactions: Mapped[list["LoyaltyTransaction"]] = relationship(
        "LoyaltyTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class LoyaltyTransaction(Base):
    """Append-only ledger entry; points_change is signed."""

    __tablename__ = "loyalty_transactions"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    loyalty_account_id: Mapped[str] = mapped_column(
        ForeignKey("loyalty_accounts.id", ondelete="CASCADE"), index=True
    )
    points_change: Mapped[int] = mapped_column(Integer)
    type: Mapped[LoyaltyTransactionType] = mapped_column(enum_column(LoyaltyTransactionType))
    description: Mapped[str] = mapped_column(String(500))
    related_order_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)

    account: Mapped["LoyaltyAccount"] = relationship("LoyaltyAccount", back_populates="transactions")


class Coupon(Base):
    """
    Discount voucher purchasable with loyalty points.

    discount_value is a percentage for PercentageDiscount, an amount for
    FixedAmountDiscount and unused for FreeItem (the item price is the discount).
    """

    __tablename__ = "coupons"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str] = mapped_column(String(500))
    type: Mapped[CouponType] = mapped_column(enum_column(CouponType))
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    points_cost: Mapped[int] = mapped_column(Integer)
    specific_menu_item_id: Mapped[str | None] = mapped_column(
        ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True
    )
    minimum_order_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    specific_menu_item: Mapped[Optional["MenuItem"]] = relationship("MenuItem")
    user_coupons: Mapped[list["UserCoupon"]] = relationship(
        "UserCoupon",
        back_populates="coupon",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at is not None and self.expires_at <= (now or utcnow())


class UserCoupon(Base):
    """A coupon owned by a user, consumed by at most one order."""

    __tablename__ = "user_coupons"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    coupon_id: Mapped[str] = mapped_column(ForeignKey("coupons.id", ondelete="CASCADE"), index=True)
    acquired_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_used: Mapped[bool] = mapped_column(Boolean, default=False)
    used_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    used_in_order_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    coupon: Mapped["Coupon"] = relationship("Coupon", back_populates="user_coupons")

    def is_redeemable(self, now: datetime | None = None) -> bool:
        if self.is_used:
            return False
        return self.expires_at is None or self.expires_at > (now or utcnow())
