"""Loyalty account, ledger and coupon repositories."""

from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from core.constants import LoyaltyTransactionType
from core.models import Coupon, LoyaltyAccount, LoyaltyTransaction, UserCoupon
from core.models.base import utcnow

from .base import BaseRepository


class LoyaltyAccountRepository(BaseRepository[LoyaltyAccount]):
    """
    Repository for loyalty accounts and their ledger.

    Balance changes go through add_transaction so the account and its
    ledger are always written together.
    """

    model = LoyaltyAccount

    def get_by_user_id(self, user_id: str) -> LoyaltyAccount | None:
        return (
            self.session.query(LoyaltyAccount)
            .filter(LoyaltyAccount.user_id == user_id)
            .first()
        )

    def get_or_create(self, user_id: str) -> LoyaltyAccount:
        account = self.get_by_user_id(user_id)
        if account is None:
            account = self.create(user_id=user_id, points=0)
        return account

    def add_transaction(
        self,
        account: LoyaltyAccount,
        points_change: int,
        type: LoyaltyTransactionType,
        description: str,
        related_order_id: str | None = None,
    ) -> LoyaltyTransaction:
        """Apply a signed point change to the balance and append it to the ledger."""
        account.points = (account.points or 0) + points_change
        account.updated_at = utcnow()
        transaction = LoyaltyTransaction(
            loyalty_account_id=account.id,
            points_change=points_change,
            type=type,
            description=description,
            related_order_id=related_order_id,
        )
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def list_transactions(self, account_id: str) -> list[LoyaltyTransaction]:
        """Ledger entries, newest first."""
        return (
            self.session.query(LoyaltyTransaction)
            .filter(LoyaltyTransaction.loyalty_account_id == account_id)
            .order_by(LoyaltyTransaction.created_at.desc())
            .all()
        )

    def points_earned_for_order(self, account_id: str, order_id: str) -> int:
        total = (
            self.session.query(func.coalesce(func.sum(LoyaltyTransaction.points_change), 0))
            .filter(
                LoyaltyTransaction.loyalty_account_id == account_id,
                LoyaltyTransaction.related_order_id == order_id,
                LoyaltyTransaction.type == LoyaltyTransactionType.EARNED,
            )
            .scalar()
        )
        return int(total or 0)


class CouponRepository(BaseRepository[Coupon]):
    """Repository for Coupon operations."""

    model = Coupon

    def list_available(self, now: datetime | None = None) -> list[Coupon]:
        """Active coupons that have not expired."""
        now = now or utcnow()
        return (
            self.session.query(Coupon)
            .options(joinedload(Coupon.specific_menu_item))
            .filter(
                Coupon.is_active.is_(True),
                or_(Coupon.expires_at.is_(None), Coupon.expires_at > now),
            )
            .order_by(Coupon.points_cost.asc(), Coupon.created_at.asc())
            .all()
        )


class UserCouponRepository(BaseRepository[UserCoupon]):
    """Repository for coupons owned by users."""

    model = UserCoupon

    def list_unused_for_user(self, user_id: str) -> list[UserCoupon]:
        return (
            self.session.query(UserCoupon)
            .options(joinedload(UserCoupon.coupon).joinedload(Coupon.specific_menu_item))
            .filter(UserCoupon.user_id == user_id, UserCoupon.is_used.is_(False))
            .order_by(UserCoupon.acquired_at.desc())
            .all()
        )

    def list_unused_for_coupon(self, coupon_id: str) -> list[UserCoupon]:
        return (
            self.session.query(UserCoupon)
            .filter(UserCoupon.coupon_id == coupon_id, UserCoupon.is_used.is_(False))
            .all()
        )

    def delete_for_coupon(self, coupon_id: str) -> int:
        result = (
            self.session.query(UserCoupon)
            .filter(UserCoupon.coupon_id == coupon_id)
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return result
