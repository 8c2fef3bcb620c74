"""
Loyalty point service functions.

Every balance change is written together with a ledger entry through
LoyaltyAccountRepository.add_transaction.
"""

from decimal import ROUND_FLOOR, Decimal

from sqlalchemy.orm import Session

from core.constants import POINTS_PER_CURRENCY_UNIT, LoyaltyTransactionType
from core.logging import get_logger
from core.repositories import LoyaltyAccountRepository

from ..exceptions import NotFoundError, OperationFailedError
from ..models import LoyaltyAccount, LoyaltyTransaction, User
from ..schemas import OperationResponse

logger = get_logger("service.loyalty")


def points_for_total(total: Decimal) -> int:
    """One point per full 10 currency units spent: 150 -> 15, 9.99 -> 0."""
    if total <= 0:
        return 0
    return int((Decimal(total) / POINTS_PER_CURRENCY_UNIT).to_integral_value(rounding=ROUND_FLOOR))


def award_points_for_order(db: Session, user_id: str, order_id: str, total: Decimal) -> int:
    """
    Credit the points earned by an order, creating the account if needed.

    Returns:
        Number of points awarded (0 means nothing was written).
    """
    points = points_for_total(total)
    if points == 0:
        return 0

    accounts = LoyaltyAccountRepository(db)
    account = accounts.get_or_create(user_id)
    accounts.add_transaction(
        account,
        points_change=points,
        type=LoyaltyTransactionType.EARNED,
        description=f"Points earned for order {order_id}",
        related_order_id=order_id,
    )
    logger.info("loyalty_points_awarded", user_id=user_id, order_id=order_id, points=points)
    return points


def reverse_points_for_order(db: Session, user_id: str, order_id: str) -> int:
    """
    Take back the points an order earned.

    The balance never goes negative: if some points were already spent,
    only what is left is deducted and the ledger records that amount.

    Returns:
        Number of points deducted.
    """
    accounts = LoyaltyAccountRepository(db)
    account = accounts.get_by_user_id(user_id)
    if account is None:
        return 0

    earned = accounts.points_earned_for_order(account.id, order_id)
    if earned <= 0:
        return 0

    deduction = min(account.points, earned)
    accounts.add_transaction(
        account,
        points_change=-deduction,
        type=LoyaltyTransactionType.ADJUSTED,
        description=f"Reversal for cancelled order {order_id}",
        related_order_id=order_id,
    )
    logger.info(
        "loyalty_points_reversed",
        user_id=user_id,
        order_id=order_id,
        earned=earned,
        deducted=deduction,
    )
    return deduction


def get_account(db: Session, user: User) -> LoyaltyAccount:
    account = LoyaltyAccountRepository(db).get_by_user_id(user.id)
    if account is None:
        raise NotFoundError("Loyalty account not found.")
    return account


def list_transactions(db: Session, user: User) -> list[LoyaltyTransaction]:
    accounts = LoyaltyAccountRepository(db)
    account = accounts.get_by_user_id(user.id)
    if account is None:
        return []
    return accounts.list_transactions(account.id)


def redeem_points(db: Session, user: User, points: int, description: str) -> OperationResponse:
    accounts = LoyaltyAccountRepository(db)
    account = accounts.get_by_user_id(user.id)
    if account is None:
        raise OperationFailedError("Loyalty account not found")
    if account.points < points:
        raise OperationFailedError("Insufficient points")

    accounts.add_transaction(
        account,
        points_change=-points,
        type=LoyaltyTransactionType.REDEEMED,
        description=description,
    )
    logger.info("loyalty_points_redeemed", user_id=user.id, points=points)
    return OperationResponse(
        success=True,
        message=f"Redeemed {points} points",
        remaining_points=account.points,
    )
