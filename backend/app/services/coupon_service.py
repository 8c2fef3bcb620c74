"""
Coupon catalogue, purchase and discount service functions.

Coupons are bought with loyalty points and become UserCoupons, which are
redeemed once against an order.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from core.constants import MONEY_QUANTUM, CouponType, LoyaltyTransactionType
from core.logging import get_logger
from core.models.base import utcnow
from core.repositories import (
    CouponRepository,
    LoyaltyAccountRepository,
    MenuItemRepository,
    UserCouponRepository,
)

from ..exceptions import DomainError, OperationFailedError
from ..models import Coupon, User, UserCoupon
from ..schemas import CouponCreate, CouponResponse, OperationResponse, UserCouponResponse

logger = get_logger("service.coupon")

HUNDRED = Decimal("100")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def compute_discount(coupon: Coupon, unit_prices: dict[str, Decimal], subtotal: Decimal) -> Decimal:
    """
    Discount a coupon grants on a cart.

    Args:
        coupon: The coupon being applied.
        unit_prices: Unit price of every menu item in the cart, by id.
        subtotal: Cart total before discount.

    Raises:
        DomainError: subtotal is below the coupon's minimum order amount.
    """
    if coupon.minimum_order_amount is not None and subtotal < coupon.minimum_order_amount:
        raise DomainError("Order does not meet the coupon minimum amount.")

    value = Decimal(coupon.discount_value or 0)
    if coupon.type == CouponType.PERCENTAGE_DISCOUNT:
        discount = subtotal * value / HUNDRED
    elif coupon.type == CouponType.FIXED_AMOUNT_DISCOUNT:
        discount = min(value, subtotal)
    elif coupon.type == CouponType.FREE_ITEM:
        discount = unit_prices.get(coupon.specific_menu_item_id, Decimal("0"))
    else:
        discount = Decimal("0")
    return _money(discount)


def get_redeemable_coupon(db: Session, user_id: str, user_coupon_id: str) -> UserCoupon:
    """
    Load a user coupon that can be applied to a new order.

    Raises:
        DomainError: not owned by the user, already used, or expired.
    """
    user_coupon = UserCouponRepository(db).get_by_id(user_coupon_id)
    if user_coupon is None or user_coupon.user_id != user_id or not user_coupon.is_redeemable():
        raise DomainError("Coupon is not valid for this order.")
    return user_coupon


def mark_used(db: Session, user_coupon: UserCoupon, order_id: str) -> None:
    user_coupon.is_used = True
    user_coupon.used_at = utcnow()
    user_coupon.used_in_order_id = order_id
    db.flush()
    logger.info("coupon_redeemed", user_coupon_id=user_coupon.id, order_id=order_id)


def to_response(coupon: Coupon) -> CouponResponse:
    return CouponResponse(
        id=coupon.id,
        name=coupon.name,
        description=coupon.description,
        type=coupon.type,
        discount_value=float(coupon.discount_value),
        points_cost=coupon.points_cost,
        specific_menu_item_id=coupon.specific_menu_item_id,
        specific_menu_item_name=(
            coupon.specific_menu_item.name if coupon.specific_menu_item else None
        ),
        minimum_order_amount=(
            float(coupon.minimum_order_amount)
            if coupon.minimum_order_amount is not None
            else None
        ),
        is_active=coupon.is_active,
        expires_at=coupon.expires_at,
        created_at=coupon.created_at,
    )


def to_user_coupon_response(user_coupon: UserCoupon) -> UserCouponResponse:
    coupon = user_coupon.coupon
    return UserCouponResponse(
        id=user_coupon.id,
        coupon_id=coupon.id,
        coupon_name=coupon.name,
        coupon_description=coupon.description,
        coupon_type=coupon.type,
        discount_value=float(coupon.discount_value),
        specific_menu_item_id=coupon.specific_menu_item_id,
        specific_menu_item_name=(
            coupon.specific_menu_item.name if coupon.specific_menu_item else None
        ),
        minimum_order_amount=(
            float(coupon.minimum_order_amount)
            if coupon.minimum_order_amount is not None
            else None
        ),
        acquired_at=user_coupon.acquired_at,
        expires_at=user_coupon.expires_at,
        is_used=user_coupon.is_used,
    )


def create_coupon(db: Session, payload: CouponCreate) -> OperationResponse:
    if payload.specific_menu_item_id and not MenuItemRepository(db).exists(
        payload.specific_menu_item_id
    ):
        raise OperationFailedError("Menu item not found")

    coupon = CouponRepository(db).create(
        name=payload.name,
        description=payload.description,
        type=payload.type,
        discount_value=payload.discount_value,
        points_cost=payload.points_cost,
        specific_menu_item_id=payload.specific_menu_item_id,
        minimum_order_amount=payload.minimum_order_amount,
        expires_at=payload.expires_at,
        is_active=True,
    )
    logger.info("coupon_created", coupon_id=coupon.id, type=coupon.type.value)
    return OperationResponse(success=True, message="Coupon created successfully", coupon_id=coupon.id)


def list_available(db: Session) -> list[CouponResponse]:
    return [to_response(coupon) for coupon in CouponRepository(db).list_available()]


def list_user_coupons(db: Session, user: User) -> list[UserCouponResponse]:
    user_coupons = UserCouponRepository(db).list_unused_for_user(user.id)
    return [to_user_coupon_response(uc) for uc in user_coupons]


def purchase_coupon(db: Session, user: User, coupon_id: str) -> OperationResponse:
    """
    Buy a coupon with loyalty points.

    Checks run in a fixed order so the first failing rule is reported.
    """
    coupon = CouponRepository(db).get_by_id(coupon_id)
    if coupon is None:
        raise OperationFailedError("Coupon not found")
    if not coupon.is_active:
        raise OperationFailedError("Coupon is not available")
    if coupon.is_expired():
        raise OperationFailedError("Coupon has expired")

    accounts = LoyaltyAccountRepository(db)
    account = accounts.get_by_user_id(user.id)
    if account is None:
        raise OperationFailedError("Loyalty account not found")
    if account.points < coupon.points_cost:
        raise OperationFailedError("Insufficient points")

    accounts.add_transaction(
        account,
        points_change=-coupon.points_cost,
        type=LoyaltyTransactionType.REDEEMED,
        description=f"Purchased coupon: {coupon.name}",
    )
    UserCouponRepository(db).create(
        user_id=user.id,
        coupon_id=coupon.id,
        expires_at=coupon.expires_at,
        is_used=False,
    )
    logger.info(
        "coupon_purchased",
        coupon_id=coupon.id,
        user_id=user.id,
        points_cost=coupon.points_cost,
    )
    return OperationResponse(
        success=True,
        message=f"Coupon '{coupon.name}' purchased successfully",
        remaining_points=account.points,
    )


def delete_coupon(db: Session, coupon_id: str) -> OperationResponse:
    """
    Remove a coupon and refund holders who have not used it yet.

    Each unused UserCoupon refunds its holder the points cost through an
    Adjusted ledger entry before all UserCoupons and the coupon are removed.
    """
    coupons = CouponRepository(db)
    coupon = coupons.get_by_id(coupon_id)
    if coupon is None:
        raise OperationFailedError("Coupon not found", status_code=404)

    user_coupons = UserCouponRepository(db)
    accounts = LoyaltyAccountRepository(db)
    refunded = 0
    for user_coupon in user_coupons.list_unused_for_coupon(coupon.id):
        account = accounts.get_or_create(user_coupon.user_id)
        accounts.add_transaction(
            account,
            points_change=coupon.points_cost,
            type=LoyaltyTransactionType.ADJUSTED,
            description=f"Refund for deleted coupon: {coupon.name}",
        )
        refunded += 1

    user_coupons.delete_for_coupon(coupon.id)
    coupons.delete(coupon.id)
    logger.info("coupon_deleted", coupon_id=coupon_id, refunded_users=refunded)
    return OperationResponse(success=True, message=f"Coupon deleted. Refunded {refunded} users")
