"""
Order placement and lifecycle service functions.

Checkout (payment_service) and direct placement share price_cart and
create_order, so both paths price, discount and reward orders the same way.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from core.constants import KitchenTaskStatus, OrderStatus, UserRole
from core.logging import LogContext, get_logger
from core.models.base import utcnow
from core.repositories import KitchenTaskRepository, MenuItemRepository, OrderRepository

from ..exceptions import DomainError, NotFoundError
from ..models import MenuItem, Order, OrderItem, User, UserCoupon
from ..schemas import OrderItemResponse, OrderResponse, PlaceOrderRequest
from . import coupon_service, loyalty_service

logger = get_logger("service.order")

UNASSIGNED = "unassigned"
CLOSED_STATUSES = (OrderStatus.CANCELLED, OrderStatus.COMPLETED)


@dataclass
class CartQuote:
    """A priced cart: resolved lines plus subtotal, discount and total."""

    lines: list[tuple[MenuItem, int]]
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    user_coupon: UserCoupon | None = None
    skipped_ids: list[str] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return max(self.subtotal - self.discount, Decimal("0"))


def resolve_lines(
    db: Session,
    lines: Iterable[tuple[str, int]],
    skip_unknown: bool = False,
) -> tuple[list[tuple[MenuItem, int]], list[str]]:
    """
    Match (menu_item_id, quantity) pairs to menu items.

    Returns:
        Tuple of (resolved lines, ids that were skipped as unknown)

    Raises:
        DomainError: empty cart, non-positive quantity, or an unknown item
            when skip_unknown is False.
    """
    pairs = list(lines)
    if not pairs:
        raise DomainError("Order must contain at least one item.")
    if any(quantity <= 0 for _, quantity in pairs):
        raise DomainError("Quantity must be greater than 0.")

    menu = MenuItemRepository(db).get_many([menu_item_id for menu_item_id, _ in pairs])
    resolved = []
    skipped = []
    for menu_item_id, quantity in pairs:
        item = menu.get(menu_item_id)
        if item is None:
            if not skip_unknown:
                raise DomainError(f"Menu item {menu_item_id} not found.")
            skipped.append(menu_item_id)
            continue
        resolved.append((item, quantity))
    return resolved, skipped


def price_cart(
    db: Session,
    user_id: str,
    lines: Iterable[tuple[str, int]],
    user_coupon_id: str | None = None,
    lenient: bool = False,
) -> CartQuote:
    """
    Price a cart at current menu prices and apply the user's coupon.

    In lenient mode (used once a payment has already been captured)
    unknown items are skipped and a coupon that no longer applies is
    ignored instead of rejecting the order.
    """
    resolved, skipped = resolve_lines(db, lines, skip_unknown=lenient)
    quote = CartQuote(lines=resolved, skipped_ids=skipped)
    quote.subtotal = sum((item.price * quantity for item, quantity in resolved), Decimal("0"))

    if not user_coupon_id:
        return quote

    try:
        user_coupon = coupon_service.get_redeemable_coupon(db, user_id, user_coupon_id)
        unit_prices = {item.id: item.price for item, _ in resolved}
        quote.discount = coupon_service.compute_discount(user_coupon.coupon, unit_prices, quote.subtotal)
        quote.user_coupon = user_coupon
    except DomainError as exc:
        if not lenient:
            raise
        logger.warning(
            "coupon_ignored",
            user_id=user_id,
            user_coupon_id=user_coupon_id,
            reason=exc.message,
        )
    return quote


def create_order(
    db: Session,
    user_id: str,
    quote: CartQuote,
    notes: str | None = None,
    charged_total: Decimal | None = None,
) -> Order:
    """
    Persist a priced cart as a Pending order.

    When the order was paid up front, ``charged_total`` is the amount
    captured and becomes the order total the points are earned on.

    Also queues a kitchen task, consumes the coupon and credits loyalty
    points for the order total.
    """
    order = Order(
        user_id=user_id,
        status=OrderStatus.PENDING,
        subtotal=quote.subtotal,
        discount_amount=quote.discount,
        total=quote.total if charged_total is None else charged_total,
        notes=notes,
    )
    for item, quantity in quote.lines:
        order.items.append(
            OrderItem(menu_item_id=item.id, menu_item=item, quantity=quantity, unit_price=item.price)
        )
    db.add(order)
    db.flush()

    KitchenTaskRepository(db).create(
        order_id=order.id,
        assigned_to=UNASSIGNED,
        status=KitchenTaskStatus.NOT_STARTED,
    )

    if quote.user_coupon is not None:
        coupon_service.mark_used(db, quote.user_coupon, order.id)

    loyalty_service.award_points_for_order(db, user_id, order.id, order.total)

    logger.info(
        "order_placed",
        order_id=order.id,
        user_id=user_id,
        items=len(order.items),
        subtotal=str(order.subtotal),
        discount=str(order.discount_amount),
        total=str(order.total),
    )
    return order


def place_order(db: Session, user: User, payload: PlaceOrderRequest) -> Order:
    lines = [(line.menu_item_id, line.quantity) for line in payload.items]
    quote = price_cart(db, user.id, lines, payload.user_coupon_id)
    return create_order(db, user.id, quote, payload.notes)


def list_orders(db: Session, user: User, include_all: bool = False) -> list[Order]:
    """Newest first. Only staff may see other users' orders."""
    orders = OrderRepository(db)
    if include_all and user.is_staff:
        return orders.list_all()
    return orders.list_for_user(user.id)


def get_order(db: Session, user: User, order_id: str) -> Order:
    order = OrderRepository(db).get_with_items(order_id)
    if order is None or (order.user_id != user.id and not user.is_staff):
        raise NotFoundError("Order not found.")
    return order


def cancel_order(db: Session, user: User, order_id: str) -> Order:
    """
    Cancel an open order and take back the loyalty points it earned.

    Only the owner or a manager may cancel. Every refusal reports the same
    message.
    """
    with LogContext(order_id=order_id, operation="cancel_order"):
        order = OrderRepository(db).get_with_items(order_id)
        if (
            order is None
            or order.status in CLOSED_STATUSES
            or (order.user_id != user.id and user.role != UserRole.MANAGER)
        ):
            logger.info("order_cancel_refused", user_id=user.id)
            raise DomainError("Order cannot be cancelled.")

        order.status = OrderStatus.CANCELLED
        order.updated_at = utcnow()
        db.flush()

        reversed_points = loyalty_service.reverse_points_for_order(db, order.user_id, order.id)
        logger.info("order_cancelled", cancelled_by=user.id, points_reversed=reversed_points)
    return order


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        status=order.status,
        subtotal=float(order.subtotal),
        discount_amount=float(order.discount_amount),
        total=float(order.total),
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemResponse(
                id=line.id,
                menu_item_id=line.menu_item_id,
                menu_item_name=line.menu_item.name if line.menu_item else None,
                quantity=line.quantity,
                unit_price=float(line.unit_price),
                line_total=float(line.line_total),
            )
            for line in order.items
        ],
    )
