"""
Order, kitchen and payment models.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import KitchenTaskStatus, OrderStatus, PaymentStatus

from .base import Base, UTCDateTime, enum_column, new_uuid, utcnow, uuid_pk

if TYPE_CHECKING:
    from .menu import MenuItem
    from .user import User


class Order(Base):
    """
    A customer order.

    Money columns are stored as NUMERIC(10, 2):
        subtotal: sum of unit_price * quantity over items
        discount_amount: coupon discount applied to subtotal
        total: subtotal - discount_amount, never negative
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    status: Mapped[OrderStatus] = mapped_column(
        enum_column(OrderStatus), default=OrderStatus.PENDING, index=True
    )
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True, onupdate=utcnow)

    user: Mapped["User"] = relationship("User")
    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    kitchen_tasks: Mapped[list["KitchenTask"]] = relationship(
        "KitchenTask",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class OrderItem(Base):
    """A single line of an order; unit_price is captured at order time."""

    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    menu_item_id: Mapped[str | None] = mapped_column(
        ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    menu_item: Mapped[Optional["MenuItem"]] = relationship("MenuItem")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class KitchenTask(Base):
    """Kitchen work item tracking the preparation of one order."""

    __tablename__ = "kitchen_tasks"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    assigned_to: Mapped[str] = mapped_column(String(100), default="unassigned")
    status: Mapped[KitchenTaskStatus] = mapped_column(
        enum_column(KitchenTaskStatus), default=KitchenTaskStatus.NOT_STARTED, index=True
    )
    notes: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    order: Mapped["Order"] = relationship("Order", back_populates="kitchen_tasks")


class Payment(Base):
    """
    Hosted checkout payment.

    Created PENDING when the checkout session is opened; the webhook flips it
    to SUCCEEDED and links the order it produced.
    """

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    order_id: Mapped[str | None] = mapped_column(
        ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    currency: Mapped[str] = mapped_column(String(3), default="ron")
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus), default=PaymentStatus.PENDING
    )
    stripe_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
