"""
Inventory models.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import StockTransactionType

from .base import Base, UTCDateTime, enum_column, new_uuid, utcnow, uuid_pk


class Ingredient(Base):
    __tablename__ = "ingredients"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    unit: Mapped[str] = mapped_column(String(20))
    current_stock: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=Decimal("0"))
    low_stock_threshold: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    transactions: Mapped[list["StockTransaction"]] = relationship(
        "StockTransaction",
        back_populates="ingredient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.low_stock_threshold


class StockTransaction(Base):
    """Signed stock movement; negative for usage and waste."""

    __tablename__ = "stock_transactions"

    id: Mapped[str] = mapped_column(uuid_pk(), primary_key=True, default=new_uuid)
    ingredient_id: Mapped[str] = mapped_column(
        ForeignKey("ingredients.id", ondelete="CASCADE"), index=True
    )
    quantity_changed: Mapped[Decimal] = mapped_column(Numeric(12, 3))
    type: Mapped[StockTransactionType] = mapped_column(enum_column(StockTransactionType))
    note: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="transactions")
