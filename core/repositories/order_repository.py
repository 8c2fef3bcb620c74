"""Order, kitchen task and payment repositories."""

from sqlalchemy.orm import joinedload, selectinload

from core.constants import KitchenTaskStatus
from core.models import KitchenTask, Order, OrderItem, Payment

from .base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Repository for Order operations."""

    model = Order

    def _with_items(self):
        return self.session.query(Order).options(
            selectinload(Order.items).joinedload(OrderItem.menu_item)
        )

    def get_with_items(self, order_id: str) -> Order | None:
        return self._with_items().filter(Order.id == order_id).first()

    def list_for_user(self, user_id: str) -> list[Order]:
        return (
            self._with_items()
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .all()
        )

    def list_all(self) -> list[Order]:
        return self._with_items().order_by(Order.created_at.desc()).all()


class KitchenTaskRepository(BaseRepository[KitchenTask]):
    """Repository for KitchenTask operations."""

    model = KitchenTask

    def _with_order(self):
        return self.session.query(KitchenTask).options(joinedload(KitchenTask.order))

    def list_all(self) -> list[KitchenTask]:
        return self._with_order().order_by(KitchenTask.updated_at.asc()).all()

    def list_by_status(self, status: KitchenTaskStatus) -> list[KitchenTask]:
        return (
            self._with_order()
            .filter(KitchenTask.status == status)
            .order_by(KitchenTask.updated_at.asc())
            .all()
        )


class PaymentRepository(BaseRepository[Payment]):
    """Repository for Payment operations."""

    model = Payment
