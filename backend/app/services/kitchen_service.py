"""
Kitchen task service functions.

Task progress drives the status of the underlying order.
"""

from sqlalchemy.orm import Session

from core.constants import KitchenTaskStatus, OrderStatus
from core.logging import get_logger
from core.models.base import utcnow
from core.repositories import KitchenTaskRepository, OrderRepository

from ..exceptions import DomainError, NotFoundError
from ..models import KitchenTask
from ..schemas import KitchenTaskCreate, KitchenTaskResponse, KitchenTaskUpdate

logger = get_logger("service.kitchen")

# Order status implied by each task status; NotStarted leaves the order alone
ORDER_STATUS_FOR_TASK = {
    KitchenTaskStatus.PREPARING: OrderStatus.PREPARING,
    KitchenTaskStatus.READY: OrderStatus.COMPLETED,
    KitchenTaskStatus.COMPLETED: OrderStatus.COMPLETED,
}


def to_response(task: KitchenTask) -> KitchenTaskResponse:
    return KitchenTaskResponse(
        id=task.id,
        order_id=task.order_id,
        assigned_to=task.assigned_to,
        status=task.status,
        notes=task.notes,
        order_status=task.order.status if task.order else None,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def create_task(db: Session, payload: KitchenTaskCreate) -> KitchenTask:
    if not OrderRepository(db).exists(payload.order_id):
        raise NotFoundError("Order not found.")

    task = KitchenTaskRepository(db).create(
        order_id=payload.order_id,
        assigned_to=payload.assigned_to,
        status=KitchenTaskStatus.NOT_STARTED,
        notes=payload.notes,
    )
    logger.info("kitchen_task_created", task_id=task.id, order_id=task.order_id)
    return task


def list_tasks(db: Session) -> list[KitchenTask]:
    return KitchenTaskRepository(db).list_all()


def list_tasks_by_status(db: Session, status: str) -> list[KitchenTask]:
    try:
        parsed = KitchenTaskStatus.parse(status)
    except ValueError as exc:
        raise DomainError(str(exc)) from None
    return KitchenTaskRepository(db).list_by_status(parsed)


def update_task(db: Session, task_id: str, payload: KitchenTaskUpdate) -> KitchenTask:
    """
    Update assignment, notes and status of a task.

    A cancelled order only lets its task be closed as Completed; its own
    status stays Cancelled.
    """
    task = KitchenTaskRepository(db).get_by_id(task_id)
    if task is None:
        raise NotFoundError("Kitchen task not found.")

    new_status = None
    if payload.status is not None:
        try:
            new_status = KitchenTaskStatus.parse(payload.status)
        except ValueError:
            raise DomainError("Invalid status value.") from None

    order = task.order
    order_cancelled = order is not None and order.status == OrderStatus.CANCELLED
    if order_cancelled and new_status is not None and new_status != KitchenTaskStatus.COMPLETED:
        raise DomainError("Order was cancelled; task can only be marked Completed.")

    if payload.assigned_to is not None:
        task.assigned_to = payload.assigned_to
    if payload.notes is not None:
        task.notes = payload.notes
    if new_status is not None:
        task.status = new_status
        if order is not None and not order_cancelled and new_status in ORDER_STATUS_FOR_TASK:
            order.status = ORDER_STATUS_FOR_TASK[new_status]
            order.updated_at = utcnow()

    task.updated_at = utcnow()
    db.flush()
    logger.info(
        "kitchen_task_updated",
        task_id=task.id,
        status=task.status.value,
        order_status=order.status.value if order else None,
    )
    return task


def delete_task(db: Session, task_id: str) -> None:
    if not KitchenTaskRepository(db).delete(task_id):
        raise NotFoundError("Kitchen task not found.")
    logger.info("kitchen_task_deleted", task_id=task_id)
