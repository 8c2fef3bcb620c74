"""
Kitchen task endpoints (staff only).
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth.dependencies import require_staff
from ..database import get_db
from ..schemas import KitchenTaskCreate, KitchenTaskResponse, KitchenTaskUpdate, MessageResponse
from ..services import kitchen_service

router = APIRouter(prefix="/api/kitchen", tags=["kitchen"], dependencies=[Depends(require_staff)])


@router.post("/tasks", response_model=KitchenTaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(payload: KitchenTaskCreate, db: Session = Depends(get_db)) -> KitchenTaskResponse:
    return kitchen_service.to_response(kitchen_service.create_task(db, payload))


@router.get(
    "/tasks",
    response_model=list[KitchenTaskResponse],
    responses={204: {"description": "No kitchen tasks"}},
)
def list_tasks(db: Session = Depends(get_db)):
    tasks = kitchen_service.list_tasks(db)
    if not tasks:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [kitchen_service.to_response(task) for task in tasks]


@router.get("/tasks/{task_status}", response_model=list[KitchenTaskResponse])
def list_tasks_by_status(task_status: str, db: Session = Depends(get_db)) -> list[KitchenTaskResponse]:
    tasks = kitchen_service.list_tasks_by_status(db, task_status)
    return [kitchen_service.to_response(task) for task in tasks]


@router.put("/tasks/{task_id}", response_model=KitchenTaskResponse)
def update_task(
    task_id: str,
    payload: KitchenTaskUpdate,
    db: Session = Depends(get_db),
) -> KitchenTaskResponse:
    return kitchen_service.to_response(kitchen_service.update_task(db, task_id, payload))


@router.delete("/task/{task_id}", response_model=MessageResponse)
def delete_task(task_id: str, db: Session = Depends(get_db)) -> MessageResponse:
    kitchen_service.delete_task(db, task_id)
    return MessageResponse(message="Kitchen task deleted.")
