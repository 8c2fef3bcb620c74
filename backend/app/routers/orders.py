"""
Order endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import OrderResponse, PlaceOrderRequest
from ..services import order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: PlaceOrderRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    order = order_service.place_order(db, user, payload)
    return order_service.to_response(order)


@router.get("", response_model=list[OrderResponse])
def list_orders(
    all: bool = Query(False, description="Staff only: include every user's orders"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[OrderResponse]:
    orders = order_service.list_orders(db, user, include_all=all)
    return [order_service.to_response(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    return order_service.to_response(order_service.get_order(db, user, order_id))


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OrderResponse:
    return order_service.to_response(order_service.cancel_order(db, user, order_id))
