"""
Coupon endpoints.

Managers maintain the catalogue; any signed-in user can buy coupons with
loyalty points.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user, require_manager
from ..database import get_db
from ..models import User
from ..schemas import CouponCreate, CouponResponse, OperationResponse, UserCouponResponse
from ..services import coupon_service

router = APIRouter(prefix="/api/coupons", tags=["coupons"])


@router.post(
    "",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_manager)],
)
def create_coupon(payload: CouponCreate, db: Session = Depends(get_db)) -> OperationResponse:
    return coupon_service.create_coupon(db, payload)


@router.get("/available", response_model=list[CouponResponse])
def list_available(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[CouponResponse]:
    return coupon_service.list_available(db)


@router.get("/mine", response_model=list[UserCouponResponse])
def list_mine(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[UserCouponResponse]:
    return coupon_service.list_user_coupons(db, user)


@router.post(
    "/{coupon_id}/purchase",
    response_model=OperationResponse,
    response_model_exclude_none=True,
)
def purchase_coupon(
    coupon_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OperationResponse:
    return coupon_service.purchase_coupon(db, user, coupon_id)


@router.delete(
    "/{coupon_id}",
    response_model=OperationResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_manager)],
)
def delete_coupon(coupon_id: str, db: Session = Depends(get_db)) -> OperationResponse:
    return coupon_service.delete_coupon(db, coupon_id)
