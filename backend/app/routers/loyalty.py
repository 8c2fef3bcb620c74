"""
Loyalty account endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..database import get_db
from ..models import LoyaltyAccount, LoyaltyTransaction, User
from ..schemas import (
    LoyaltyAccountResponse,
    LoyaltyTransactionResponse,
    OperationResponse,
    RedeemPointsRequest,
)
from ..services import loyalty_service

router = APIRouter(prefix="/api/loyalty", tags=["loyalty"])


@router.get("/account", response_model=LoyaltyAccountResponse)
def get_account(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> LoyaltyAccount:
    return loyalty_service.get_account(db, user)


@router.get("/transactions", response_model=list[LoyaltyTransactionResponse])
def list_transactions(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[LoyaltyTransaction]:
    return loyalty_service.list_transactions(db, user)


@router.post("/redeem", response_model=OperationResponse, response_model_exclude_none=True)
def redeem_points(
    payload: RedeemPointsRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> OperationResponse:
    return loyalty_service.redeem_points(db, user, payload.points, payload.description)
