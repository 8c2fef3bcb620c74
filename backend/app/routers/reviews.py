"""
Menu item review endpoints.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import MenuItemRatingResponse, ReviewCreate, ReviewResponse, ReviewUpdate
from ..services import review_service

router = APIRouter(prefix="/api", tags=["reviews"])


@router.post("/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def add_review(
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReviewResponse:
    return review_service.add_review(db, user, payload)


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: str,
    payload: ReviewUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReviewResponse:
    return review_service.update_review(db, user, review_id, payload)


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Response:
    review_service.delete_review(db, user, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/menu/{menu_item_id}/reviews", response_model=list[ReviewResponse])
def list_reviews(menu_item_id: str, db: Session = Depends(get_db)) -> list[ReviewResponse]:
    return review_service.list_reviews(db, menu_item_id)


@router.get("/menu/{menu_item_id}/reviews/mine", response_model=ReviewResponse)
def get_my_review(
    menu_item_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReviewResponse:
    return review_service.get_user_review(db, user, menu_item_id)


@router.get("/menu/{menu_item_id}/rating", response_model=MenuItemRatingResponse)
def get_rating(menu_item_id: str, db: Session = Depends(get_db)) -> MenuItemRatingResponse:
    return review_service.get_rating(db, menu_item_id)
