"""
Menu item review service functions.

One review per user per menu item; ratings are on a 1.0 to 5.0 scale.
"""

from sqlalchemy.orm import Session

from core.logging import get_logger
from core.models.base import utcnow
from core.repositories import MenuItemRepository, ReviewRepository

from ..exceptions import DomainError, NotFoundError, PermissionDeniedError
from ..models import MenuItemReview, User
from ..schemas import MenuItemRatingResponse, ReviewCreate, ReviewResponse, ReviewUpdate

logger = get_logger("service.review")

MIN_RATING = 1.0
MAX_RATING = 5.0
UNKNOWN_AUTHOR = "Unknown"


def _check_rating(rating: float) -> None:
    if not MIN_RATING <= rating <= MAX_RATING:
        raise DomainError("Rating must be between 1.0 and 5.0")


def to_response(review: MenuItemReview, user_name: str | None) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        menu_item_id=review.menu_item_id,
        user_id=review.user_id,
        user_name=user_name or UNKNOWN_AUTHOR,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def _get_owned_review(db: Session, user: User, review_id: str) -> MenuItemReview:
    review = ReviewRepository(db).get_by_id(review_id)
    if review is None:
        raise NotFoundError("Review not found.")
    if review.user_id != user.id:
        raise PermissionDeniedError("You can only modify your own reviews.")
    return review


def add_review(db: Session, user: User, payload: ReviewCreate) -> ReviewResponse:
    if not MenuItemRepository(db).exists(payload.menu_item_id):
        raise DomainError("Menu item not found")
    _check_rating(payload.rating)

    reviews = ReviewRepository(db)
    if reviews.get_for_user(payload.menu_item_id, user.id) is not None:
        raise DomainError("User already has a review for this menu item. Use update instead.")

    review = reviews.create(
        menu_item_id=payload.menu_item_id,
        user_id=user.id,
        rating=payload.rating,
        comment=payload.comment,
    )
    logger.info("review_added", review_id=review.id, menu_item_id=review.menu_item_id)
    return to_response(review, user.name)


def update_review(db: Session, user: User, review_id: str, payload: ReviewUpdate) -> ReviewResponse:
    review = _get_owned_review(db, user, review_id)
    _check_rating(payload.rating)

    review.rating = payload.rating
    review.comment = payload.comment
    review.updated_at = utcnow()
    db.flush()
    logger.info("review_updated", review_id=review.id)
    return to_response(review, user.name)


def delete_review(db: Session, user: User, review_id: str) -> None:
    review = _get_owned_review(db, user, review_id)
    db.delete(review)
    db.flush()
    logger.info("review_deleted", review_id=review_id)


def list_reviews(db: Session, menu_item_id: str) -> list[ReviewResponse]:
    """Reviews of a menu item, newest first."""
    rows = ReviewRepository(db).list_for_menu_item(menu_item_id)
    return [to_response(review, user_name) for review, user_name in rows]


def get_user_review(db: Session, user: User, menu_item_id: str) -> ReviewResponse:
    review = ReviewRepository(db).get_for_user(menu_item_id, user.id)
    if review is None:
        raise NotFoundError("Review not found.")
    return to_response(review, user.name)


def get_rating(db: Session, menu_item_id: str) -> MenuItemRatingResponse:
    average, count = ReviewRepository(db).rating_summary(menu_item_id)
    return MenuItemRatingResponse(
        menu_item_id=menu_item_id,
        average_rating=round(average, 1) if average is not None else 0.0,
        total_reviews=count,
    )
