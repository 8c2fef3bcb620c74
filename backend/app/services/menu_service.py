"""
Menu management service functions.
"""

from sqlalchemy.orm import Session

from core.logging import get_logger
from core.repositories import MenuItemRepository, ReviewRepository

from ..exceptions import DomainError, NotFoundError
from ..models import MenuItem
from ..schemas import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from .upload_service import default_menu_image_url

logger = get_logger("service.menu")


def to_response(item: MenuItem, average: float | None = None, count: int = 0) -> MenuItemResponse:
    return MenuItemResponse(
        id=item.id,
        name=item.name,
        price=float(item.price),
        description=item.description,
        category=item.category,
        image_url=item.image_url,
        allergens=list(item.allergens or []),
        average_rating=round(average, 1) if average is not None else 0.0,
        review_count=count,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _apply_fields(item: MenuItem, payload: MenuItemCreate) -> None:
    item.name = payload.name
    item.price = payload.price
    item.description = payload.description
    item.category = payload.category
    item.image_url = payload.image_url or default_menu_image_url(payload.category)
    item.allergens = list(payload.allergens)


def list_menu_items(db: Session) -> list[MenuItemResponse]:
    """All items ordered by name, each with its rating summary."""
    items = MenuItemRepository(db).list_ordered()
    summaries = ReviewRepository(db).rating_summaries()
    return [to_response(item, *summaries.get(item.id, (None, 0))) for item in items]


def get_menu_item(db: Session, menu_item_id: str) -> MenuItemResponse:
    item = MenuItemRepository(db).get_by_id(menu_item_id)
    if item is None:
        raise NotFoundError("Menu item not found.")
    average, count = ReviewRepository(db).rating_summary(item.id)
    return to_response(item, average, count)


def create_menu_item(db: Session, payload: MenuItemCreate) -> MenuItem:
    item = MenuItem()
    _apply_fields(item, payload)
    db.add(item)
    db.flush()
    logger.info("menu_item_created", menu_item_id=item.id, category=item.category.value)
    return item


def update_menu_item(db: Session, menu_item_id: str, payload: MenuItemUpdate) -> MenuItemResponse:
    """Replace every editable field of an existing item."""
    if payload.id != menu_item_id:
        raise DomainError("Route id and body id do not match.")

    item = MenuItemRepository(db).get_by_id(menu_item_id)
    if item is None:
        raise NotFoundError("Menu item not found.")

    _apply_fields(item, payload)
    db.flush()
    logger.info("menu_item_updated", menu_item_id=item.id)

    average, count = ReviewRepository(db).rating_summary(item.id)
    return to_response(item, average, count)


def delete_menu_item(db: Session, menu_item_id: str) -> None:
    """Delete an item; order lines keep their price and lose the link."""
    if not MenuItemRepository(db).delete(menu_item_id):
        raise NotFoundError("Menu item not found.")
    logger.info("menu_item_deleted", menu_item_id=menu_item_id)
