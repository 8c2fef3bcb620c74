"""Menu item and review repositories."""

from sqlalchemy import func

from core.models import MenuItem, MenuItemReview, User

from .base import BaseRepository


class MenuItemRepository(BaseRepository[MenuItem]):
    """Repository for MenuItem operations."""

    model = MenuItem

    def list_ordered(self) -> list[MenuItem]:
        return self.session.query(MenuItem).order_by(MenuItem.name.asc()).all()

    def get_many(self, ids: list[str]) -> dict[str, MenuItem]:
        """Fetch menu items by ID in one query, keyed by ID."""
        if not ids:
            return {}
        items = self.session.query(MenuItem).filter(MenuItem.id.in_(set(ids))).all()
        return {item.id: item for item in items}


class ReviewRepository(BaseRepository[MenuItemReview]):
    """Repository for MenuItemReview operations."""

    model = MenuItemReview

    def get_for_user(self, menu_item_id: str, user_id: str) -> MenuItemReview | None:
        return (
            self.session.query(MenuItemReview)
            .filter(
                MenuItemReview.menu_item_id == menu_item_id,
                MenuItemReview.user_id == user_id,
            )
            .first()
        )

    def list_for_menu_item(self, menu_item_id: str) -> list[tuple[MenuItemReview, str | None]]:
        """Reviews of an item, newest first, each paired with the author's name."""
        return (
            self.session.query(MenuItemReview, User.name)
            .outerjoin(User, User.id == MenuItemReview.user_id)
            .filter(MenuItemReview.menu_item_id == menu_item_id)
            .order_by(MenuItemReview.created_at.desc())
            .all()
        )

    def rating_summary(self, menu_item_id: str) -> tuple[float | None, int]:
        """Return (average rating or None, review count) for one item."""
        avg, total = (
            self.session.query(func.avg(MenuItemReview.rating), func.count(MenuItemReview.id))
            .filter(MenuItemReview.menu_item_id == menu_item_id)
            .one()
        )
        return (float(avg) if avg is not None else None), int(total or 0)

    def rating_summaries(self) -> dict[str, tuple[float, int]]:
        """Average rating and count for every reviewed item, in one grouped query."""
        rows = (
            self.session.query(
                MenuItemReview.menu_item_id,
                func.avg(MenuItemReview.rating),
                func.count(MenuItemReview.id),
            )
            .group_by(MenuItemReview.menu_item_id)
            .all()
        )
        return {row[0]: (float(row[1]), int(row[2])) for row in rows}
