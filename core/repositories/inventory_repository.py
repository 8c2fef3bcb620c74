"""Inventory repositories."""

from sqlalchemy import func

from core.models import Ingredient

from .base import BaseRepository


class IngredientRepository(BaseRepository[Ingredient]):
    """Repository for Ingredient operations."""

    model = Ingredient

    def get_by_name(self, name: str) -> Ingredient | None:
        """Case-insensitive lookup by name."""
        return (
            self.session.query(Ingredient)
            .filter(func.lower(Ingredient.name) == name.strip().lower())
            .first()
        )

    def list_ordered(self) -> list[Ingredient]:
        return self.session.query(Ingredient).order_by(Ingredient.name.asc()).all()
